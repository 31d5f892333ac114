"""hashstatic: content-hashed filenames for static assets, and a server that trusts them."""

__version__ = "0.1.0"

from hashstatic.naming import format_name, parse_name, is_hashed_name, DIGEST_HEX_LEN
from hashstatic.digest import sha256_bytes, sha256_stream
from hashstatic.store import DirStore, MemoryStore, FileInfo, InvalidPathError
from hashstatic.cache import HashFS, Resolved, CacheEntry
from hashstatic.server import FileServer, StaticResponse, create_app

__all__ = [
    "format_name", "parse_name", "is_hashed_name", "DIGEST_HEX_LEN",
    "sha256_bytes", "sha256_stream",
    "DirStore", "MemoryStore", "FileInfo", "InvalidPathError",
    "HashFS", "Resolved", "CacheEntry",
    "FileServer", "StaticResponse", "create_app",
]
