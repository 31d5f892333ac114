"""digest.py - the content hash behind every hashed name.

sha256, hex-encoded. 64 lowercase characters, always.
"""

import hashlib
from typing import BinaryIO

CHUNK_SIZE = 1024 * 1024


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_stream(f: BinaryIO, chunk_size: int = CHUNK_SIZE) -> str:
    """hash a readable without loading it all into memory."""
    h = hashlib.sha256()
    while True:
        b = f.read(chunk_size)
        if not b:
            break
        h.update(b)
    return h.hexdigest()
