"""cache.py - the hashed-name cache.

HashFS wraps a read-only store and remembers, for every path it has
hashed, the hashed name and the digest behind it:

    forward:  "js/app.js"         -> "js/app-<digest>.js"
    reverse:  "js/app-<digest>.js" -> ("js/app.js", <digest>)

entries are filled lazily, the first time a name is asked for, and
never evicted. published assets are treated as immutable for the life
of the process. one reader/writer lock guards both maps; concurrent
misses on the same path may both hash it, which is harmless since they
write the same answer.

a HashFS is itself a store: open/read_bytes/stat accept hashed names
and serve the underlying file.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from hashstatic.digest import sha256_stream
from hashstatic.locks import RWLock
from hashstatic.log import debug, span
from hashstatic.naming import format_name, parse_name
from hashstatic.store import FileInfo, Store, StoreFile


@dataclass(frozen=True)
class CacheEntry:
    """one hashed file."""
    path: str     # plain path in the store
    hashed: str   # path with digest embedded
    digest: str   # sha256 hex of the content when first hashed


@dataclass(frozen=True)
class Resolved:
    """where a requested name lands in the store.

    verified means the name carried a digest and it matched the content.
    digest is only set when verified.
    """
    path: str
    verified: bool = False
    digest: str = ""


class HashFS:
    """content-addressed names over a read-only store."""

    def __init__(self, store: Store):
        self._store = store
        self._lock = RWLock()
        self._forward: dict[str, str] = {}
        self._reverse: dict[str, CacheEntry] = {}

        self._stats_lock = threading.Lock()
        self._total_hits = 0
        self._total_misses = 0
        self._total_failed = 0

    def __repr__(self):
        return f"HashFS({self._store!r})"

    @property
    def store(self) -> Store:
        return self._store

    def _count(self, hits: int = 0, misses: int = 0, failed: int = 0):
        with self._stats_lock:
            self._total_hits += hits
            self._total_misses += misses
            self._total_failed += failed

    # ============================================================
    # NAMES
    # ============================================================

    def hash_name(self, name: str) -> str:
        """hashed name for a plain path, or the path itself if it can't be read."""
        with self._lock.read():
            hashed = self._forward.get(name)
        if hashed:
            self._count(hits=1)
            return hashed

        self._count(misses=1)
        with span("hash_name", subsystem="cache", path=name):
            try:
                with self._store.open(name) as f:
                    digest = sha256_stream(f)
            except OSError as e:
                self._count(failed=1)
                debug("cache", f"no hash for {name}: {e}")
                return name

            hashed = format_name(name, digest)
            with self._lock.write():
                self._forward[name] = hashed
                self._reverse[hashed] = CacheEntry(path=name, hashed=hashed, digest=digest)
            debug("cache", f"hashed {name} -> {hashed}")
        return hashed

    def parse_name(self, filename: str) -> tuple[str, str]:
        """like naming.parse_name, but answers from the cache when it can."""
        with self._lock.read():
            entry = self._reverse.get(filename)
        if entry is not None:
            return entry.path, entry.digest
        return parse_name(filename)

    def hash_names(self, names: list[str], max_workers: int = 8) -> dict[str, str]:
        """hash many paths at once. returns {plain: hashed} in input order."""
        if len(names) <= 2:
            return {n: self.hash_name(n) for n in names}
        with ThreadPoolExecutor(max_workers=min(max_workers, len(names))) as pool:
            hashed = list(pool.map(self.hash_name, names))
        return dict(zip(names, hashed))

    def manifest(self, max_workers: int = 8) -> dict[str, str]:
        """hashed names for every file in the store."""
        walk = getattr(self._store, "walk", None)
        if walk is None:
            raise TypeError(f"{self._store!r} can't list its files")
        return self.hash_names(list(walk()), max_workers=max_workers)

    # ============================================================
    # RESOLVE AND OPEN
    # ============================================================

    def resolve(self, name: str) -> Resolved:
        """map a requested name to the store path that should be opened.

        a hashed name whose digest doesn't match the current content is
        not rejected here: it resolves to itself, unverified, and will
        almost always fail to open.
        """
        with self._lock.read():
            entry = self._reverse.get(name)
        if entry is not None:
            self._count(hits=1)
            return Resolved(path=entry.path, verified=True, digest=entry.digest)

        base, digest = parse_name(name)
        if digest and self.hash_name(base) == name:
            return Resolved(path=base, verified=True, digest=digest)
        return Resolved(path=name)

    def open_resolved(self, name: str) -> tuple[StoreFile, Resolved]:
        """resolve then open. store errors propagate as-is."""
        resolved = self.resolve(name)
        return self._store.open(resolved.path), resolved

    # store protocol, so a HashFS can stand in wherever a store is wanted

    def open(self, name: str) -> StoreFile:
        return self.open_resolved(name)[0]

    def read_bytes(self, name: str) -> bytes:
        return self._store.read_bytes(self.resolve(name).path)

    def stat(self, name: str) -> FileInfo:
        return self._store.stat(self.resolve(name).path)

    # ============================================================
    # DIAGNOSTICS
    # ============================================================

    def lookup(self, hashed: str) -> Optional[CacheEntry]:
        with self._lock.read():
            return self._reverse.get(hashed)

    def stats(self) -> dict:
        """cache statistics."""
        with self._lock.read():
            entries = len(self._forward)
        with self._stats_lock:
            hits, misses, failed = self._total_hits, self._total_misses, self._total_failed
        total = hits + misses
        return {
            "entries": entries,
            "hits": hits,
            "misses": misses,
            "failed": failed,
            "hit_rate": hits / total if total > 0 else 0.0,
        }

    def __contains__(self, name: str) -> bool:
        with self._lock.read():
            return name in self._forward or name in self._reverse
