"""store.py - the read-only file trees that hashstatic wraps.

a store opens files by "/"-separated relative path, reads them whole,
and stats them. nothing here ever writes.

errors are the builtin OSError family so callers can tell them apart
the usual way: FileNotFoundError, IsADirectoryError, PermissionError.
a path that tries to leave the tree raises InvalidPathError.

DirStore is a directory on disk. MemoryStore is a dict of bytes,
handy for tests and for assets bundled into a package.
"""

import errno
import io
import os
import stat
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Protocol


class InvalidPathError(OSError):
    """path is absolute, has empty elements, or climbs with "..". """

    def __init__(self, path: str):
        super().__init__(errno.EINVAL, "invalid path", path)


def valid_path(name: str) -> bool:
    """unrooted, slash-separated, no ".", "..", or empty elements.

    "." alone names the root of the tree.
    """
    if name == ".":
        return True
    if not name:
        return False
    for elem in name.split("/"):
        if elem in ("", ".", ".."):
            return False
    return True


def check_path(name: str) -> str:
    if not valid_path(name):
        raise InvalidPathError(name)
    return name


@dataclass(frozen=True)
class FileInfo:
    """what stat() knows about a path."""
    name: str
    size: int
    is_dir: bool = False
    mod_time: Optional[float] = None  # unix seconds, None if unknown


# ============================================================
# OPEN HANDLES
# ============================================================

class StoreFile:
    """an open file from a store. read it, stat it, close it."""

    def read(self, size: int = -1) -> bytes:
        raise NotImplementedError

    def stat(self) -> FileInfo:
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class _DirFile(StoreFile):
    """handle on a directory. stat works, read does not."""

    def __init__(self, info: FileInfo):
        self._info = info

    def read(self, size: int = -1) -> bytes:
        raise IsADirectoryError(errno.EISDIR, "is a directory", self._info.name)

    def stat(self) -> FileInfo:
        return self._info


class _DiskFile(StoreFile):

    def __init__(self, name: str, fh):
        self._name = name
        self._fh = fh

    def read(self, size: int = -1) -> bytes:
        return self._fh.read(size)

    def stat(self) -> FileInfo:
        st = os.fstat(self._fh.fileno())
        return FileInfo(name=self._name, size=st.st_size,
                        is_dir=False, mod_time=st.st_mtime)

    def close(self):
        self._fh.close()


class _MemoryFile(StoreFile):

    def __init__(self, info: FileInfo, data: bytes):
        self._info = info
        self._buf = io.BytesIO(data)

    def read(self, size: int = -1) -> bytes:
        return self._buf.read(size)

    def stat(self) -> FileInfo:
        return self._info

    def close(self):
        self._buf.close()


# ============================================================
# STORES
# ============================================================

class Store(Protocol):
    def open(self, name: str) -> StoreFile: ...

    def read_bytes(self, name: str) -> bytes: ...

    def stat(self, name: str) -> FileInfo: ...


def _base(name: str) -> str:
    return name.rsplit("/", 1)[-1]


class DirStore:
    """read-only view of a directory on disk."""

    def __init__(self, root):
        self.root = Path(root)

    def __repr__(self):
        return f"DirStore({str(self.root)!r})"

    def _path(self, name: str) -> Path:
        """map a tree path to disk. symlinks may not point outside root."""
        check_path(name)
        candidate = self.root / name
        root_resolved = self.root.resolve()
        resolved = candidate.resolve()
        if resolved != root_resolved and root_resolved not in resolved.parents:
            raise PermissionError(errno.EACCES, "outside of store root", name)
        return candidate

    def open(self, name: str) -> StoreFile:
        p = self._path(name)
        if p.is_dir():
            return _DirFile(self.stat(name))
        return _DiskFile(_base(name), open(p, "rb"))

    def read_bytes(self, name: str) -> bytes:
        return self._path(name).read_bytes()

    def stat(self, name: str) -> FileInfo:
        st = self._path(name).stat()
        return FileInfo(name=_base(name), size=st.st_size,
                        is_dir=stat.S_ISDIR(st.st_mode), mod_time=st.st_mtime)

    def walk(self) -> Iterator[str]:
        """every regular file under root, as sorted tree paths."""
        for p in sorted(self.root.rglob("*")):
            if p.is_file():
                yield p.relative_to(self.root).as_posix()


class MemoryStore:
    """read-only tree held in a dict of path -> bytes.

    directories are implied by the file paths. "." is the root.
    """

    def __init__(self, files: dict = None, mod_time: float = None):
        self._files = dict(files or {})
        for name in self._files:
            check_path(name)
        self._mod_time = mod_time if mod_time is not None else time.time()

    def __repr__(self):
        return f"MemoryStore({len(self._files)} files)"

    def _is_dir(self, name: str) -> bool:
        if name == ".":
            return True
        prefix = name + "/"
        return any(k.startswith(prefix) for k in self._files)

    def open(self, name: str) -> StoreFile:
        info = self.stat(name)
        if info.is_dir:
            return _DirFile(info)
        return _MemoryFile(info, self._files[name])

    def read_bytes(self, name: str) -> bytes:
        info = self.stat(name)
        if info.is_dir:
            raise IsADirectoryError(errno.EISDIR, "is a directory", name)
        return self._files[name]

    def stat(self, name: str) -> FileInfo:
        check_path(name)
        if name in self._files:
            return FileInfo(name=_base(name), size=len(self._files[name]),
                            is_dir=False, mod_time=self._mod_time)
        if self._is_dir(name):
            return FileInfo(name=_base(name), size=0,
                            is_dir=True, mod_time=self._mod_time)
        raise FileNotFoundError(errno.ENOENT, "no such file", name)

    def walk(self) -> Iterator[str]:
        yield from sorted(self._files)
