"""Shared test fixtures."""

import pytest

from hashstatic.cache import HashFS
from hashstatic.store import DirStore, MemoryStore

BAZ_HTML = b"<html></html>"
BAZ_DIGEST = "b633a587c652d02386c4f16f8c6f6aab7352d97f16367c3c40576214372dd628"
BAZ_HASHED = f"testdata/baz-{BAZ_DIGEST}.html"


@pytest.fixture
def memory_store():
    return MemoryStore({
        "testdata/baz.html": BAZ_HTML,
        "testdata/css/site.css": b"body { margin: 0 }",
        "testdata/archive.tar.gz": b"\x1f\x8b not really gzip",
        "README": b"no extension",
    }, mod_time=1_700_000_000)


@pytest.fixture
def dir_store(tmp_path):
    (tmp_path / "testdata" / "css").mkdir(parents=True)
    (tmp_path / "testdata" / "baz.html").write_bytes(BAZ_HTML)
    (tmp_path / "testdata" / "css" / "site.css").write_bytes(b"body { margin: 0 }")
    (tmp_path / "README").write_bytes(b"no extension")
    return DirStore(tmp_path)


@pytest.fixture
def hashfs(memory_store):
    return HashFS(memory_store)
