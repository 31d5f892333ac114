"""server.py - serve files from a HashFS over HTTP.

FileServer is the framework-free part: method + path in, status +
headers + body iterator out. create_app() puts it behind a FastAPI
catch-all route so uvicorn (or any ASGI server) can host it.

a request for a verified hashed name is cached by the client for a
year and tagged with the digest as its ETag. a plain name is served
with no caching headers at all. there is no directory listing, no
index.html, no ranges and no conditional requests.

    GET /js/app-<digest>.js  -> 200, Cache-Control: immutable, ETag
    GET /js/app.js           -> 200, no Cache-Control
    GET /js/app-000...000.js -> 404
    GET /js                  -> 403
"""

import mimetypes
import posixpath
from dataclasses import dataclass, field
from email.utils import formatdate
from typing import Iterable, Iterator, Optional

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import Response, StreamingResponse

from hashstatic.cache import HashFS
from hashstatic.config import IMMUTABLE_CACHE_CONTROL
from hashstatic.log import debug, span, warn
from hashstatic.store import StoreFile

BODY_CHUNK = 64 * 1024

ALLOWED_METHODS = ("GET", "HEAD")

_MIME = mimetypes.MimeTypes()  # built-in table only, same answer on every host
_CHARSET_TYPES = {"application/javascript", "application/json", "image/svg+xml"}


@dataclass
class StaticResponse:
    """what to send back. body is empty for errors and HEAD."""
    status: int
    headers: dict = field(default_factory=dict)
    body: Iterable[bytes] = ()
    streams: bool = False  # body is an open file, drain it or close() it

    def close(self):
        close = getattr(self.body, "close", None)
        if close is not None:
            close()


# ============================================================
# HELPERS
# ============================================================

def clean_path(raw: str) -> str:
    """url path -> store path. "/" is the root ".", ".." never climbs past it."""
    name = raw.lstrip("/")
    if not name:
        return "."
    cleaned = posixpath.normpath("/" + name).lstrip("/")
    return cleaned or "."


def content_type(name: str) -> Optional[str]:
    """mime type from the last extension. None when unknown."""
    ext = posixpath.splitext(name)[1].lower()
    if not ext:
        return None
    ctype, _ = _MIME.guess_type("file" + ext, strict=False)
    if ctype is None:
        return None
    if ctype.startswith("text/") or ctype in _CHARSET_TYPES:
        return f"{ctype}; charset=utf-8"
    return ctype


class FileBody:
    """a store file read out in chunks. closed once drained, or by close()."""

    def __init__(self, f: StoreFile, chunk_size: int = BODY_CHUNK):
        self._f = f
        self._chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        try:
            while True:
                chunk = self._f.read(self._chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self._f.close()

    def close(self):
        self._f.close()


def _error(status: int, text: str, head: bool = False, extra: dict = None) -> StaticResponse:
    body = f"{text}\n".encode()
    headers = {
        "Content-Type": "text/plain; charset=utf-8",
        "X-Content-Type-Options": "nosniff",
        "Content-Length": str(len(body)),
    }
    headers.update(extra or {})
    return StaticResponse(status=status, headers=headers, body=() if head else (body,))


def not_found(head: bool = False) -> StaticResponse:
    return _error(404, "404 page not found", head)


def forbidden(head: bool = False) -> StaticResponse:
    return _error(403, "403 Forbidden", head)


def internal_error(head: bool = False) -> StaticResponse:
    return _error(500, "500 Internal Server Error", head)


# ============================================================
# FILE SERVER
# ============================================================

class FileServer:
    """answers GET and HEAD for files in a HashFS.

    a plain store gets wrapped in its own HashFS. pass a HashFS to share
    one name cache between the server and, say, a template layer.
    """

    def __init__(self, fs, cache_control: str = IMMUTABLE_CACHE_CONTROL):
        self.fs: HashFS = fs if isinstance(fs, HashFS) else HashFS(fs)
        self.cache_control = cache_control

    def serve(self, method: str, raw_path: str) -> StaticResponse:
        method = method.upper()
        if method not in ALLOWED_METHODS:
            return _error(405, "405 Method Not Allowed",
                          extra={"Allow": ", ".join(ALLOWED_METHODS)})
        head = method == "HEAD"
        name = clean_path(raw_path)

        with span("serve", subsystem="server", method=method, path=name) as s:
            try:
                f, resolved = self.fs.open_resolved(name)
            except (FileNotFoundError, NotADirectoryError):
                s.set_attribute("hashstatic.status", "404")
                return not_found(head)
            except IsADirectoryError:
                s.set_attribute("hashstatic.status", "403")
                return forbidden(head)
            except OSError as e:
                warn("server", f"open {name}: {e}")
                s.set_attribute("hashstatic.status", "500")
                return internal_error(head)

            try:
                info = f.stat()
            except OSError as e:
                f.close()
                warn("server", f"stat {name}: {e}")
                s.set_attribute("hashstatic.status", "500")
                return internal_error(head)
            if info.is_dir:
                f.close()
                s.set_attribute("hashstatic.status", "403")
                return forbidden(head)

            headers = {}
            ctype = content_type(resolved.path)
            if ctype:
                headers["Content-Type"] = ctype
            if resolved.verified:
                headers["Cache-Control"] = self.cache_control
                headers["ETag"] = f'"{resolved.digest}"'
            if info.mod_time is not None:
                headers["Last-Modified"] = formatdate(info.mod_time, usegmt=True)
            headers["Content-Length"] = str(info.size)

            s.set_attribute("hashstatic.status", "200")
            s.set_attribute("hashstatic.verified", str(resolved.verified))
            debug("server", f"{method} {name} -> {resolved.path}",
                  verified=resolved.verified)

        if head:
            f.close()
            return StaticResponse(status=200, headers=headers)
        return StaticResponse(status=200, headers=headers, body=FileBody(f), streams=True)


# ============================================================
# ASGI APP
# ============================================================

def _to_asgi(resp: StaticResponse) -> Response:
    if resp.streams:
        # also runs when the client disconnects mid-stream
        cleanup = BackgroundTasks()
        cleanup.add_task(resp.close)
        return StreamingResponse(resp.body, status_code=resp.status, headers=resp.headers,
                                 background=cleanup)
    return Response(content=b"".join(resp.body), status_code=resp.status, headers=resp.headers)


def create_app(fs, cache_control: str = IMMUTABLE_CACHE_CONTROL) -> FastAPI:
    """FastAPI app that serves every path from fs.

    fs may be a FileServer, a HashFS, or any plain store.
    """
    server = fs if isinstance(fs, FileServer) else FileServer(fs, cache_control=cache_control)

    app = FastAPI(title="hashstatic", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.file_server = server

    @app.api_route(
        "/{filename:path}",
        methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        include_in_schema=False,
    )
    def serve_file(request: Request, filename: str):
        # filename excludes any mount prefix and keeps encoded "?" and "#"
        return _to_asgi(server.serve(request.method, "/" + filename))

    return app
