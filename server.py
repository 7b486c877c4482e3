"""Read-only HTTP server for a mounted record, built on http.server."""

import io
import re
from email.utils import formatdate, parsedate_to_datetime
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from urllib.parse import unquote, urlparse

from errors import NotFoundError, StructFSError
from structfs import StructFS

ALLOW = "OPTIONS, GET, HEAD"
_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


def _strip_prefix(path: str, prefix: str) -> str | None:
    """Remove prefix from a decoded URL path. Returns None if path is outside it."""
    if prefix in ("", "/"):
        return path
    bare = prefix.rstrip("/")
    if path == bare:
        return "/"
    if not path.startswith(bare + "/"):
        return None
    return path[len(bare):]


def parse_range(header: str, size: int) -> tuple[int, int] | None:
    """Parse a single byte range against size.

    Returns (start, end) with end exclusive, or None to serve the full body.
    Raises ValueError if the range cannot be satisfied.
    """
    m = _RANGE_RE.match(header.strip())
    if m is None:
        return None
    first, last = m.groups()
    if not first and not last:
        return None
    if not first:
        # Suffix form: the last n bytes
        n = int(last)
        if n == 0:
            raise ValueError("empty suffix range")
        return max(size - n, 0), size
    start = int(first)
    if start >= size:
        raise ValueError("range starts past end")
    end = size if not last else min(int(last) + 1, size)
    if end <= start:
        raise ValueError("range ends before start")
    return start, end


def _not_modified(stat, header: str | None) -> bool:
    if not header:
        return False
    try:
        since = parsedate_to_datetime(header)
    except (TypeError, ValueError):
        return False
    if since is None:
        return False
    return int(stat.mtime) <= since.timestamp()


class StructFSHandler(BaseHTTPRequestHandler):
    """HTTP request handler serving rendered fields as flat byte streams."""

    fs: StructFS
    prefix: str = "/"
    verbose: bool = False

    def log_message(self, format, *args):
        if self.verbose:
            super().log_message(format, *args)

    def _send(self, status: int, body: bytes, content_type: str, include_body: bool = True,
              headers: dict | None = None):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        if include_body:
            self.wfile.write(body)

    def _request_path(self) -> str | None:
        path = unquote(urlparse(self.path).path)
        if not path.startswith("/"):
            path = "/" + path
        return _strip_prefix(path, self.prefix)

    def do_OPTIONS(self):
        self.send_response(200)
        self.send_header("Allow", ALLOW)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self):
        self._handle_get(include_body=True)

    def do_HEAD(self):
        self._handle_get(include_body=False)

    def _open(self, path: str, include_body: bool):
        """Open path on the mount. On errors, send an error response and return None."""
        try:
            return self.fs.open(path)
        except NotFoundError:
            self._send(404, b"Not Found", "text/plain", include_body)
            return None
        except StructFSError as e:
            self._send(500, str(e).encode(), "text/plain", include_body)
            return None

    def _handle_get(self, include_body: bool):
        path = self._request_path()
        if path is None:
            return self._send(404, b"Not Found", "text/plain", include_body)

        f = self._open(path, include_body)
        if f is None:
            return
        with f:
            self._serve_content(f, include_body)

    def _serve_content(self, f, include_body: bool):
        st = f.stat()
        headers = {
            "Accept-Ranges": "bytes",
            "Last-Modified": formatdate(st.mtime, usegmt=True),
        }

        if _not_modified(st, self.headers.get("If-Modified-Since")):
            self.send_response(304)
            for name, value in headers.items():
                self.send_header(name, value)
            self.end_headers()
            return

        status = 200
        start, end = 0, st.size
        range_header = self.headers.get("Range")
        if range_header:
            try:
                span = parse_range(range_header, st.size)
            except ValueError:
                headers["Content-Range"] = f"bytes */{st.size}"
                return self._send(416, b"Requested Range Not Satisfiable", "text/plain",
                                  include_body, headers)
            if span is not None:
                start, end = span
                status = 206
                headers["Content-Range"] = f"bytes {start}-{end - 1}/{st.size}"

        f.seek(start, io.SEEK_SET)
        body = f.read(end - start)
        self._send(status, body, "application/octet-stream", include_body, headers)

    def _method_not_allowed(self):
        self.send_response(405)
        self.send_header("Allow", ALLOW)
        self.send_header("Content-Length", "0")
        self.end_headers()

    do_PUT = lambda self: self._method_not_allowed()
    do_DELETE = lambda self: self._method_not_allowed()
    do_POST = lambda self: self._method_not_allowed()
    do_PATCH = lambda self: self._method_not_allowed()
    do_MKCOL = lambda self: self._method_not_allowed()
    do_MOVE = lambda self: self._method_not_allowed()
    do_COPY = lambda self: self._method_not_allowed()


def make_server(fs: StructFS, host: str = "localhost", port: int = 8080,
                prefix: str = "/", verbose: bool = False) -> ThreadingHTTPServer:
    """Create an HTTP server for the given mount, serving it under prefix."""
    handler_class = type("Handler", (StructFSHandler,), {
        "fs": fs,
        "prefix": prefix,
        "verbose": verbose,
    })
    return ThreadingHTTPServer((host, port), handler_class)
