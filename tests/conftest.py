"""Shared fixtures: an in-memory transport and a local HTTP server."""

import io
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional
from urllib.parse import urlsplit

import pytest
from mediahttp import Client, CodecRegistry, TransportResponse
from mediahttp.mediatype import register_builtin_codecs


class TrackingStream(io.BytesIO):
    """BytesIO that counts close() calls."""

    def __init__(self, data: bytes = b"") -> None:
        super().__init__(data)
        self.close_count = 0

    def close(self) -> None:
        self.close_count += 1
        super().close()


@dataclass
class SentRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: Optional[bytes]


@dataclass
class FakeTransport:
    """Transport that records requests and replays one canned response."""

    status: int = 200
    reason: str = "OK"
    headers: dict[str, str] = field(default_factory=dict)
    payload: bytes = b""
    error: Optional[Exception] = None
    sent: list[SentRequest] = field(default_factory=list)
    streams: list[TrackingStream] = field(default_factory=list)
    closed: bool = False

    def respond(
        self,
        status: int = 200,
        payload: bytes = b"",
        content_type: Optional[str] = None,
        reason: str = "OK",
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.status = status
        self.payload = payload
        self.reason = reason
        self.headers = dict(headers or {})
        if content_type is not None:
            self.headers["Content-Type"] = content_type

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
    ) -> TransportResponse:
        self.sent.append(SentRequest(method, url, dict(headers), body))
        if self.error is not None:
            raise self.error
        stream = TrackingStream(self.payload)
        self.streams.append(stream)
        return TransportResponse(
            status_code=self.status,
            headers=dict(self.headers),
            body=stream,
            reason=self.reason,
            url=url,
        )

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> SentRequest:
        return self.sent[-1]

    @property
    def last_stream(self) -> TrackingStream:
        return self.streams[-1]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def registry():
    registry = CodecRegistry()
    register_builtin_codecs(registry)
    return registry


@pytest.fixture
def client(transport, registry):
    return Client("https://api.example.com/?a=1&b=1", transport=transport, registry=registry)


@dataclass
class ReceivedRequest:
    method: str
    path: str
    headers: dict[str, str]
    body: bytes


class _RouteHandler(BaseHTTPRequestHandler):
    def _dispatch(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        self.server.received.append(ReceivedRequest(self.command, self.path, dict(self.headers), body))

        route = self.server.routes.get((self.command, urlsplit(self.path).path))
        if route is None:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return

        status, content_type, payload = route
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    do_GET = do_HEAD = do_POST = do_PUT = do_PATCH = do_DELETE = do_OPTIONS = _dispatch

    def log_message(self, format, *args):  # noqa: A002
        pass


@pytest.fixture
def no_proxy(monkeypatch):
    """Keep proxy settings from the environment away from local sockets."""
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def server(no_proxy):
    """Threaded local HTTP server; tests register routes on ``server.routes``."""
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _RouteHandler)
    httpd.routes = {}
    httpd.received = []
    httpd.base_url = f"http://127.0.0.1:{httpd.server_address[1]}"
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()
