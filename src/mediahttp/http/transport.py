"""Transport backed by requests."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator, Mapping
from types import TracebackType
from typing import Any, Optional

import requests

from ..exceptions import TransportError
from .protocols import TransportResponse

logger = logging.getLogger(__name__)


class _ResponseStream(io.RawIOBase):
    """Readable stream over a streamed requests response."""

    def __init__(self, response: requests.Response, chunk_size: int = 8192) -> None:
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_content(chunk_size=chunk_size)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


class RequestsTransport:
    """
    Transport that sends requests through a ``requests.Session``.

    Responses are streamed: headers are available as soon as
    ``send`` returns and the body is read lazily from the returned stream.

    Example:
        transport = RequestsTransport(timeout=10.0)

        with transport:
            response = transport.send("GET", "https://example.com", headers={})
            data = response.body.read()
            response.body.close()
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = 30.0,
        proxy: Optional[str] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            session: Session to use (a new one is created if omitted)
            timeout: Request timeout in seconds, None to wait forever
            proxy: Proxy URL applied to http and https
        """
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._timeout = timeout
        self._proxies = {"http": proxy, "https": proxy} if proxy else None

    def __enter__(self) -> RequestsTransport:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
    ) -> TransportResponse:
        """
        Send a request and return once the response headers arrive.

        Raises:
            TransportError: On connection, timeout or protocol failures
        """
        try:
            response = self._session.request(
                method,
                url,
                headers=dict(headers),
                data=body,
                timeout=self._timeout,
                proxies=self._proxies,
                stream=True,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=io.BufferedReader(_ResponseStream(response)),
            reason=response.reason or "",
            url=response.url,
        )

    def close(self) -> None:
        """Close the session if this transport created it."""
        if self._owns_session:
            self._session.close()
