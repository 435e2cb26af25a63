"""Protocol definitions for the HTTP transport abstraction."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import IO, Optional, Protocol


@dataclass
class TransportResponse:
    """
    Raw response handed back by a Transport.

    Attributes:
        status_code: HTTP status code (200, 404, etc.)
        headers: Response headers, looked up case-insensitively
        body: Unread binary stream; the receiver owns it and must close it
        reason: Reason phrase sent by the server
        url: Final URL of the response
    """

    status_code: int
    headers: Mapping[str, str]
    body: IO[bytes]
    reason: str = ""
    url: str = ""


class Transport(Protocol):
    """
    Protocol for HTTP transports.

    This abstraction allows for:
    - In-memory fakes in tests
    - Different backends behind the same request/response pipeline
    - Leaving pooling, TLS, redirects and retries to the backend
    """

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
    ) -> TransportResponse:
        """
        Send one request and wait for the response headers.

        Args:
            method: HTTP verb
            url: Fully resolved URL including the query string
            headers: Outgoing headers
            body: Request body, if any

        Returns:
            TransportResponse with an unread body stream

        Raises:
            TransportError: When no response could be obtained
        """
        ...

    def close(self) -> None:
        """Release any pooled connections."""
        ...
