"""Client holding the base URL, defaults and collaborators for requests."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Optional, TypeVar
from urllib.parse import urljoin, urlsplit, urlunsplit

from ..mediatype import CodecRegistry, default_registry
from .protocols import Transport
from .query import QueryParams
from .request import Request
from .transport import RequestsTransport

if TYPE_CHECKING:
    from ..models.config import ClientConfig

logger = logging.getLogger(__name__)

E = TypeVar("E")


class Client:
    """
    Entry point for building requests against one API.

    A query string on ``base_url`` becomes the client-wide default query,
    which every request starts from.

    Example:
        with Client("https://api.example.com/?per_page=50") as client:
            request = client.new_request("users/sawyer", error_target=ApiError())
            response = request.get(User)
            user = response.data
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: Optional[Transport] = None,
        registry: Optional[CodecRegistry] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: URL that relative request URLs resolve against
            transport: Transport to send requests with (requests-based by default)
            registry: Codec registry (the process-wide default if omitted)
            headers: Headers added to every request
        """
        parts = urlsplit(base_url)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Base URL must be absolute: {base_url!r}")

        self.base_url = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
        self.query = QueryParams.from_string(parts.query)
        self.headers: dict[str, str] = dict(headers or {})
        self.registry = registry if registry is not None else default_registry()
        self._owns_transport = transport is None
        self.transport: Transport = transport if transport is not None else RequestsTransport()

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        transport: Optional[Transport] = None,
        registry: Optional[CodecRegistry] = None,
    ) -> Client:
        """Build a client from a ClientConfig."""
        owns_transport = transport is None
        if owns_transport:
            transport = RequestsTransport(timeout=config.network.timeout, proxy=config.network.proxy)
        client = cls(config.base_url, transport=transport, registry=registry, headers=config.default_headers())
        client._owns_transport = owns_transport
        return client

    def resolve_reference(self, rawurl: str) -> str:
        """Resolve ``rawurl`` against the base URL."""
        return urljoin(self.base_url, rawurl)

    def new_request(self, rawurl: str, error_target: Optional[E] = None) -> Request[E]:
        """
        Create a request for ``rawurl``.

        Args:
            rawurl: URL relative to the base URL, or absolute
            error_target: Where to decode the body of a >= 400 response

        Returns:
            Request carrying this client's default query and headers
        """
        url = self.resolve_reference(rawurl)
        logger.debug(f"New request for {url}")
        return Request(
            url,
            transport=self.transport,
            registry=self.registry,
            query=self.query,
            headers=self.headers,
            error_target=error_target,
        )

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
