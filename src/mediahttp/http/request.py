"""Request building and verb dispatch."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Generic, Optional, TypeVar
from urllib.parse import urlsplit, urlunsplit

from requests.structures import CaseInsensitiveDict

from ..exceptions import TransportError
from ..mediatype import CodecRegistry, MediaType
from .protocols import Transport
from .query import QueryParams
from .response import Response

logger = logging.getLogger(__name__)

E = TypeVar("E")


class Method(str, Enum):
    """HTTP verbs a Request can execute."""

    HEAD = "HEAD"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"


class Request(Generic[E]):
    """
    Single HTTP request against a resolved URL.

    The query string of ``url`` is folded into ``query`` on top of any
    defaults passed in; ``query.set`` then overrides both. A request is
    executed once: its body is handed to the transport and not kept for
    a second send.

    Example:
        request = client.new_request("users", error_target=ApiError())
        request.set_body(parse("application/json"), {"login": "sawyer"})

        response = request.post(User)
        if response.is_error():
            print(response.error())
    """

    def __init__(
        self,
        url: str,
        *,
        transport: Transport,
        registry: Optional[CodecRegistry] = None,
        query: Optional[QueryParams] = None,
        headers: Optional[Mapping[str, str]] = None,
        error_target: Optional[E] = None,
    ) -> None:
        """
        Initialize the request.

        Args:
            url: Absolute URL, optionally with a query string
            transport: Transport that sends the request
            registry: Codec registry for body encoding and decoding
            query: Default query parameters (copied)
            headers: Default headers (copied)
            error_target: Where to decode the body of a >= 400 response
        """
        parts = urlsplit(url)
        self.url = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
        self.query = query.copy() if query is not None else QueryParams()
        self.query.update(QueryParams.from_string(parts.query))
        self.headers: CaseInsensitiveDict = CaseInsensitiveDict(headers or {})
        self.body: Optional[bytes] = None
        self.content_length = 0
        self.error_target = error_target
        self._transport = transport
        self._registry = registry
        self._sent = False

    @property
    def full_url(self) -> str:
        """URL with the merged query string."""
        encoded = self.query.encode()
        return f"{self.url}?{encoded}" if encoded else self.url

    def set_body(self, media_type: MediaType, value: Any) -> None:
        """
        Encode ``value`` as ``media_type`` and install it as the request body.

        Sets Content-Length and Content-Type. If encoding fails the request
        is left exactly as it was.

        Raises:
            CodecNotFound: No codec is registered for the media type
            EncodeError: The codec failed to serialize ``value``
        """
        data = media_type.encode(value, self._registry)
        self.body = data
        self.content_length = len(data)
        self.headers["Content-Type"] = str(media_type)
        self.headers["Content-Length"] = str(self.content_length)

    def do(self, method: str, output: Any = None) -> Response[E]:
        """
        Send the request with ``method`` and classify the response.

        Transport failures do not raise; they come back as a Response with
        status 0 whose ``exception`` is a TransportError.

        Args:
            method: HTTP verb
            output: Success target, or None to leave the body to the caller

        Returns:
            The classified Response

        Raises:
            RuntimeError: If the request was already sent
        """
        if self._sent:
            raise RuntimeError(f"Request to {self.url} was already sent")
        self._sent = True

        verb = Method(method.upper()).value
        url = self.full_url
        body, self.body = self.body, None
        logger.debug(f"{verb} {url}")

        try:
            sent = self._transport.send(verb, url, headers=self.headers, body=body)
        except TransportError as e:
            return Response.from_exception(e, method=verb, url=url)

        response: Response[E] = Response(
            sent.status_code,
            sent.headers,
            sent.body,
            method=verb,
            reason=sent.reason,
            url=sent.url or url,
            registry=self._registry,
        )
        logger.debug(f"{verb} {url} -> {response.status_code}")
        return response.receive(output, self.error_target)

    def head(self, output: Any = None) -> Response[E]:
        return self.do(Method.HEAD, output)

    def get(self, output: Any = None) -> Response[E]:
        return self.do(Method.GET, output)

    def post(self, output: Any = None) -> Response[E]:
        return self.do(Method.POST, output)

    def put(self, output: Any = None) -> Response[E]:
        return self.do(Method.PUT, output)

    def patch(self, output: Any = None) -> Response[E]:
        return self.do(Method.PATCH, output)

    def delete(self, output: Any = None) -> Response[E]:
        return self.do(Method.DELETE, output)

    def options(self, output: Any = None) -> Response[E]:
        return self.do(Method.OPTIONS, output)
