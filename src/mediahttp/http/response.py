"""Response classification and body decoding."""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping
from types import TracebackType
from typing import IO, Any, Generic, Optional, TypeVar

from requests.structures import CaseInsensitiveDict

from ..exceptions import CodecNotFound, DecodeError, MediaHttpError, ParseError, StatusError
from ..mediatype import CodecRegistry, MediaType, parse

logger = logging.getLogger(__name__)

E = TypeVar("E")
T = TypeVar("T")

# Statuses that never carry a body
_BODILESS_STATUSES = frozenset({204, 304})


class Response(Generic[E]):
    """
    HTTP response with status classification and content-negotiated decoding.

    A status >= 400 selects the error path, anything else the success path.
    The body is decoded into the target of the active path using the codec
    for the response's Content-Type. Decode and codec lookup failures are
    captured on the response instead of being raised, so status and headers
    stay available.

    Body ownership:
        - decoded (or failed to decode): the body is closed
        - no target for the active path, or no usable Content-Type: the body
          is left open for the caller, who can call ``decode()`` or read
          ``body`` directly and then ``close()``

    Attributes:
        status_code: HTTP status, 0 when the transport failed
        headers: Response headers (case-insensitive)
        body: Binary body stream
        media_type: Parsed Content-Type, or None
        data: Decoded success target
        api_error: Decoded error target
        exception: Captured decode/codec/transport error, or None
        body_closed: Whether the body stream has been closed
    """

    def __init__(
        self,
        status_code: int,
        headers: Mapping[str, str],
        body: IO[bytes],
        *,
        method: str = "GET",
        reason: str = "",
        url: str = "",
        registry: Optional[CodecRegistry] = None,
        exception: Optional[MediaHttpError] = None,
    ) -> None:
        self.status_code = status_code
        self.headers: CaseInsensitiveDict = CaseInsensitiveDict(headers)
        self.body = body
        self.method = method.upper()
        self.reason = reason
        self.url = url
        self.exception = exception
        self.data: Any = None
        self.api_error: Optional[E] = None
        self.body_closed = False
        self._registry = registry
        self.media_type: Optional[MediaType] = self._parse_content_type()

    @classmethod
    def from_exception(cls, exception: MediaHttpError, *, method: str = "GET", url: str = "") -> Response[Any]:
        """Response standing in for a request that never got an answer."""
        response: Response[Any] = cls(0, {}, io.BytesIO(b""), method=method, url=url, exception=exception)
        response.close()
        return response

    def _parse_content_type(self) -> Optional[MediaType]:
        content_type = self.headers.get("Content-Type")
        if not content_type:
            return None
        try:
            return parse(content_type)
        except ParseError as e:
            logger.debug(f"Ignoring unparsable Content-Type from {self.url}: {e}")
            return None

    def _has_body(self) -> bool:
        if self.method == "HEAD" or self.status_code < 200 or self.status_code in _BODILESS_STATUSES:
            return False
        return self.headers.get("Content-Length") != "0"

    def receive(self, output: Any = None, error_target: Optional[E] = None) -> Response[E]:
        """
        Classify the response and decode the body into the matching target.

        Args:
            output: Success target, or None to skip decoding on success
            error_target: Error target, or None to skip decoding on error

        Returns:
            self
        """
        if self.is_api_error():
            target, slot = error_target, "api_error"
        else:
            target, slot = output, "data"

        if not self._has_body():
            self.close()
            return self
        if target is None:
            return self
        if self.media_type is None:
            logger.debug(f"No usable Content-Type from {self.url}, leaving body undecoded")
            return self

        try:
            setattr(self, slot, self.media_type.decode(target, self.body, self._registry))
        except (CodecNotFound, DecodeError) as e:
            logger.warning(f"{self.method} {self.url}: {e}")
            self.exception = e
        finally:
            self.close()
        return self

    def decode(self, target: T) -> T:
        """
        Decode a body that was left open, then close it.

        Raises:
            RuntimeError: If the body was already closed
            DecodeError: If the response has no usable Content-Type or the
                body cannot be decoded
            CodecNotFound: If no codec handles the Content-Type
        """
        if self.body_closed:
            raise RuntimeError("Response body is already closed")
        if self.media_type is None:
            self.close()
            raise DecodeError(f"Response from {self.url} has no usable Content-Type")
        try:
            return self.media_type.decode(target, self.body, self._registry)
        finally:
            self.close()

    def close(self) -> None:
        """Close the body stream. Calling it again does nothing."""
        if self.body_closed:
            return
        self.body_closed = True
        self.body.close()

    def is_api_error(self) -> bool:
        """True for HTTP statuses >= 400."""
        return self.status_code >= 400

    def is_error(self) -> bool:
        """True for statuses >= 400 and for captured decode or transport errors."""
        return self.exception is not None or self.is_api_error()

    def error(self) -> str:
        """Describe the error state, or return an empty string when there is none."""
        if self.exception is not None:
            return str(self.exception)
        if self.is_api_error():
            return str(StatusError(self.status_code, self.api_error, self.reason))
        return ""

    def raise_for_error(self) -> None:
        """
        Raise the error state as an exception.

        Raises:
            MediaHttpError: The captured decode, codec or transport error
            StatusError: For statuses >= 400
        """
        if self.exception is not None:
            raise self.exception
        if self.is_api_error():
            raise StatusError(self.status_code, self.api_error, self.reason)

    def __enter__(self) -> Response[E]:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}] {self.method} {self.url}>"
