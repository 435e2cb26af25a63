"""Error taxonomy for mediahttp.

Parse and encode errors are raised straight to the caller. Decode, codec
lookup and transport errors are captured on the Response so that status and
headers stay inspectable.
"""

from __future__ import annotations

from typing import Any, Optional


class MediaHttpError(Exception):
    """Base class for all mediahttp errors."""


class ParseError(MediaHttpError, ValueError):
    """Raised when a media type string is malformed."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid media type {raw!r}: {reason}")


class CodecNotFound(MediaHttpError, LookupError):
    """Raised when no codec is registered for a format token."""

    def __init__(self, format: str, direction: str = "decoder") -> None:
        self.format = format
        self.direction = direction
        super().__init__(f"No {direction} found for format {format}")


class EncodeError(MediaHttpError):
    """Raised when a codec fails to serialize an outgoing body."""


class DecodeError(MediaHttpError):
    """A codec failed to deserialize a body, or the target cannot be bound."""


class TransportError(MediaHttpError):
    """The underlying transport failed before a response was received."""


class StatusError(MediaHttpError):
    """HTTP status >= 400, carrying the decoded error payload if any."""

    def __init__(self, status_code: int, api_error: Optional[Any] = None, reason: str = "") -> None:
        self.status_code = status_code
        self.api_error = api_error
        self.reason = reason
        super().__init__(str(api_error) if api_error is not None else str(status_code))
