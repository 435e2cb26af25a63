"""
mediahttp - HTTP requests with content-negotiated encoding and decoding.

Usage:
    from mediahttp import Client, parse

    with Client("https://api.example.com") as client:
        request = client.new_request("users", error_target=ApiError())
        request.set_body(parse("application/json"), {"login": "sawyer"})

        response = request.post(User)
        if response.is_error():
            print(response.error())
        else:
            print(response.data)
"""

__version__ = "1.0.0"

from .exceptions import (
    CodecNotFound,
    DecodeError,
    EncodeError,
    MediaHttpError,
    ParseError,
    StatusError,
    TransportError,
)
from .http import (
    Client,
    Method,
    QueryParams,
    Request,
    RequestsTransport,
    Response,
    Transport,
    TransportResponse,
)
from .mediatype import Codec, CodecRegistry, MediaType, default_registry, parse
from .models.config import AuthConfig, AuthType, ClientConfig, NetworkConfig

__all__ = [
    "__version__",
    # Client
    "Client",
    "Request",
    "Response",
    "Method",
    "QueryParams",
    # Transport
    "Transport",
    "TransportResponse",
    "RequestsTransport",
    # Media types
    "MediaType",
    "parse",
    "Codec",
    "CodecRegistry",
    "default_registry",
    # Config
    "ClientConfig",
    "NetworkConfig",
    "AuthConfig",
    "AuthType",
    # Errors
    "MediaHttpError",
    "ParseError",
    "CodecNotFound",
    "EncodeError",
    "DecodeError",
    "StatusError",
    "TransportError",
]
