"""HTTP client, requests, responses and transports for mediahttp."""

from .client import Client
from .protocols import Transport, TransportResponse
from .query import QueryParams
from .request import Method, Request
from .response import Response
from .transport import RequestsTransport

__all__ = [
    "Client",
    "Method",
    "QueryParams",
    "Request",
    "RequestsTransport",
    "Response",
    "Transport",
    "TransportResponse",
]
