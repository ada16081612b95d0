"""Transports package.

Exports the transport interfaces and the httpx reference transports.
"""

from .base import SUCCESS_STATUS_CODES, AsyncTransport, Transport, classify_response
from .httpx_transport import AsyncHttpxTransport, HttpxTransport

__all__ = [
    "SUCCESS_STATUS_CODES",
    "AsyncHttpxTransport",
    "AsyncTransport",
    "HttpxTransport",
    "Transport",
    "classify_response",
]
