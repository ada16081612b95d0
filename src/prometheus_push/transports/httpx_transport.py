"""httpx transports for the Pushgateway.

Wrap a long-lived httpx client with connection pooling. The client may be
supplied by the caller (who then owns it) or built from PushConfig.

Best Practices: https://www.python-httpx.org/advanced/resource-limits/
"""

import contextlib
import logging

import httpx

from ..config import PushConfig, get_config
from ..errors import TransportError
from .base import AsyncTransport, Transport, classify_response

logger = logging.getLogger("prometheus_push.transports.httpx")

__all__ = ["AsyncHttpxTransport", "HttpxTransport"]

CONTENT_TYPE_HEADER = "Content-Type"


def _transport_error(method: str, url: httpx.URL, error: httpx.HTTPError) -> TransportError:
    logger.error(
        "pushgateway_transport_error",
        extra={
            "method": method,
            "url": str(url),
            "error": str(error),
            "error_type": type(error).__name__,
        },
    )
    return TransportError(f"{method} {url} failed: {error}", str(url))


class HttpxTransport(Transport):
    """Blocking transport backed by httpx.Client.

    Attributes:
        client: httpx.Client used for every push

    Example:
        >>> with HttpxTransport() as transport:
        ...     transport.push_all(url, body, "text/plain; version=0.0.4")
    """

    def __init__(
        self, client: httpx.Client | None = None, config: PushConfig | None = None
    ):
        """Initialize the transport.

        Args:
            client: Caller-owned client. Built from config when omitted.
            config: Optional PushConfig. Uses get_config() if not provided.
        """
        self._owns_client = client is None
        if client is None:
            config = config or get_config()
            client = httpx.Client(
                timeout=config.get_timeout(),
                limits=config.get_limits(),
                verify=config.pushgateway_verify_tls,
            )
        self.client = client

    def push_all(self, url: httpx.URL, body: bytes, content_type: str) -> None:
        self._send("PUT", url, body, content_type)

    def push_add(self, url: httpx.URL, body: bytes, content_type: str) -> None:
        self._send("POST", url, body, content_type)

    def _send(self, method: str, url: httpx.URL, body: bytes, content_type: str) -> None:
        try:
            response = self.client.request(
                method,
                url,
                content=body,
                headers={CONTENT_TYPE_HEADER: content_type},
            )
        except httpx.HTTPError as e:
            raise _transport_error(method, url, e) from e

        classify_response(response.status_code, str(response.url))

    def close(self) -> None:
        """Close the client if this transport created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        # httpx may already be unloaded during interpreter shutdown
        with contextlib.suppress(Exception):
            self.close()


class AsyncHttpxTransport(AsyncTransport):
    """Asyncio transport backed by httpx.AsyncClient.

    The network call is the only suspension point of an async push.

    Example:
        >>> async with AsyncHttpxTransport() as transport:
        ...     await transport.push_add(url, body, "text/plain; version=0.0.4")
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        config: PushConfig | None = None,
    ):
        self._owns_client = client is None
        if client is None:
            config = config or get_config()
            client = httpx.AsyncClient(
                timeout=config.get_timeout(),
                limits=config.get_limits(),
                verify=config.pushgateway_verify_tls,
            )
        self.client = client

    async def push_all(self, url: httpx.URL, body: bytes, content_type: str) -> None:
        await self._send("PUT", url, body, content_type)

    async def push_add(self, url: httpx.URL, body: bytes, content_type: str) -> None:
        await self._send("POST", url, body, content_type)

    async def _send(
        self, method: str, url: httpx.URL, body: bytes, content_type: str
    ) -> None:
        try:
            response = await self.client.request(
                method,
                url,
                content=body,
                headers={CONTENT_TYPE_HEADER: content_type},
            )
        except httpx.HTTPError as e:
            raise _transport_error(method, url, e) from e

        classify_response(response.status_code, str(response.url))

    async def aclose(self) -> None:
        """Close the client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "AsyncHttpxTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
