"""Base transport abstract classes.

A transport delivers an encoded payload to a push URL: PUT replaces the
grouping key's metrics, POST merges into them. Transports never retry.
"""

import logging
from abc import ABC, abstractmethod

import httpx

from ..errors import DeliveryError

logger = logging.getLogger("prometheus_push.transports")

__all__ = ["SUCCESS_STATUS_CODES", "AsyncTransport", "Transport", "classify_response"]

SUCCESS_STATUS_CODES = {httpx.codes.OK, httpx.codes.ACCEPTED}


def classify_response(status_code: int, url: str) -> None:
    """Accept 200 and 202, reject everything else.

    Args:
        status_code: HTTP status returned by the gateway
        url: Final request URL, reported in logs and errors

    Raises:
        DeliveryError: For any status other than 200/202
    """
    if status_code in SUCCESS_STATUS_CODES:
        logger.info(
            "metrics_pushed", extra={"url": url, "status_code": status_code}
        )
        return

    logger.error(
        "pushgateway_unexpected_status",
        extra={"url": url, "status_code": status_code},
    )
    raise DeliveryError(status_code, url)


class Transport(ABC):
    """Blocking transport interface."""

    @abstractmethod
    def push_all(self, url: httpx.URL, body: bytes, content_type: str) -> None:
        """Replace the metrics of a grouping key (HTTP PUT).

        Raises:
            DeliveryError: On a non-success status
            TransportError: If the request could not be completed
        """
        pass

    @abstractmethod
    def push_add(self, url: httpx.URL, body: bytes, content_type: str) -> None:
        """Merge metrics into a grouping key (HTTP POST).

        Raises:
            DeliveryError: On a non-success status
            TransportError: If the request could not be completed
        """
        pass

    def close(self) -> None:
        """Release connection resources owned by the transport."""
        pass


class AsyncTransport(ABC):
    """Asyncio transport interface, same contract as Transport."""

    @abstractmethod
    async def push_all(self, url: httpx.URL, body: bytes, content_type: str) -> None:
        pass

    @abstractmethod
    async def push_add(self, url: httpx.URL, body: bytes, content_type: str) -> None:
        pass

    async def aclose(self) -> None:
        """Release connection resources owned by the transport."""
        pass
