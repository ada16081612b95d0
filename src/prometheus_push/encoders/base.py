"""Base encoder abstract class.

Defines the interface a metrics backend adapter implements so the pusher can
gather, validate and serialize metrics without knowing the backend.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any

from ..models import EncodedMetrics

__all__ = ["MetricsEncoder"]


class MetricsEncoder(ABC):
    """Abstract base class for metrics encoders.

    The metric set type is backend-defined and opaque to the pusher.
    Implementations must not cache payloads between calls.
    """

    @abstractmethod
    def collect(self, collectors: Iterable[Any]) -> Any:
        """Gather collectors into a metric set.

        Registers the collectors into a fresh registry scoped to this call.

        Args:
            collectors: Backend-specific collector objects

        Returns:
            Metric set accepted by iter_labels() and encode()

        Raises:
            EncodingError: If a collector cannot be registered or collected
        """
        pass

    @abstractmethod
    def iter_labels(self, metric_set: Any) -> Iterator[tuple[str, list[str]]]:
        """Yield (metric_name, label_names) for every metric instance.

        Label names added by the backend's own encoding (bucket bounds,
        quantiles) are excluded.
        """
        pass

    @abstractmethod
    def encode(self, metric_set: Any) -> EncodedMetrics:
        """Serialize a metric set into the gateway wire format.

        Raises:
            EncodingError: If the backend fails to serialize
        """
        pass

    @property
    @abstractmethod
    def content_type(self) -> str:
        """MIME type of the payloads produced by encode()."""
        pass
