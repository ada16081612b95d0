"""prometheus_client encoder using the text exposition format.

The Pushgateway accepts the same text format Prometheus scrapes, which is
what prometheus_client's own push_to_gateway() sends.
"""

import logging
from collections.abc import Iterable, Iterator

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry
from prometheus_client.exposition import generate_latest
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from ..errors import EncodingError
from ..models import EncodedMetrics
from .base import MetricsEncoder

logger = logging.getLogger("prometheus_push.encoders.text")

__all__ = ["PrometheusTextEncoder"]

# Labels prometheus_client adds to samples itself, keyed by family type
SYNTHETIC_LABELS = {
    "histogram": {"le"},
    "gaugehistogram": {"le"},
    "summary": {"quantile"},
}


class _MetricSet:
    """Registry-shaped view over already collected metric families."""

    def __init__(self, metric_families: list[Metric]):
        self._metric_families = metric_families

    def collect(self) -> Iterator[Metric]:
        return iter(self._metric_families)


class PrometheusTextEncoder(MetricsEncoder):
    """Encoder for prometheus_client collectors and metric families.

    Example:
        >>> from prometheus_client import CollectorRegistry, Counter
        >>> registry = CollectorRegistry()
        >>> Counter("requests", "Requests served", registry=registry).inc()
        >>> encoder = PrometheusTextEncoder()
        >>> payload = encoder.encode(list(registry.collect()))
        >>> payload.content_type == encoder.content_type
        True
    """

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST

    def collect(self, collectors: Iterable[Collector]) -> list[Metric]:
        registry = CollectorRegistry(auto_describe=True)
        for collector in collectors:
            try:
                registry.register(collector)
            except ValueError as e:
                logger.error(
                    "collector_registration_failed",
                    extra={
                        "collector": type(collector).__name__,
                        "error": str(e),
                    },
                )
                raise EncodingError(f"failed to register collector: {e}") from e

        try:
            return list(registry.collect())
        except Exception as e:
            raise EncodingError(f"failed to collect metrics: {e}") from e

    def iter_labels(
        self, metric_set: Iterable[Metric]
    ) -> Iterator[tuple[str, list[str]]]:
        for metric_family in metric_set:
            synthetic = SYNTHETIC_LABELS.get(metric_family.type, set())
            for sample in metric_family.samples:
                yield metric_family.name, [
                    name for name in sample.labels if name not in synthetic
                ]

    def encode(self, metric_set: Iterable[Metric]) -> EncodedMetrics:
        try:
            body = generate_latest(_MetricSet(list(metric_set)))
        except Exception as e:
            raise EncodingError(f"failed to encode metrics: {e}") from e

        return EncodedMetrics(body=body, content_type=self.content_type)
