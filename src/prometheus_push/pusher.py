"""Push orchestrators for the Prometheus Pushgateway.

Every push runs the same linear pipeline:

    validate labels -> build URL -> encode -> transmit -> classify

Any failure stops the pipeline, so nothing is sent when validation or
encoding fails. The push mode only decides between PUT and POST at the
transport boundary.

MetricsPusher blocks; AsyncMetricsPusher suspends only on the network call.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import httpx

from .config import PushConfig, get_config
from .encoders import MetricsEncoder, PrometheusTextEncoder
from .grouping import build_url, create_metrics_job_url
from .models import EncodedMetrics, PushMode
from .timing import timed_operation
from .transports import (
    AsyncHttpxTransport,
    AsyncTransport,
    HttpxTransport,
    Transport,
)
from .validation import validate_labels

logger = logging.getLogger("prometheus_push.pusher")

__all__ = ["AsyncMetricsPusher", "MetricsPusher"]


class _BasePusher:
    """Pipeline shared by the blocking and asyncio pushers.

    Attributes:
        encoder: MetricsEncoder used to collect, inspect and serialize
        url: Job root URL (``<base>/metrics/job/``), fixed at construction
        strict_names: Validate grouping label names as well as values
    """

    def __init__(
        self,
        encoder: MetricsEncoder,
        url: str | httpx.URL,
        strict_names: bool = True,
    ):
        self.encoder = encoder
        self.url = create_metrics_job_url(url)
        self.strict_names = strict_names

    def _prepare(
        self, job: str, grouping: Mapping[str, str], metric_set: Any
    ) -> tuple[httpx.URL, EncodedMetrics]:
        validate_labels(self.encoder.iter_labels(metric_set), grouping)
        url = build_url(self.url, job, grouping, strict_names=self.strict_names)
        return url, self.encoder.encode(metric_set)

    @staticmethod
    def _log_extra(job: str, grouping: Mapping[str, str], mode: PushMode) -> dict:
        return {"job": job, "grouping": dict(grouping), "mode": mode.value}


class MetricsPusher(_BasePusher):
    """Blocking Pushgateway client.

    Example:
        >>> pusher = MetricsPusher.from_config()
        >>> registry = CollectorRegistry()
        >>> Counter("requests", "Requests served", registry=registry).inc()
        >>> pusher.push_all("batch1", {"instance": "host1"}, registry.collect())
    """

    def __init__(
        self,
        transport: Transport,
        encoder: MetricsEncoder,
        url: str | httpx.URL,
        strict_names: bool = True,
    ):
        """Initialize the pusher.

        Args:
            transport: Transport performing the HTTP exchange
            encoder: Encoder for the metrics backend in use
            url: Absolute Pushgateway base URL
            strict_names: Validate grouping label names as well as values

        Raises:
            InvalidURLError: If url is not an absolute http(s) URL
        """
        super().__init__(encoder, url, strict_names)
        self.transport = transport

    @classmethod
    def from_config(cls, config: PushConfig | None = None) -> "MetricsPusher":
        """Compose the httpx transport and text encoder from configuration."""
        config = config or get_config()
        return cls(
            HttpxTransport(config=config),
            PrometheusTextEncoder(),
            config.pushgateway_url,
            strict_names=config.pushgateway_strict_names,
        )

    @classmethod
    def from_client(
        cls, client: httpx.Client, url: str | httpx.URL, strict_names: bool = True
    ) -> "MetricsPusher":
        """Compose the text encoder around a caller-owned httpx.Client."""
        return cls(
            HttpxTransport(client=client),
            PrometheusTextEncoder(),
            url,
            strict_names=strict_names,
        )

    def push_all(
        self, job: str, grouping: Mapping[str, str], metric_set: Iterable[Any]
    ) -> None:
        """Push metrics, replacing everything stored under the grouping key.

        Job name and grouping labels must not contain '/'.
        """
        self.push(job, grouping, metric_set, PushMode.REPLACE)

    def push_add(
        self, job: str, grouping: Mapping[str, str], metric_set: Iterable[Any]
    ) -> None:
        """Push metrics, replacing only same-named metrics of the grouping key.

        Job name and grouping labels must not contain '/'.
        """
        self.push(job, grouping, metric_set, PushMode.ADD)

    def push_all_collectors(
        self, job: str, grouping: Mapping[str, str], collectors: Iterable[Any]
    ) -> None:
        """Gather collectors into a fresh registry and push with replace logic."""
        self._push(
            job, grouping, PushMode.REPLACE, lambda: self.encoder.collect(collectors)
        )

    def push_add_collectors(
        self, job: str, grouping: Mapping[str, str], collectors: Iterable[Any]
    ) -> None:
        """Gather collectors into a fresh registry and push with add logic."""
        self._push(
            job, grouping, PushMode.ADD, lambda: self.encoder.collect(collectors)
        )

    def push(
        self,
        job: str,
        grouping: Mapping[str, str],
        metric_set: Iterable[Any],
        mode: PushMode,
    ) -> None:
        """Run the push pipeline for one metric set.

        Raises:
            InvalidNameError: Job or grouping contains '/'
            LabelConflictError: A metric carries 'job' or a grouping label
            EncodingError: Serialization failed
            DeliveryError: Gateway answered with a status other than 200/202
            TransportError: The HTTP request failed
        """
        self._push(job, grouping, mode, lambda: list(metric_set))

    def _push(
        self,
        job: str,
        grouping: Mapping[str, str],
        mode: PushMode,
        gather: Callable[[], list],
    ) -> None:
        with timed_operation(
            "push_metrics", logger, extra=self._log_extra(job, grouping, mode)
        ):
            url, payload = self._prepare(job, grouping, gather())
            if mode is PushMode.ADD:
                self.transport.push_add(url, payload.body, payload.content_type)
            else:
                self.transport.push_all(url, payload.body, payload.content_type)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "MetricsPusher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class AsyncMetricsPusher(_BasePusher):
    """Asyncio Pushgateway client with the same pipeline as MetricsPusher.

    Example:
        >>> async with AsyncMetricsPusher.from_config() as pusher:
        ...     await pusher.push_add("batch1", {}, registry.collect())
    """

    def __init__(
        self,
        transport: AsyncTransport,
        encoder: MetricsEncoder,
        url: str | httpx.URL,
        strict_names: bool = True,
    ):
        super().__init__(encoder, url, strict_names)
        self.transport = transport

    @classmethod
    def from_config(cls, config: PushConfig | None = None) -> "AsyncMetricsPusher":
        """Compose the async httpx transport and text encoder from configuration."""
        config = config or get_config()
        return cls(
            AsyncHttpxTransport(config=config),
            PrometheusTextEncoder(),
            config.pushgateway_url,
            strict_names=config.pushgateway_strict_names,
        )

    @classmethod
    def from_client(
        cls,
        client: httpx.AsyncClient,
        url: str | httpx.URL,
        strict_names: bool = True,
    ) -> "AsyncMetricsPusher":
        """Compose the text encoder around a caller-owned httpx.AsyncClient."""
        return cls(
            AsyncHttpxTransport(client=client),
            PrometheusTextEncoder(),
            url,
            strict_names=strict_names,
        )

    async def push_all(
        self, job: str, grouping: Mapping[str, str], metric_set: Iterable[Any]
    ) -> None:
        await self.push(job, grouping, metric_set, PushMode.REPLACE)

    async def push_add(
        self, job: str, grouping: Mapping[str, str], metric_set: Iterable[Any]
    ) -> None:
        await self.push(job, grouping, metric_set, PushMode.ADD)

    async def push_all_collectors(
        self, job: str, grouping: Mapping[str, str], collectors: Iterable[Any]
    ) -> None:
        await self._push(
            job, grouping, PushMode.REPLACE, lambda: self.encoder.collect(collectors)
        )

    async def push_add_collectors(
        self, job: str, grouping: Mapping[str, str], collectors: Iterable[Any]
    ) -> None:
        await self._push(
            job, grouping, PushMode.ADD, lambda: self.encoder.collect(collectors)
        )

    async def push(
        self,
        job: str,
        grouping: Mapping[str, str],
        metric_set: Iterable[Any],
        mode: PushMode,
    ) -> None:
        """Run the push pipeline; only the transport call awaits."""
        await self._push(job, grouping, mode, lambda: list(metric_set))

    async def _push(
        self,
        job: str,
        grouping: Mapping[str, str],
        mode: PushMode,
        gather: Callable[[], list],
    ) -> None:
        with timed_operation(
            "push_metrics", logger, extra=self._log_extra(job, grouping, mode)
        ):
            url, payload = self._prepare(job, grouping, gather())
            if mode is PushMode.ADD:
                await self.transport.push_add(url, payload.body, payload.content_type)
            else:
                await self.transport.push_all(url, payload.body, payload.content_type)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "AsyncMetricsPusher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
