"""prometheus-push - Prometheus Pushgateway client.

Pushes process-local metrics from batch and short-lived jobs through:
- Grouping-key URL building with '/' validation
- Label-conflict validation against 'job' and grouping labels
- Pluggable metrics encoders (prometheus_client text format)
- Pluggable transports (httpx, blocking and asyncio)
- Replace (PUT) and add (POST) push semantics

Python Version: 3.10+ required
"""

# Logging Configuration - Configure before other imports
from .logging_config import StructuredFormatter, configure_logging

# Initialize structured logging on module import
configure_logging()

from .__version__ import __version__
from .config import PushConfig, get_config, reset_config
from .encoders import MetricsEncoder, PrometheusTextEncoder
from .errors import (
    DeliveryError,
    EncodingError,
    InvalidNameError,
    InvalidURLError,
    LabelConflictError,
    LabelType,
    PushMetricsError,
    TransportError,
)
from .grouping import build_url, create_metrics_job_url, validate_name
from .models import EncodedMetrics, PushMode
from .pusher import AsyncMetricsPusher, MetricsPusher
from .timing import timed_operation
from .transports import (
    AsyncHttpxTransport,
    AsyncTransport,
    HttpxTransport,
    Transport,
    classify_response,
)
from .validation import LABEL_NAME_JOB, validate_labels

__all__ = [
    "__version__",
    # Configuration
    "PushConfig",
    "get_config",
    "reset_config",
    # Pushers
    "MetricsPusher",
    "AsyncMetricsPusher",
    "PushMode",
    "EncodedMetrics",
    # Grouping key
    "build_url",
    "create_metrics_job_url",
    "validate_name",
    # Label validation
    "LABEL_NAME_JOB",
    "validate_labels",
    # Encoders
    "MetricsEncoder",
    "PrometheusTextEncoder",
    # Transports
    "Transport",
    "AsyncTransport",
    "HttpxTransport",
    "AsyncHttpxTransport",
    "classify_response",
    # Errors
    "PushMetricsError",
    "InvalidURLError",
    "InvalidNameError",
    "LabelConflictError",
    "LabelType",
    "EncodingError",
    "DeliveryError",
    "TransportError",
    # Logging
    "configure_logging",
    "StructuredFormatter",
    "timed_operation",
]
