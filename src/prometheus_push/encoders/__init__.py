"""Metrics encoders package.

Exports the encoder interface and the prometheus_client reference encoder.
"""

from .base import MetricsEncoder
from .text import PrometheusTextEncoder

__all__ = [
    "MetricsEncoder",
    "PrometheusTextEncoder",
]
