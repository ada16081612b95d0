"""Timing utilities for structured push logging.

Uses time.perf_counter() for sub-millisecond precision timing.
"""

import logging
import time
from contextlib import contextmanager
from typing import Optional

from .errors import (
    DeliveryError,
    EncodingError,
    InvalidNameError,
    InvalidURLError,
    LabelConflictError,
    TransportError,
)

__all__ = ["failed_stage", "timed_operation"]

# Pipeline stage reported for each error kind
_STAGES = (
    (InvalidURLError, "build_url"),
    (InvalidNameError, "build_url"),
    (LabelConflictError, "validate"),
    (EncodingError, "encode"),
    (DeliveryError, "classify"),
    (TransportError, "transmit"),
)


def failed_stage(error: BaseException) -> str:
    """Name the push pipeline stage an error came from."""
    for error_type, stage in _STAGES:
        if isinstance(error, error_type):
            return stage
    return "unknown"


@contextmanager
def timed_operation(
    operation: str,
    logger: logging.Logger,
    level: int = logging.INFO,
    extra: Optional[dict] = None,
):
    """Context manager for timing operations with structured logging.

    Logs ``{operation}_completed`` on success and ``{operation}_failed`` on
    failure, both with duration_ms. Failures also carry the pipeline stage
    and are re-raised unchanged.

    Args:
        operation: Operation name used as the log message prefix
        logger: Logger instance to use for logging
        level: Log level for success case (default: INFO)
        extra: Optional dict of extra context to include in log

    Example:
        >>> logger = logging.getLogger("prometheus_push.pusher")
        >>> with timed_operation("push_metrics", logger, extra={"job": "batch1"}):
        ...     pass

    Logs on failure:
        {"message": "push_metrics_failed", "context": {"job": "batch1",
         "duration_ms": 3.1, "status": "failed", "stage": "validate",
         "error": "...", "error_type": "LabelConflictError"}}
    """
    start = time.perf_counter()
    _extra = extra or {}

    try:
        yield

        duration_ms = (time.perf_counter() - start) * 1000
        logger.log(
            level,
            f"{operation}_completed",
            extra={
                **_extra,
                "duration_ms": round(duration_ms, 2),
                "status": "success",
            },
        )

    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.error(
            f"{operation}_failed",
            extra={
                **_extra,
                "duration_ms": round(duration_ms, 2),
                "status": "failed",
                "stage": failed_stage(e),
                "error": str(e),
                "error_type": type(e).__name__,
            },
        )
        raise
