"""Error taxonomy for prometheus-push.

Every failure of a push call surfaces as one subclass of PushMetricsError so
callers can tell which pipeline stage failed:

- InvalidURLError / InvalidNameError / LabelConflictError: caller errors,
  raised before anything is encoded or sent. Not retryable.
- EncodingError: the metrics backend could not register or serialize.
- DeliveryError: the Pushgateway answered with a non-success status.
- TransportError: the HTTP exchange itself failed (DNS, TLS, connection).
"""

from enum import Enum

__all__ = [
    "DeliveryError",
    "EncodingError",
    "InvalidNameError",
    "InvalidURLError",
    "LabelConflictError",
    "LabelType",
    "PushMetricsError",
    "TransportError",
]


class PushMetricsError(Exception):
    """Base class for every error raised by a push operation."""

    pass


class InvalidURLError(PushMetricsError):
    """Raised when the Pushgateway base URL is not an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = "must be an absolute http(s) URL"):
        self.url = url
        super().__init__(f"invalid pushgateway url '{url}': {reason}")


class InvalidNameError(PushMetricsError):
    """Raised when a job name or grouping label would corrupt the URL path.

    Attributes:
        value: The offending job name, label name or label value.
    """

    def __init__(self, value: str, reason: str | None = None):
        self.value = value
        message = reason or f"labels and job name must not contain '/': '{value}'"
        super().__init__(message)


class LabelType(str, Enum):
    """Which reserved label a pushed metric collided with."""

    JOB = "job"
    GROUPING = "grouping"


class LabelConflictError(PushMetricsError):
    """Raised when a metric already carries a label the gateway attaches itself.

    Attributes:
        metric: Name of the offending metric family.
        label: The colliding label name.
        label_type: LabelType.JOB or LabelType.GROUPING.
    """

    def __init__(self, metric: str, label: str, label_type: LabelType):
        self.metric = metric
        self.label = label
        self.label_type = label_type
        if label_type is LabelType.JOB:
            detail = "a job label"
        else:
            detail = f"grouping label '{label}'"
        super().__init__(f"pushed metric {metric} already contains {detail}")


class EncodingError(PushMetricsError):
    """Raised when the metrics backend fails to register or serialize.

    The backend's own exception is chained as __cause__.
    """

    pass


class DeliveryError(PushMetricsError):
    """Raised when the Pushgateway responds with a status other than 200/202.

    Attributes:
        status_code: HTTP status returned by the gateway.
        url: Target URL of the push.
    """

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(
            f"unexpected status code {status_code} while pushing to {url}"
        )


class TransportError(PushMetricsError):
    """Raised when the HTTP call fails before a response is received.

    The httpx exception is chained as __cause__.
    """

    def __init__(self, message: str, url: str):
        self.url = url
        super().__init__(message)
