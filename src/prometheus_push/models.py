"""Value types shared across the push pipeline."""

from dataclasses import dataclass
from enum import Enum

__all__ = ["EncodedMetrics", "PushMode"]


class PushMode(str, Enum):
    """How the Pushgateway treats a push for an existing grouping key.

    Note: Uses (str, Enum) so the value can be logged directly.

    REPLACE: HTTP PUT, all metrics of the grouping key are replaced.
    ADD: HTTP POST, only metrics with the same name are replaced.
    """

    REPLACE = "replace"
    ADD = "add"


@dataclass(frozen=True)
class EncodedMetrics:
    """Serialized metrics ready to be sent, valid for a single push.

    Attributes:
        body: Payload bytes in the encoder's wire format
        content_type: MIME type sent as the Content-Type header
    """

    body: bytes
    content_type: str
