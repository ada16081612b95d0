"""Label-conflict validation for pushed metrics.

The Pushgateway attaches the ``job`` label and every grouping label to the
metrics it stores. A pushed metric that already carries one of them is
ambiguous, so the push is rejected before anything is serialized.
"""

import logging
from collections.abc import Iterable, Mapping

from .errors import LabelConflictError, LabelType

__all__ = ["LABEL_NAME_JOB", "validate_labels"]

logger = logging.getLogger("prometheus_push.validation")

LABEL_NAME_JOB = "job"


def validate_labels(
    labelled_metrics: Iterable[tuple[str, Iterable[str]]],
    grouping: Mapping[str, str],
) -> None:
    """Fail on the first metric label that collides with a reserved name.

    Only metric labels are inspected. A grouping key may itself be named
    ``job``; that only makes ``job`` reserved twice.

    Args:
        labelled_metrics: (metric_name, label_names) pairs, one per metric
            instance, as produced by MetricsEncoder.iter_labels()
        grouping: Grouping labels of the push

    Raises:
        LabelConflictError: For the first offending metric and label
    """
    for metric_name, label_names in labelled_metrics:
        for label_name in label_names:
            if label_name == LABEL_NAME_JOB:
                label_type = LabelType.JOB
            elif label_name in grouping:
                label_type = LabelType.GROUPING
            else:
                continue

            logger.warning(
                "label_conflict",
                extra={
                    "metric": metric_name,
                    "label": label_name,
                    "label_type": label_type.value,
                },
            )
            raise LabelConflictError(metric_name, label_name, label_type)
