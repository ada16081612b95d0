"""Grouping-key URL construction for the Pushgateway.

A push targets ``<base>/metrics/job/<job>{/<label_name>/<label_value>}``.
The job name plus grouping labels form the grouping key; each is a literal
path segment, so none of them may contain '/'. Segments are percent-encoded,
so '?', '#' and '%' stay part of the segment. Empty and dot segments
('.', '..') cannot be addressed literally and are rejected.

Pushgateway API: https://github.com/prometheus/pushgateway#url
"""

import logging
from collections.abc import Mapping
from urllib.parse import quote

import httpx

from .errors import InvalidNameError, InvalidURLError

__all__ = [
    "METRICS_JOB_PATH",
    "build_url",
    "create_metrics_job_url",
    "validate_name",
]

logger = logging.getLogger("prometheus_push.grouping")

METRICS_JOB_PATH = "metrics/job/"
PATH_SEPARATOR = "/"
VALID_SCHEMES = {"http", "https"}
DOT_SEGMENTS = {".", ".."}

# RFC 3986 pchar delimiters left readable; everything else is percent-encoded
SEGMENT_SAFE = ":@!$&'()*+,;="


def create_metrics_job_url(url: str | httpx.URL) -> httpx.URL:
    """Derive the job root URL from the Pushgateway base URL.

    Resolution follows RFC 3986, so a base path without a trailing slash
    loses its last segment (``http://gw/prefix`` -> ``http://gw/metrics/job/``).

    Args:
        url: Absolute Pushgateway base URL

    Returns:
        ``<base>/metrics/job/``

    Raises:
        InvalidURLError: If the URL cannot be parsed or is not absolute http(s)
    """
    try:
        base = url if isinstance(url, httpx.URL) else httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidURLError(str(url), str(e)) from e

    if base.scheme not in VALID_SCHEMES or not base.host:
        raise InvalidURLError(str(url))

    return base.join(METRICS_JOB_PATH)


def _validate_segment(value: str) -> str:
    if not value or value in DOT_SEGMENTS:
        logger.warning("invalid_grouping_name", extra={"value": value})
        raise InvalidNameError(
            value,
            f"labels and job name must not be empty or a dot segment: '{value}'",
        )
    return value


def validate_name(value: str) -> str:
    """Reject a string that cannot be used as one literal path segment.

    Args:
        value: Job name, grouping label name or grouping label value

    Returns:
        The unchanged value

    Raises:
        InvalidNameError: If value contains '/', is empty, or is '.' or '..'
    """
    if PATH_SEPARATOR in value:
        logger.warning("invalid_grouping_name", extra={"value": value})
        raise InvalidNameError(value)
    return _validate_segment(value)


def _relaxed_name(value: str) -> str:
    # '/' passes through as a separator, every piece must still be literal
    for part in value.split(PATH_SEPARATOR):
        _validate_segment(part)
    return value


def build_url(
    job_url: httpx.URL,
    job: str,
    grouping: Mapping[str, str],
    strict_names: bool = True,
) -> httpx.URL:
    """Build the push URL for a job and its grouping labels.

    Segments are appended in the mapping's iteration order. The gateway
    decodes each name/value pair independently, so the order only has to be
    stable for a given mapping.

    Args:
        job_url: Job root from create_metrics_job_url()
        job: Job name (non-empty)
        grouping: Grouping label names to values
        strict_names: Also reject '/' in label names, not only in values

    Returns:
        Fully qualified push URL

    Raises:
        InvalidNameError: If the job is empty or any checked string contains
            '/' or is not a literal segment

    Example:
        >>> root = create_metrics_job_url("http://localhost:9091")
        >>> str(build_url(root, "batch1", {"instance": "host1"}))
        'http://localhost:9091/metrics/job/batch1/instance/host1'
    """
    if not job:
        raise InvalidNameError(job, "job name must not be empty")

    segments = [validate_name(job)]
    for label_name, label_value in grouping.items():
        segments.append(
            validate_name(label_name) if strict_names else _relaxed_name(label_name)
        )
        segments.append(validate_name(label_value))

    root = job_url.raw_path.decode("ascii").partition("?")[0]
    encoded = [
        quote(segment, safe=SEGMENT_SAFE + PATH_SEPARATOR) for segment in segments
    ]
    path = PATH_SEPARATOR.join([root.rstrip(PATH_SEPARATOR), *encoded])
    return job_url.copy_with(path=path)
