"""Structured logging configuration for prometheus-push.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the prometheus_push namespace
- Environment variable control (PROMETHEUS_PUSH_LOG_LEVEL, PROMETHEUS_PUSH_LOG_FORMAT)

Research sources:
- Structured Logging Best Practices: https://uptrace.dev/glossary/structured-logging
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

LOGGER_NAME = "prometheus_push"

# Sensitive keys that should be redacted in log output
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key",
    "authorization", "credential", "auth", "key", "bearer",
}

# Standard LogRecord attributes, never treated as extras
STANDARD_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs logs in JSON format with:
    - timestamp: UTC ISO 8601 format with 'Z' suffix
    - level: Log level name (INFO, ERROR, etc.)
    - logger: Logger name (prometheus_push hierarchy)
    - message: Log message
    - context: Extras dict merged from LogRecord attributes

    Sensitive keys (password, token, api_key, etc.) are redacted.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in STANDARD_FIELDS and not k.startswith("_")
        }

        if extras:
            log_data["context"] = extras

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for development.

    Used when PROMETHEUS_PUSH_LOG_FORMAT=text.
    """

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structured logging for all prometheus_push loggers.

    Args:
        level: Optional log level override. If not provided, uses
               PROMETHEUS_PUSH_LOG_LEVEL (default: INFO).

    Environment Variables:
        PROMETHEUS_PUSH_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR). Default: INFO
        PROMETHEUS_PUSH_LOG_FORMAT: Output format (json, text). Default: json
    """
    if level is None:
        level = os.getenv("PROMETHEUS_PUSH_LOG_LEVEL", "INFO")

    log_level = getattr(logging, level.upper(), logging.INFO)

    log_format = os.getenv("PROMETHEUS_PUSH_LOG_FORMAT", "json").lower()

    if log_format == "text":
        formatter = TextFormatter()
    else:
        formatter = StructuredFormatter()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Only add a handler once, repeated calls must not stack handlers
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
