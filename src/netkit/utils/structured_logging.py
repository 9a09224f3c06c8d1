r"""Structured logging utilities for machine-readable log output.

The request executor logs every attempt, retry and outcome with structured
fields (``url``, ``method``, ``attempt``, ``status_code``,
``retries_count``). Those fields end up in the JSON output when the
``netkit`` logger uses ``StructuredFormatter``.

Example:
    Enable structured logging for netkit:

    ```python
    import logging
    from netkit.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("netkit")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```

    Tag the log entries of a user flow with a correlation ID:

    ```python
    from netkit.utils.structured_logging import clear_correlation_id, set_correlation_id

    set_correlation_id("checkout-42")
    try:
        client.get("/cart", on_success=show_cart)
    finally:
        clear_correlation_id()
    ```

    The correlation ID is stored in a context variable; work submitted to
    a dispatch queue runs in the queue thread's own context.
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextvars
import json
import logging
import time
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Attributes of every LogRecord, everything else came through ``extra``
_RESERVED_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "msecs",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "sinfo",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
    }
)


def get_correlation_id() -> str | None:
    """Get the current correlation ID.

    Returns:
        The current correlation ID, or None if not set.

    Example:
        ```pycon
        >>> from netkit.utils.structured_logging import (
        ...     get_correlation_id,
        ...     set_correlation_id,
        ... )
        >>> get_correlation_id()
        >>> set_correlation_id("req-123")
        >>> get_correlation_id()
        'req-123'

        ```
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: The correlation ID to set (e.g., request ID, trace ID).
    """
    _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID for the current context."""
    _correlation_id.set(None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output:
        - timestamp: ISO 8601 timestamp in UTC with milliseconds
        - level: Log level name
        - logger: Logger name
        - message: Log message
        - correlation_id: Optional correlation/trace ID
        - module, function, line: Origin of the record
        - thread: Thread name, e.g. ``netkit-main``

    Fields passed through ``extra`` are copied into the JSON object.
    Values that are not JSON serializable are rendered with ``str``.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from io import StringIO
        >>> from netkit.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("netkit.doctest")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("Request completed", extra={"status_code": 200})
        >>> record = json.loads(stream.getvalue())
        >>> record["message"], record["status_code"]
        ('Request completed', 200)

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
            "process": record.process,
        }

        correlation_id = get_correlation_id()
        if correlation_id is not None:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRIBUTES:
                log_data[key] = value

        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002
        """Format timestamp as ISO 8601.

        Args:
            record: The log record.
            datefmt: Ignored, the format is always ISO 8601.

        Returns:
            ISO 8601 formatted timestamp.
        """
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured data.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.INFO).
        message: Log message.
        **extra: Additional structured fields to include in the log.
            Names must not collide with ``logging.LogRecord`` attributes.
    """
    logger.log(level, message, extra=extra)
