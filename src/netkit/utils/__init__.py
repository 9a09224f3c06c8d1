r"""Logging helpers: structured log records and response dumps."""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "describe_response",
    "get_correlation_id",
    "log_response",
    "log_structured",
    "set_correlation_id",
]

from netkit.utils.describe import describe_response, log_response
from netkit.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)
