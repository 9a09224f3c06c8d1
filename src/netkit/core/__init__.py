r"""Core configuration and validation shared by the client, the
reachability monitor and the token manager."""

from __future__ import annotations

__all__ = [
    "DEFAULT_ACTIVITY_REFRESH_DELAY",
    "DEFAULT_CHECK_INTERVAL",
    "DEFAULT_REACHABILITY_HOSTS",
    "DEFAULT_RETRY",
    "DEFAULT_TIMEOUT",
    "DEFAULT_TOKEN_HEADER",
    "ClientConfig",
    "validate_interval",
    "validate_retry",
    "validate_timeout",
]

from netkit.core.config import (
    DEFAULT_ACTIVITY_REFRESH_DELAY,
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_REACHABILITY_HOSTS,
    DEFAULT_RETRY,
    DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_HEADER,
    ClientConfig,
)
from netkit.core.validation import validate_interval, validate_retry, validate_timeout
