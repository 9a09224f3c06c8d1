r"""Parameter validation utilities for client configuration.

This module provides validation functions to ensure configuration values
meet their constraints before being used by the client, the reachability
monitor, or the token manager.
"""

from __future__ import annotations

__all__ = ["validate_interval", "validate_retry", "validate_timeout"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


def validate_timeout(timeout: float | httpx.Timeout | None) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for server responses.
            Must be > 0 if provided as a numeric value.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from netkit.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(0)
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry(retry: int) -> None:
    """Validate the retry budget.

    Args:
        retry: Maximum number of retries after a timeout. Must be >= 0.
            A value of 0 means only the initial attempt is made.

    Raises:
        ValueError: If retry is negative.

    Example:
        ```pycon
        >>> from netkit.core.validation import validate_retry
        >>> validate_retry(3)
        >>> validate_retry(-1)
        Traceback (most recent call last):
        ...
        ValueError: retry must be >= 0, got -1

        ```
    """
    if retry < 0:
        msg = f"retry must be >= 0, got {retry}"
        raise ValueError(msg)


def validate_interval(name: str, value: float) -> None:
    """Validate a strictly positive time interval.

    Args:
        name: Parameter name used in the error message.
        value: The interval in seconds.

    Raises:
        ValueError: If value is <= 0.
    """
    if value <= 0:
        msg = f"{name} must be > 0, got {value}"
        raise ValueError(msg)
