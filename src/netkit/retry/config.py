r"""Configuration dataclasses for one call chain."""

from __future__ import annotations

__all__ = ["CallbackConfig", "RetryConfig"]

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from netkit.callbacks import ErrorCallback, SuccessCallback


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        url: The absolute URL resolved once for the whole chain.
        max_retries: Maximum number of retries after a timeout.
    """

    url: str
    max_retries: int


@dataclass
class CallbackConfig:
    """Configuration for the caller's callbacks.

    Attributes:
        on_success: Callback invoked with the success envelope.
        on_error: Optional callback invoked with the error envelope.
    """

    on_success: SuccessCallback
    on_error: ErrorCallback | None = None
