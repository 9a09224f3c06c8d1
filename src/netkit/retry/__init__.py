r"""Retry orchestration for a single call chain."""

from __future__ import annotations

__all__ = ["CallbackConfig", "CallbackManager", "RequestOperation", "RetryConfig", "RetryDecider"]

from netkit.retry.config import CallbackConfig, RetryConfig
from netkit.retry.decider import RetryDecider
from netkit.retry.executor import RequestOperation
from netkit.retry.manager import CallbackManager
