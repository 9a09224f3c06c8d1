r"""Cancellation token returned for every request.

The token keeps a weak reference to the transport task of the current
attempt, so ``is_cancelled`` reads "no live task": either the caller
cancelled, or the task finished and was released. The explicit ``state``
tells those two cases apart and is what the executor consults before
retrying or delivering a callback.
"""

from __future__ import annotations

__all__ = ["CancellationToken", "RequestState"]

import logging
import threading
import weakref
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from netkit.transport import TransportTask

logger: logging.Logger = logging.getLogger(__name__)


class RequestState(Enum):
    """Lifecycle states of a call chain.

    Attributes:
        PENDING: The chain has not issued an attempt yet.
        IN_FLIGHT: The first attempt is running.
        RETRYING: A retry attempt is running.
        SUCCEEDED: The success callback has been delivered.
        FAILED: The error callback has been delivered.
        CANCELLED: The caller cancelled the chain.
    """

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """``True`` for SUCCEEDED, FAILED and CANCELLED."""
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({RequestState.SUCCEEDED, RequestState.FAILED, RequestState.CANCELLED})


class CancellationToken:
    r"""Capability to cancel an in-flight call chain.

    Example:
        ```pycon
        >>> from netkit.cancellation import CancellationToken, RequestState
        >>> token = CancellationToken()
        >>> token.state
        <RequestState.PENDING: 'pending'>
        >>> token.is_cancelled  # No task attached
        True
        >>> token.cancel()
        True
        >>> token.state
        <RequestState.CANCELLED: 'cancelled'>

        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._task_ref: weakref.ReferenceType[TransportTask] | None = None
        self._state = RequestState.PENDING
        self._retries_count = 0

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(state={self._state.value}, retries={self._retries_count})"

    @property
    def task(self) -> TransportTask | None:
        """The transport task of the current attempt, if still alive."""
        return self._task_ref() if self._task_ref is not None else None

    @property
    def is_cancelled(self) -> bool:
        """``True`` if no live transport task is referenced.

        This is also ``True`` after a normal completion once the task has
        been released; use ``state`` to distinguish.
        """
        return self.task is None

    @property
    def state(self) -> RequestState:
        """The current lifecycle state."""
        return self._state

    @property
    def is_finished(self) -> bool:
        """``True`` once the chain reached a terminal state."""
        return self._state.is_terminal

    @property
    def retries_count(self) -> int:
        """Number of retries issued so far."""
        return self._retries_count

    def cancel(self) -> bool:
        """Cancel the call chain.

        Returns:
            ``True`` if the chain was cancelled, ``False`` if it had
            already reached a terminal state.
        """
        with self._lock:
            if self._state.is_terminal:
                return False
            self._state = RequestState.CANCELLED
            task = self.task
            self._task_ref = None
        if task is not None:
            task.cancel()
        logger.debug("Request cancelled")
        return True

    def _attach(self, task: TransportTask, retries_count: int) -> bool:
        """Reference the task of a new attempt.

        Returns:
            ``False`` if the chain was cancelled meanwhile; the task must
            not be started.
        """
        with self._lock:
            if self._state is RequestState.CANCELLED:
                return False
            self._task_ref = weakref.ref(task)
            self._retries_count = retries_count
            self._state = RequestState.RETRYING if retries_count > 0 else RequestState.IN_FLIGHT
            return True

    def _finish(self, state: RequestState) -> bool:
        """Move to a terminal state.

        Returns:
            ``True`` if this call performed the transition, ``False`` if
            the chain was already terminal.
        """
        with self._lock:
            if self._state.is_terminal:
                return False
            self._state = state
            self._task_ref = None
            return True
