r"""Execution contexts used to deliver callbacks and run background work.

A ``Dispatcher`` bundles a serial *main* queue, on which every
user-visible callback runs and shared state is mutated, and a concurrent
*worker* queue for network I/O and decoding.

Example:
    ```pycon
    >>> from netkit.dispatch import Dispatcher
    >>> dispatcher = Dispatcher.inline()
    >>> results = []
    >>> dispatcher.main.submit(results.append, 1)
    >>> results
    [1]

    ```
"""

from __future__ import annotations

__all__ = [
    "ConcurrentQueue",
    "DispatchQueue",
    "Dispatcher",
    "InlineQueue",
    "RepeatingTimer",
    "SerialQueue",
]

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Protocol

from netkit.core.validation import validate_interval

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


class DispatchQueue(Protocol):
    """Protocol of an execution context."""

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        """Schedule ``fn(*args)`` to run on the queue."""

    def submit_after(self, delay: float, fn: Callable[..., Any], *args: Any) -> None:
        """Schedule ``fn(*args)`` to run on the queue after ``delay``
        seconds."""

    def shutdown(self) -> None:
        """Stop accepting work."""


def _run_logged(fn: Callable[..., Any], *args: Any) -> None:
    try:
        fn(*args)
    except Exception:
        logger.exception(f"Unhandled exception in dispatched callable {fn!r}")


class _ExecutorQueue:
    """Queue backed by a ``ThreadPoolExecutor``."""

    def __init__(self, max_workers: int, name: str) -> None:
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        with self._lock:
            if self._closed:
                logger.debug(f"Queue {self.name} is shut down, dropping {fn!r}")
                return
            self._executor.submit(_run_logged, fn, *args)

    def submit_after(self, delay: float, fn: Callable[..., Any], *args: Any) -> None:
        timer = threading.Timer(delay, self.submit, args=(fn, *args))
        timer.daemon = True
        timer.start()

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=False)


class SerialQueue(_ExecutorQueue):
    """Queue running one callable at a time, in submission order.

    Args:
        name: Name prefix of the queue thread.
    """

    def __init__(self, name: str = "netkit-main") -> None:
        super().__init__(max_workers=1, name=name)


class ConcurrentQueue(_ExecutorQueue):
    """Queue running callables concurrently on a thread pool.

    Args:
        max_workers: Maximum number of worker threads.
        name: Name prefix of the worker threads.
    """

    def __init__(self, max_workers: int | None = None, name: str = "netkit-worker") -> None:
        super().__init__(max_workers=max_workers, name=name)


class InlineQueue:
    """Queue running every callable immediately in the calling thread.

    Delays are not honored: ``submit_after`` runs the callable right away.
    Useful for deterministic tests and scripts.
    """

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        fn(*args)

    def submit_after(self, delay: float, fn: Callable[..., Any], *args: Any) -> None:  # noqa: ARG002
        fn(*args)

    def shutdown(self) -> None:
        pass


class Dispatcher:
    """Pair of execution contexts.

    Args:
        main: Serial queue for callbacks and shared state mutation.
        worker: Queue for network I/O and decoding.
    """

    def __init__(self, main: DispatchQueue, worker: DispatchQueue) -> None:
        self.main = main
        self.worker = worker

    @classmethod
    def threaded(cls, max_workers: int | None = None) -> Dispatcher:
        """Create a dispatcher with a serial main thread and a worker
        pool."""
        return cls(main=SerialQueue(), worker=ConcurrentQueue(max_workers=max_workers))

    @classmethod
    def inline(cls) -> Dispatcher:
        """Create a dispatcher running everything in the calling
        thread."""
        queue = InlineQueue()
        return cls(main=queue, worker=queue)

    def shutdown(self) -> None:
        """Shut down both queues."""
        self.worker.shutdown()
        if self.main is not self.worker:
            self.main.shutdown()


class RepeatingTimer:
    r"""Timer invoking a callable on a queue at a fixed interval.

    Ticks are produced by a chain of daemon ``threading.Timer`` objects and
    the callable itself always runs on ``queue``.

    Args:
        interval: Seconds between two ticks. Must be > 0.
        fn: The callable to invoke on every tick.
        queue: The queue the callable runs on.

    Example:
        ```pycon
        >>> from netkit.dispatch import InlineQueue, RepeatingTimer
        >>> ticks = []
        >>> timer = RepeatingTimer(60.0, lambda: ticks.append(1), InlineQueue())
        >>> timer.start()
        >>> timer.fire()
        >>> ticks
        [1]
        >>> timer.invalidate()
        >>> timer.is_valid
        False

        ```
    """

    def __init__(self, interval: float, fn: Callable[[], Any], queue: DispatchQueue) -> None:
        validate_interval("interval", interval)
        self.interval = interval
        self._fn = fn
        self._queue = queue
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._valid = True

    @property
    def is_valid(self) -> bool:
        """``False`` once the timer has been invalidated."""
        return self._valid

    def start(self) -> None:
        """Schedule the first tick ``interval`` seconds from now."""
        with self._lock:
            if self._valid:
                self._schedule()

    def fire(self) -> None:
        """Run the callable immediately, without affecting the schedule."""
        if self._valid:
            self._queue.submit(self._run)

    def invalidate(self) -> None:
        """Stop the timer. Pending ticks are dropped."""
        with self._lock:
            self._valid = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _schedule(self) -> None:
        self._timer = threading.Timer(self.interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self) -> None:
        with self._lock:
            if not self._valid:
                return
            self._schedule()
        self._queue.submit(self._run)

    def _run(self) -> None:
        if self._valid:
            self._fn()
