r"""Callback types and the registry of global response observers.

Response observers are named callbacks receiving every completed
``HTTPResponse``, whichever call site issued the request. They always
run on the main queue, after the caller's own success or error callback.

Example:
    ```pycon
    >>> from netkit.callbacks import ResponseObservers
    >>> from netkit.dispatch import InlineQueue
    >>> observers = ResponseObservers(InlineQueue())
    >>> seen = []
    >>> observers.add("audit", seen.append)
    >>> observers.names()
    ['audit']
    >>> observers.remove("audit")
    >>> observers.names()
    []

    ```
"""

from __future__ import annotations

__all__ = ["ErrorCallback", "ResponseCallback", "ResponseObservers", "SuccessCallback"]

import logging
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from netkit.dispatch import DispatchQueue
    from netkit.response import HTTPResponse

logger: logging.Logger = logging.getLogger(__name__)

ResponseCallback = Callable[["HTTPResponse"], None]
SuccessCallback = ResponseCallback
ErrorCallback = ResponseCallback


class ResponseObservers:
    """Registry of named response observers.

    The registry is only mutated on the main queue. Registering a name
    again replaces the previous observer.

    Args:
        queue: The main queue.
    """

    def __init__(self, queue: DispatchQueue) -> None:
        self._queue = queue
        self._observers: dict[str, ResponseCallback] = {}

    def add(self, name: str, observer: ResponseCallback) -> None:
        """Register ``observer`` under ``name``."""
        self._queue.submit(self._observers.__setitem__, name, observer)

    def remove(self, name: str) -> None:
        """Unregister the observer registered under ``name``, if any."""
        self._queue.submit(self._observers.pop, name, None)

    def names(self) -> list[str]:
        """Names of the registered observers."""
        return list(self._observers)

    def notify(self, response: HTTPResponse) -> None:
        """Invoke every observer with ``response``. Must run on the main
        queue."""
        for name, observer in list(self._observers.items()):
            logger.debug(f"Notifying response observer {name!r}")
            observer(response)
