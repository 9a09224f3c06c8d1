r"""Callback manager delivering the outcome of a call chain.

This module provides the CallbackManager class that hops to the main
queue, guards exactly-once delivery through the cancellation token, and
notifies the response observers after the caller's own callback.
"""

from __future__ import annotations

__all__ = ["CallbackManager"]

import logging
from typing import TYPE_CHECKING

from netkit.cancellation import RequestState

if TYPE_CHECKING:
    from netkit.callbacks import ResponseCallback, ResponseObservers
    from netkit.cancellation import CancellationToken
    from netkit.dispatch import DispatchQueue
    from netkit.response import HTTPResponse
    from netkit.retry.config import CallbackConfig

logger: logging.Logger = logging.getLogger(__name__)


class CallbackManager:
    """Manages callback invocations at the end of a call chain.

    Attributes:
        callbacks: Configuration containing the caller's callbacks.
        observers: The global response observers.
        queue: The main queue callbacks run on.
    """

    def __init__(
        self,
        callbacks: CallbackConfig,
        observers: ResponseObservers,
        queue: DispatchQueue,
    ) -> None:
        """Initialize callback manager.

        Args:
            callbacks: Callback configuration.
            observers: The response observers to notify.
            queue: The main queue.
        """
        self.callbacks = callbacks
        self.observers = observers
        self.queue = queue

    def on_success(self, response: HTTPResponse, token: CancellationToken) -> None:
        """Schedule the success callback on the main queue.

        Args:
            response: The success envelope.
            token: The token of the call chain.
        """
        self.queue.submit(
            self._deliver, RequestState.SUCCEEDED, self.callbacks.on_success, response, token
        )

    def on_error(self, response: HTTPResponse, token: CancellationToken) -> None:
        """Schedule the error callback on the main queue.

        Observers are notified even when no error callback was given.

        Args:
            response: The error envelope.
            token: The token of the call chain.
        """
        self.queue.submit(
            self._deliver, RequestState.FAILED, self.callbacks.on_error, response, token
        )

    def _deliver(
        self,
        state: RequestState,
        callback: ResponseCallback | None,
        response: HTTPResponse,
        token: CancellationToken,
    ) -> None:
        if not token._finish(state):
            logger.debug(f"Dropping {state.value} delivery for {response.url}, chain is {token.state.value}")
            return
        if callback is not None:
            callback(response)
        self.observers.notify(response)
