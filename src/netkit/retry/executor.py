r"""Retry executor driving one call chain.

``RequestOperation`` runs the attempts of a single request as an explicit
state machine: each attempt creates a transport task, attaches it to the
cancellation token, and on completion either issues the next retry or
delivers the final envelope through the ``CallbackManager``.
"""

from __future__ import annotations

__all__ = ["RequestOperation"]

import logging
from typing import TYPE_CHECKING, Any

from netkit.cancellation import RequestState
from netkit.response import HTTPResponse
from netkit.status import HTTPStatusCode
from netkit.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    import httpx

    from netkit.cancellation import CancellationToken
    from netkit.request import HTTPRequest
    from netkit.retry.config import RetryConfig
    from netkit.retry.decider import RetryDecider
    from netkit.retry.manager import CallbackManager
    from netkit.transport import HttpxTransport

logger: logging.Logger = logging.getLogger(__name__)


class RequestOperation:
    """Executes a call chain with retry on timeout.

    Args:
        transport: The transport creating one task per attempt.
        request: The request descriptor of the first attempt.
        config: The resolved URL and the retry budget.
        token: The token handed back to the caller.
        callbacks: Delivers the final envelope.
        decider: Decides retries and response validity.
        envelope_kwargs: Extra keyword arguments for every
            ``HTTPResponse`` built (``codec``, ``dispatcher``).
        on_attempt_finished: Optional hook invoked after every attempt,
            used to refresh the network activity indicator.
    """

    def __init__(
        self,
        transport: HttpxTransport,
        request: HTTPRequest,
        config: RetryConfig,
        token: CancellationToken,
        callbacks: CallbackManager,
        decider: RetryDecider,
        envelope_kwargs: Mapping[str, Any] | None = None,
        on_attempt_finished: Callable[[], None] | None = None,
    ) -> None:
        self.transport = transport
        self.request = request
        self.config = config
        self.token = token
        self.callbacks = callbacks
        self.decider = decider
        self.envelope_kwargs = dict(envelope_kwargs or {})
        self.on_attempt_finished = on_attempt_finished

    def start(self) -> None:
        """Issue the first attempt."""
        self._issue(self.request)

    def _issue(self, request: HTTPRequest) -> None:
        task = self.transport.data_task(
            method=request.method.value,
            url=self.config.url,
            headers=request.build_headers(),
            body=request.body,
            completion=lambda body, response, error: self._on_complete(
                request, body, response, error
            ),
        )
        if not self.token._attach(task, request.retries_count):
            logger.debug(f"{request.method.value} request to {self.config.url} cancelled before start")
            return
        log_structured(
            logger,
            logging.DEBUG,
            f"{request.method.value} request to {self.config.url} "
            f"(attempt {request.retries_count + 1}/{self.config.max_retries + 1})",
            url=self.config.url,
            method=request.method.value,
            attempt=request.retries_count + 1,
            max_retries=self.config.max_retries,
        )
        task.resume()

    def _on_complete(
        self,
        request: HTTPRequest,
        body: bytes | None,
        response: httpx.Response | None,
        error: Exception | None,
    ) -> None:
        if self.on_attempt_finished is not None:
            self.on_attempt_finished()
        if self.token.state is RequestState.CANCELLED:
            logger.debug(f"{request.method.value} request to {self.config.url} was cancelled")
            return

        should_retry, reason = self.decider.should_retry(error, request.retries_count)
        if should_retry:
            log_structured(
                logger,
                logging.DEBUG,
                f"{request.method.value} request to {self.config.url} timed out, retrying",
                url=self.config.url,
                method=request.method.value,
                attempt=request.retries_count + 1,
                max_retries=self.config.max_retries,
                reason=reason,
            )
            self._issue(request.next_retry())
            return

        if self.token.state is RequestState.CANCELLED:
            return
        if error is None and self.decider.validate_response(request, response):
            log_structured(
                logger,
                logging.DEBUG,
                f"{request.method.value} request to {self.config.url} succeeded",
                url=self.config.url,
                method=request.method.value,
                status_code=response.status_code,
                retries_count=request.retries_count,
            )
            self.callbacks.on_success(self._build_envelope(response, body, None), self.token)
            return

        log_structured(
            logger,
            logging.DEBUG,
            f"{request.method.value} request to {self.config.url} failed",
            url=self.config.url,
            method=request.method.value,
            status_code=response.status_code if response is not None else None,
            error=type(error).__name__ if error is not None else None,
            retries_count=request.retries_count,
        )
        self.callbacks.on_error(self._build_envelope(response, body, error), self.token)

    def _build_envelope(
        self,
        response: httpx.Response | None,
        body: bytes | None,
        error: Exception | None,
    ) -> HTTPResponse:
        if response is None:
            return HTTPResponse(
                url=self.config.url,
                status_code=HTTPStatusCode.UNKNOWN_STATUS,
                error=error,
                **self.envelope_kwargs,
            )
        return HTTPResponse.from_httpx(response, body=body, error=error, **self.envelope_kwargs)
