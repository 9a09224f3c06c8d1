r"""Unit tests for the request operation state machine."""

from __future__ import annotations

from unittest.mock import Mock

import httpx

from netkit.callbacks import ResponseObservers
from netkit.cancellation import CancellationToken, RequestState
from netkit.content_type import HTTPContentType
from netkit.dispatch import Dispatcher, InlineQueue
from netkit.request import HTTPMethod, HTTPRequest
from netkit.retry import CallbackConfig, CallbackManager, RequestOperation, RetryConfig, RetryDecider
from netkit.status import HTTPStatusCode
from tests.helpers import ManualQueue, ScriptedHandler, make_transport

URL = "https://api.example.com/users"


def make_operation(
    handler: ScriptedHandler,
    *,
    max_retries: int = 0,
    request: HTTPRequest | None = None,
    dispatcher: Dispatcher | None = None,
    on_success: Mock | None = None,
    on_error: Mock | None = None,
    on_attempt_finished: Mock | None = None,
) -> tuple[RequestOperation, CancellationToken]:
    dispatcher = dispatcher or Dispatcher.inline()
    token = CancellationToken()
    operation = RequestOperation(
        transport=make_transport(handler, dispatcher.worker),
        request=request or HTTPRequest(),
        config=RetryConfig(url=URL, max_retries=max_retries),
        token=token,
        callbacks=CallbackManager(
            CallbackConfig(on_success=on_success or Mock(), on_error=on_error),
            ResponseObservers(dispatcher.main),
            dispatcher.main,
        ),
        decider=RetryDecider(max_retries),
        on_attempt_finished=on_attempt_finished,
    )
    return operation, token


def test_request_operation_success() -> None:
    handler = ScriptedHandler(httpx.Response(200, json={"id": 1}))
    on_success, on_error = Mock(), Mock()
    operation, token = make_operation(handler, on_success=on_success, on_error=on_error)
    operation.start()

    on_error.assert_not_called()
    response = on_success.call_args.args[0]
    assert response.status_code is HTTPStatusCode.OK
    assert response.url == URL
    assert response.json() == {"id": 1}
    assert token.state is RequestState.SUCCEEDED


def test_request_operation_sends_wire_request() -> None:
    handler = ScriptedHandler(httpx.Response(201))
    request = HTTPRequest(method=HTTPMethod.PUT, headers={"X-Trace": "abc"}, body=b"payload")
    operation, _ = make_operation(handler, request=request)
    operation.start()

    sent = handler.requests[0]
    assert sent.method == "PUT"
    assert str(sent.url) == URL
    assert sent.headers["X-Trace"] == "abc"
    assert sent.content == b"payload"


def test_request_operation_retries_timeouts() -> None:
    handler = ScriptedHandler(httpx.ReadTimeout, httpx.ConnectTimeout, httpx.Response(200))
    on_success, on_error = Mock(), Mock()
    operation, token = make_operation(handler, max_retries=2, on_success=on_success, on_error=on_error)
    operation.start()

    assert handler.call_count == 3
    assert [str(request.url) for request in handler.requests] == [URL, URL, URL]
    on_success.assert_called_once()
    on_error.assert_not_called()
    assert token.retries_count == 2


def test_request_operation_retry_budget_exhausted() -> None:
    """Test that at most 1 + budget attempts are made."""
    handler = ScriptedHandler(httpx.ReadTimeout)
    on_success, on_error = Mock(), Mock()
    operation, token = make_operation(handler, max_retries=3, on_success=on_success, on_error=on_error)
    operation.start()

    assert handler.call_count == 4
    on_success.assert_not_called()
    on_error.assert_called_once()
    response = on_error.call_args.args[0]
    assert response.status_code is HTTPStatusCode.UNKNOWN_STATUS
    assert isinstance(response.error, httpx.ReadTimeout)
    assert response.url == URL
    assert token.state is RequestState.FAILED


def test_request_operation_no_retry_on_other_errors() -> None:
    handler = ScriptedHandler(httpx.ConnectError, httpx.Response(200))
    on_error = Mock()
    operation, _ = make_operation(handler, max_retries=3, on_error=on_error)
    operation.start()

    assert handler.call_count == 1
    assert isinstance(on_error.call_args.args[0].error, httpx.ConnectError)


def test_request_operation_no_retry_on_error_status() -> None:
    handler = ScriptedHandler(httpx.Response(503, text="maintenance"))
    on_error = Mock()
    operation, _ = make_operation(handler, max_retries=3, on_error=on_error)
    operation.start()

    assert handler.call_count == 1
    response = on_error.call_args.args[0]
    assert response.status_code is HTTPStatusCode.SERVICE_UNAVAILABLE
    assert response.body == b"maintenance"
    assert response.error is None


def test_request_operation_content_type_mismatch() -> None:
    handler = ScriptedHandler(httpx.Response(200, html="<p>hi</p>"))
    on_success, on_error = Mock(), Mock()
    operation, _ = make_operation(
        handler,
        request=HTTPRequest(expected_response_content_type=HTTPContentType.JSON),
        on_success=on_success,
        on_error=on_error,
    )
    operation.start()

    on_success.assert_not_called()
    response = on_error.call_args.args[0]
    assert response.status_code is HTTPStatusCode.OK
    assert response.content_type is HTTPContentType.HTML


def test_request_operation_cancel_before_completion(manual_dispatcher: Dispatcher) -> None:
    """Test that cancelling in flight suppresses every callback."""
    handler = ScriptedHandler(httpx.Response(200))
    dispatcher = manual_dispatcher
    on_success, on_error = Mock(), Mock()
    operation, token = make_operation(
        handler, dispatcher=dispatcher, on_success=on_success, on_error=on_error
    )
    operation.start()
    assert token.state is RequestState.IN_FLIGHT
    assert not token.is_cancelled

    token.cancel()
    dispatcher.worker.run_pending()
    dispatcher.main.run_pending()

    on_success.assert_not_called()
    on_error.assert_not_called()
    assert token.state is RequestState.CANCELLED


def test_request_operation_cancel_during_retries(manual_dispatcher: Dispatcher) -> None:
    """Test that no retry is issued once the chain is cancelled."""
    handler = ScriptedHandler(httpx.ReadTimeout)
    dispatcher = manual_dispatcher
    on_success, on_error = Mock(), Mock()
    operation, token = make_operation(
        handler, max_retries=5, dispatcher=dispatcher, on_success=on_success, on_error=on_error
    )
    operation.start()
    fn, args = dispatcher.worker.pending.pop(0)
    fn(*args)
    assert handler.call_count == 1
    assert token.state is RequestState.RETRYING

    token.cancel()
    dispatcher.worker.run_pending()
    dispatcher.main.run_pending()

    assert handler.call_count == 1
    on_success.assert_not_called()
    on_error.assert_not_called()


def test_request_operation_cancel_after_response_before_delivery() -> None:
    handler = ScriptedHandler(httpx.Response(200))
    dispatcher = Dispatcher(main=ManualQueue(), worker=InlineQueue())
    on_success = Mock()
    operation, token = make_operation(handler, dispatcher=dispatcher, on_success=on_success)
    operation.start()
    assert handler.call_count == 1

    token.cancel()
    dispatcher.main.run_pending()
    on_success.assert_not_called()


def test_request_operation_calls_attempt_hook() -> None:
    handler = ScriptedHandler(httpx.ReadTimeout, httpx.Response(200))
    hook = Mock()
    operation, _ = make_operation(handler, max_retries=1, on_attempt_finished=hook)
    operation.start()
    assert hook.call_count == 2
