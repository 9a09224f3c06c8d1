from __future__ import annotations

from unittest.mock import Mock

import httpx
import pytest

from netkit.codec import JSONCodec
from netkit.content_type import HTTPContentType
from netkit.dispatch import Dispatcher
from netkit.response import HTTPResponse, lower_case_headers
from netkit.status import HTTPStatusCode
from tests.helpers import CountingCodec, ManualQueue


def make_json_response(body: bytes | None = b'{"name": "netkit"}', **kwargs) -> HTTPResponse:
    return HTTPResponse(
        url="https://api.example.com/data",
        status_code=HTTPStatusCode.OK,
        headers={"Content-Type": "application/json"},
        body=body,
        content_type=HTTPContentType.JSON,
        **kwargs,
    )


##################################
#     Tests for HTTPResponse     #
##################################


def test_http_response_lower_cases_headers() -> None:
    response = HTTPResponse(
        url=None,
        status_code=HTTPStatusCode.OK,
        headers={"Content-Type": "text/plain", "X-Request-ID": "42"},
    )
    assert response.headers == {"content-type": "text/plain", "x-request-id": "42"}
    assert response.header("X-REQUEST-ID") == "42"
    assert response.header("missing") is None
    assert response.header("missing", "fallback") == "fallback"


def test_http_response_defaults() -> None:
    response = HTTPResponse(url=None, status_code=HTTPStatusCode.INVALID_URL)
    assert response.headers == {}
    assert response.body is None
    assert response.content_type is None
    assert response.error is None
    assert isinstance(response.codec, JSONCodec)
    assert not response.is_success


def test_http_response_from_httpx() -> None:
    request = httpx.Request("GET", "https://api.example.com/users")
    native = httpx.Response(
        404,
        headers={"Content-Type": "application/json; charset=utf-8"},
        content=b'{"error": "missing"}',
        request=request,
    )
    response = HTTPResponse.from_httpx(native, body=native.content)

    assert response.url == "https://api.example.com/users"
    assert response.status_code is HTTPStatusCode.NOT_FOUND
    assert response.header("content-type") == "application/json; charset=utf-8"
    assert response.content_type is HTTPContentType.JSON
    assert response.body == b'{"error": "missing"}'
    assert response.error is None
    assert not response.is_success


def test_http_response_from_httpx_unknown_status() -> None:
    native = httpx.Response(299, request=httpx.Request("GET", "https://api.example.com"))
    response = HTTPResponse.from_httpx(native)
    assert response.status_code is HTTPStatusCode.UNKNOWN_STATUS


def test_http_response_json() -> None:
    assert make_json_response().json() == {"name": "netkit"}


@pytest.mark.parametrize(
    "response",
    [
        HTTPResponse(url=None, status_code=HTTPStatusCode.OK, body=b"{}", content_type=HTTPContentType.TEXT),
        HTTPResponse(url=None, status_code=HTTPStatusCode.OK, content_type=HTTPContentType.JSON),
    ],
)
def test_http_response_json_not_json(response: HTTPResponse) -> None:
    assert response.json() is None


def test_http_response_json_invalid_body(caplog: pytest.LogCaptureFixture) -> None:
    response = make_json_response(body=b"{not json")
    assert response.json() is None
    assert "JSON decode of response body" in caplog.text


def test_http_response_json_cached() -> None:
    """Test that the body is parsed once for sync then async access."""
    codec = CountingCodec()
    response = make_json_response(codec=codec)
    callback = Mock()

    first = response.json()
    response.json_async(callback)

    assert codec.calls == 1
    callback.assert_called_once()
    assert callback.call_args.args[0] is first


def test_http_response_json_async_then_sync_cached() -> None:
    codec = CountingCodec()
    response = make_json_response(codec=codec, dispatcher=Dispatcher.inline())
    values = []
    response.json_async(values.append)
    assert response.json() is values[0]
    assert codec.calls == 1


def test_http_response_json_failure_cached() -> None:
    codec = CountingCodec()
    response = make_json_response(body=b"[1,", codec=codec)
    assert response.json() is None
    assert response.json() is None
    assert codec.calls == 1


def test_http_response_json_async_hops_queues() -> None:
    """Test that parsing runs on the worker queue and the callback on
    the main queue."""
    main, worker = ManualQueue(), ManualQueue()
    codec = CountingCodec()
    response = make_json_response(codec=codec, dispatcher=Dispatcher(main=main, worker=worker))
    callback = Mock()
    response.json_async(callback)

    assert codec.calls == 0
    assert worker.run_pending() == 1
    assert codec.calls == 1
    callback.assert_not_called()
    main.run_pending()
    callback.assert_called_once_with({"name": "netkit"})


def test_http_response_json_async_not_json() -> None:
    response = HTTPResponse(url=None, status_code=HTTPStatusCode.NO_INTERNET)
    callback = Mock()
    response.json_async(callback)
    callback.assert_called_once_with(None)


@pytest.mark.parametrize("body", [b'{"name": "netkit"}', None])
def test_http_response_json_async_delivers_on_main_queue(body: bytes | None) -> None:
    """Test that cached and empty bodies still deliver through the main
    queue without touching the worker queue."""
    main, worker = ManualQueue(), ManualQueue()
    response = make_json_response(body=body, dispatcher=Dispatcher(main=main, worker=worker))
    if body is not None:
        response.json()
    callback = Mock()
    response.json_async(callback)

    callback.assert_not_called()
    assert worker.run_pending() == 0
    assert main.run_pending() == 1
    callback.assert_called_once_with(response.json())


def test_http_response_json_value() -> None:
    response = make_json_response(
        body=b'{"country": {"city": {"address": "Main St 1"}}, "zip": "1000"}'
    )
    callback = Mock()
    response.json_value("country,city,address", callback)
    callback.assert_called_once_with("Main St 1")


@pytest.mark.parametrize("key_path", ["country,town", "zip,code", "missing"])
def test_http_response_json_value_missing(key_path: str) -> None:
    response = make_json_response(body=b'{"country": {"city": "Oslo"}, "zip": "1000"}')
    callback = Mock()
    response.json_value(key_path, callback)
    callback.assert_called_once_with(None)


def test_lower_case_headers() -> None:
    assert lower_case_headers({"A-B": "1"}) == {"a-b": "1"}
    assert lower_case_headers(None) == {}
