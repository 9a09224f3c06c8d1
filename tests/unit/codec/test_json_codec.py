from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime, timezone
from unittest.mock import Mock

import pytest
from coola.equality import objects_are_equal
from pydantic import BaseModel

from netkit.codec import DateFormatter, HTTPResults, JSONCodec
from netkit.content_type import HTTPContentType
from netkit.dispatch import Dispatcher
from netkit.exceptions import CodecError
from netkit.response import HTTPResponse
from netkit.status import HTTPStatusCode
from tests.helpers import ManualQueue


@dataclass
class Profile:
    name: str
    age: int


class Event(BaseModel):
    title: str
    starts_at: datetime


def make_response(
    body: bytes | None, status_code: HTTPStatusCode = HTTPStatusCode.OK
) -> HTTPResponse:
    return HTTPResponse(
        url="https://api.example.com/profile",
        status_code=status_code,
        headers={"Content-Type": "application/json", "X-Request-ID": "7"},
        body=body,
        content_type=HTTPContentType.JSON,
    )


###############################
#     Tests for JSONCodec     #
###############################


def test_json_codec_loads() -> None:
    assert JSONCodec().loads(b'{"a": [1, 2]}') == {"a": [1, 2]}


def test_json_codec_loads_invalid() -> None:
    with pytest.raises(ValueError):  # noqa: PT011
        JSONCodec().loads(b"{")


def test_json_codec_encode_dataclass() -> None:
    result, data = JSONCodec().encode_object(Profile(name="Min", age=30))
    assert result.is_success
    assert result.error is None
    assert json.loads(data) == {"name": "Min", "age": 30}


def test_json_codec_encode_model_with_default_date_format() -> None:
    event = Event(title="launch", starts_at=datetime(2017, 9, 9, 12, 0, 0, 250000, tzinfo=timezone.utc))
    result, data = JSONCodec().encode_object(event)
    assert result.is_success
    assert json.loads(data) == {"title": "launch", "starts_at": "2017-09-09T12:00:00.250Z"}


def test_json_codec_encode_iso8601() -> None:
    event = Event(title="launch", starts_at=datetime(2017, 9, 9, 12, 0, tzinfo=timezone.utc))
    _, data = JSONCodec(use_iso8601=True).encode_object(event)
    assert json.loads(data)["starts_at"] == "2017-09-09T12:00:00Z"


def test_json_codec_encode_custom_date_formatter() -> None:
    codec = JSONCodec(date_formatter=DateFormatter(pattern="%d/%m/%Y"))
    event = Event(title="launch", starts_at=datetime(2017, 9, 9, 12, 0, tzinfo=timezone.utc))
    _, data = codec.encode_object(event)
    assert json.loads(data)["starts_at"] == "09/09/2017"


def test_json_codec_dumps_date() -> None:
    assert JSONCodec().dumps({"day": date(2017, 9, 9)}) == b'{"day": "2017-09-09"}'


def test_json_codec_encode_failure() -> None:
    """Test that an unserializable object yields a failed result."""
    result, data = JSONCodec().encode_object({"handle": object()})
    assert data is None
    assert not result.is_success
    assert isinstance(result.error, CodecError)
    assert result.message == "Encoding dict failed."


def test_json_codec_decode_success_response() -> None:
    callback = Mock()
    JSONCodec().decode_success_response(make_response(b'{"name": "Min", "age": 30}'), Profile, callback)

    result = callback.call_args.args[0]
    assert objects_are_equal(
        result,
        HTTPResults(
            is_success=True,
            response_code=HTTPStatusCode.OK,
            headers={"content-type": "application/json", "x-request-id": "7"},
            object=Profile(name="Min", age=30),
        ),
    )


def test_json_codec_decode_success_response_transform() -> None:
    callback = Mock()
    JSONCodec().decode_success_response(
        make_response(b'{"name": "Min", "age": 30}'),
        Profile,
        callback,
        transform=lambda profile: profile.name.upper(),
    )
    assert callback.call_args.args[0].object == "MIN"


def test_json_codec_decode_success_response_list() -> None:
    callback = Mock()
    JSONCodec().decode_success_response(
        make_response(b'[{"name": "A", "age": 1}, {"name": "B", "age": 2}]'), list[Profile], callback
    )
    assert callback.call_args.args[0].object == [Profile("A", 1), Profile("B", 2)]


def test_json_codec_decode_success_response_model_date() -> None:
    callback = Mock()
    JSONCodec().decode_success_response(
        make_response(b'{"title": "launch", "starts_at": "2017-09-09T13:00:00.000Z"}'),
        Event,
        callback,
    )
    assert callback.call_args.args[0].object.starts_at == datetime(
        2017, 9, 9, 13, 0, tzinfo=timezone.utc
    )


def test_json_codec_decode_success_response_invalid_body() -> None:
    """Test that a decode failure is stored on the result."""
    callback = Mock()
    JSONCodec().decode_success_response(make_response(b'{"name": "Min"}'), Profile, callback)

    result = callback.call_args.args[0]
    assert result.object is None
    assert isinstance(result.error, CodecError)
    assert result.message.startswith("Decoding Profile failed.")


def test_json_codec_decode_success_response_hops_queues() -> None:
    main, worker = ManualQueue(), ManualQueue()
    codec = JSONCodec(dispatcher=Dispatcher(main=main, worker=worker))
    callback = Mock()
    codec.decode_success_response(make_response(b'{"name": "Min", "age": 30}'), Profile, callback)

    worker.run_pending()
    callback.assert_not_called()
    main.run_pending()
    callback.assert_called_once()


def test_json_codec_decode_error_response() -> None:
    callback = Mock()
    JSONCodec().decode_error_response(
        make_response(b"Profile locked", status_code=HTTPStatusCode.FORBIDDEN), callback
    )
    result = callback.call_args.args[0]
    assert not result.is_success
    assert result.response_code is HTTPStatusCode.FORBIDDEN
    assert result.message == "Profile locked"
    assert result.object is None


def test_json_codec_change_result_type() -> None:
    result = HTTPResults(is_success=True, response_code=HTTPStatusCode.OK, object=Profile("A", 1))
    assert JSONCodec.change_result_type(result, Profile).object == Profile("A", 1)
    changed = JSONCodec.change_result_type(result, Event)
    assert changed.object is None
    assert changed.is_success
    assert result.object == Profile("A", 1)
