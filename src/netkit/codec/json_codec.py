r"""JSON encoding and decoding between payload bytes and typed objects.

Typed objects are pydantic models, dataclasses, or any type accepted by
``pydantic.TypeAdapter``. Decoding runs on the worker queue and results
are delivered on the main queue as ``HTTPResults``; failures are logged
and stored on the result instead of being raised.
"""

from __future__ import annotations

__all__ = ["JSONCodec"]

import json
import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError

from netkit.codec.dates import DateFormatter
from netkit.codec.results import HTTPResults
from netkit.dispatch import Dispatcher
from netkit.exceptions import CodecError

if TYPE_CHECKING:
    from collections.abc import Callable

    from netkit.response import HTTPResponse

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class JSONCodec:
    r"""Encode and decode JSON payloads.

    Args:
        date_formatter: Formatter used to encode dates. Defaults to
            ``DateFormatter()`` (``2017-09-09T12:00:00.000Z`` in UTC).
        use_iso8601: If ``True``, dates are encoded with
            ``datetime.isoformat`` instead of ``date_formatter``.
        dispatcher: Execution contexts of the asynchronous decoders.
            Defaults to an inline dispatcher.

    Example:
        ```pycon
        >>> from dataclasses import dataclass
        >>> from netkit.codec import JSONCodec
        >>> @dataclass
        ... class Profile:
        ...     name: str
        ...     age: int
        ...
        >>> codec = JSONCodec()
        >>> result, data = codec.encode_object(Profile(name="Min", age=30))
        >>> result.is_success, data
        (True, b'{"name": "Min", "age": 30}')
        >>> codec.loads(data)
        {'name': 'Min', 'age': 30}

        ```
    """

    def __init__(
        self,
        date_formatter: DateFormatter | None = None,
        use_iso8601: bool = False,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self.date_formatter = date_formatter or DateFormatter()
        self.use_iso8601 = use_iso8601
        self.dispatcher = dispatcher or Dispatcher.inline()

    def loads(self, data: bytes) -> Any:
        """Deserialize JSON bytes into plain Python values.

        Raises:
            ValueError: If ``data`` is not valid JSON.
        """
        return json.loads(data)

    def dumps(self, value: Any) -> bytes:
        """Serialize plain Python values, encoding dates with the
        configured strategy."""
        return json.dumps(value, default=self._encode_default).encode()

    def encode_object(self, obj: T) -> tuple[HTTPResults[T], bytes | None]:
        """Encode a typed object to JSON bytes.

        Args:
            obj: The object to encode.

        Returns:
            The result of the encoding and the bytes, ``None`` on failure.
        """
        result: HTTPResults[T] = HTTPResults()
        try:
            value = TypeAdapter(type(obj)).dump_python(obj, mode="python")
            data = self.dumps(value)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            message = f"Encoding {type(obj).__name__} failed."
            logger.warning(f"{message} {exc}")
            result.message = message
            result.error = CodecError(message, cause=exc)
            return result, None
        result.is_success = True
        return result, data

    def decode_success_response(
        self,
        response: HTTPResponse,
        to_type: type[T],
        decoded_result: Callable[[HTTPResults[Any]], None],
        transform: Callable[[T], Any] | None = None,
    ) -> None:
        """Decode a successful response into a typed object.

        Decoding runs on the worker queue and ``decoded_result`` runs on the
        main queue.

        Args:
            response: The response envelope.
            to_type: The type to decode the body to.
            decoded_result: Receives the result.
            transform: Optional function applied to the decoded object.
        """

        def decode() -> None:
            result: HTTPResults[Any] = HTTPResults(
                is_success=True,
                response_code=response.status_code,
                headers=dict(response.headers),
            )
            if response.body is not None:
                try:
                    obj = TypeAdapter(to_type).validate_json(response.body)
                    result.object = transform(obj) if transform is not None else obj
                except ValueError as exc:
                    message = f"Decoding {getattr(to_type, '__name__', to_type)} failed. {response.url or ''}"
                    logger.warning(f"{message} {exc}")
                    result.error = CodecError(message, cause=exc)
                    result.message = message
            self.dispatcher.main.submit(decoded_result, result)

        self.dispatcher.worker.submit(decode)

    def decode_error_response(
        self,
        response: HTTPResponse,
        error_result: Callable[[HTTPResults[Any]], None],
    ) -> None:
        """Convert an error response into a failed result.

        The body text becomes the result message.

        Args:
            response: The response envelope.
            error_result: Receives the result on the main queue.
        """

        def decode() -> None:
            message = ""
            if response.body is not None:
                try:
                    message = response.body.decode("utf-8")
                except UnicodeDecodeError:
                    logger.debug(f"Error response body from {response.url} is not UTF-8")
            result: HTTPResults[Any] = HTTPResults(
                is_success=False,
                response_code=response.status_code,
                headers=dict(response.headers),
                message=message,
                error=response.error,
            )
            self.dispatcher.main.submit(error_result, result)

        self.dispatcher.worker.submit(decode)

    @staticmethod
    def change_result_type(result: HTTPResults[Any], to_type: type[U]) -> HTTPResults[U]:
        """Change the object type of a result.

        The object is carried over only if it is an instance of
        ``to_type``.
        """
        obj = result.object if isinstance(result.object, to_type) else None
        return replace(result, object=obj)

    def _encode_default(self, value: Any) -> Any:
        if isinstance(value, datetime):
            if self.use_iso8601:
                if value.tzinfo is None:
                    value = value.replace(tzinfo=timezone.utc)
                return value.isoformat().replace("+00:00", "Z")
            return self.date_formatter.format(value)
        if isinstance(value, date):
            return value.isoformat()
        msg = f"Object of type {type(value).__name__} is not JSON serializable"
        raise TypeError(msg)
