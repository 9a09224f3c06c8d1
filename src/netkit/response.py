r"""Response envelope returned to callers.

``HTTPResponse`` normalizes a completed call, independent of httpx's
native response type. It also carries the synthetic envelopes produced for
local failures (invalid URL, no internet, missing response).
"""

from __future__ import annotations

__all__ = ["HTTPResponse", "JSONLoader"]

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from netkit.content_type import HTTPContentType
from netkit.dispatch import Dispatcher
from netkit.status import HTTPStatusCode

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    import httpx

logger: logging.Logger = logging.getLogger(__name__)


class JSONLoader(Protocol):
    """Anything able to deserialize JSON bytes."""

    def loads(self, data: bytes) -> Any:
        """Deserialize ``data``. Raises ``ValueError`` on invalid input."""


@dataclass(eq=False)
class HTTPResponse:
    r"""Normalized result of an HTTP call.

    Header names are lower-cased on construction so lookups are
    case-insensitive. The deserialized JSON body is computed at most once
    per instance and cached, whichever accessor triggers it.

    Args:
        url: The response URL. ``None`` only when no URL could be formed.
        status_code: The status code, possibly synthetic.
        headers: Response headers.
        body: Response body bytes, if any.
        content_type: Content type derived from the response MIME type.
        error: The underlying error, if any.
        codec: JSON loader used by ``json``. Defaults to ``JSONCodec()``.
        dispatcher: Execution contexts used by the asynchronous accessors.
            Defaults to an inline dispatcher.

    Example:
        ```pycon
        >>> from netkit.content_type import HTTPContentType
        >>> from netkit.response import HTTPResponse
        >>> from netkit.status import HTTPStatusCode
        >>> response = HTTPResponse(
        ...     url="https://api.example.com/data",
        ...     status_code=HTTPStatusCode.OK,
        ...     headers={"Content-Type": "application/json"},
        ...     body=b'{"name": "bootstrap"}',
        ...     content_type=HTTPContentType.JSON,
        ... )
        >>> response.headers
        {'content-type': 'application/json'}
        >>> response.json()
        {'name': 'bootstrap'}

        ```
    """

    url: str | None
    status_code: HTTPStatusCode
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    content_type: HTTPContentType | None = None
    error: BaseException | None = None
    codec: JSONLoader | None = field(default=None, repr=False)
    dispatcher: Dispatcher | None = field(default=None, repr=False)
    _json_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _json_loaded: bool = field(default=False, init=False, repr=False)
    _json_value: Any = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.headers = lower_case_headers(self.headers)
        if self.codec is None:
            # Deferred import, the codec module imports this one for typing
            from netkit.codec import JSONCodec

            self.codec = JSONCodec()
        if self.dispatcher is None:
            self.dispatcher = Dispatcher.inline()

    @classmethod
    def from_httpx(
        cls,
        response: httpx.Response,
        body: bytes | None = None,
        error: BaseException | None = None,
        **kwargs: Any,
    ) -> HTTPResponse:
        """Build an envelope from an httpx response.

        Args:
            response: The httpx response.
            body: The body bytes read from the response.
            error: The error reported together with the response, if any.
            **kwargs: Additional keyword arguments (``codec``, ``dispatcher``).

        Returns:
            The envelope.
        """
        return cls(
            url=str(response.url),
            status_code=HTTPStatusCode.from_code(response.status_code),
            headers=dict(response.headers.items()),
            body=body,
            content_type=HTTPContentType.from_mime_type(response.headers.get("content-type")),
            error=error,
            **kwargs,
        )

    def header(self, name: str, default: str | None = None) -> str | None:
        """Look up a header value, ignoring the case of ``name``."""
        return self.headers.get(name.lower(), default)

    @property
    def is_success(self) -> bool:
        """``True`` if the status code is in the 200-399 range."""
        return self.status_code.is_success

    def json(self) -> Any:
        """Deserialize the JSON body.

        Returns:
            The deserialized value, or ``None`` if the response is not JSON,
            has no body, or the body is not valid JSON.
        """
        with self._json_lock:
            if not self._json_loaded:
                self._json_value = self._deserialize()
                self._json_loaded = True
            return self._json_value

    def json_async(self, callback: Callable[[Any], None]) -> None:
        """Deserialize the JSON body on the worker queue.

        The callback always runs on the main queue. A cached value, or a
        body that is not JSON, skips the worker queue.

        Args:
            callback: Receives the deserialized value or ``None``.
        """
        if self._json_loaded:
            self.dispatcher.main.submit(callback, self._json_value)
            return
        if not self._has_json_body():
            self.dispatcher.main.submit(callback, None)
            return

        def deserialize() -> None:
            value = self.json()
            self.dispatcher.main.submit(callback, value)

        self.dispatcher.worker.submit(deserialize)

    def json_value(self, key_path: str, callback: Callable[[Any], None]) -> None:
        r"""Look up a value in the JSON body asynchronously.

        Args:
            key_path: Comma-separated keys, for example
                ``"country,city,address"``.
            callback: Receives the value, or ``None`` if any key is
                missing. Runs on the main queue.
        """
        keys = [key for key in key_path.strip().split(",") if key]

        def lookup(value: Any) -> None:
            for key in keys:
                value = value.get(key) if isinstance(value, dict) else None
            callback(value)

        self.json_async(lookup)

    def _has_json_body(self) -> bool:
        return self.content_type == HTTPContentType.JSON and self.body is not None

    def _deserialize(self) -> Any:
        if not self._has_json_body():
            return None
        try:
            return self.codec.loads(self.body)
        except ValueError as exc:
            logger.warning(f"JSON decode of response body from {self.url} failed: {exc}")
            return None


def lower_case_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    r"""Lower-case header names.

    Args:
        headers: The headers to normalize.

    Returns:
        A new dictionary with lower-cased keys.

    Example:
        ```pycon
        >>> from netkit.response import lower_case_headers
        >>> lower_case_headers({"Content-Type": "text/plain", "X-Token": "abc"})
        {'content-type': 'text/plain', 'x-token': 'abc'}

        ```
    """
    return {key.lower(): value for key, value in (headers or {}).items()}
