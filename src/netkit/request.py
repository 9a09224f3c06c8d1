r"""Request descriptor describing one logical HTTP call.

The descriptor is immutable. The retry counter is owned by the request
executor, which derives a new descriptor for every retry attempt with
``next_retry``.
"""

from __future__ import annotations

__all__ = ["HTTPMethod", "HTTPRequest"]

import base64
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from netkit.content_type import HTTPContentType

logger: logging.Logger = logging.getLogger(__name__)


class HTTPMethod(str, Enum):
    """HTTP request method."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    PATCH = "PATCH"
    TRACE = "TRACE"
    CONNECT = "CONNECT"


@dataclass(frozen=True)
class HTTPRequest:
    r"""Parameters and configuration of one HTTP call.

    Args:
        path: Relative URL path, resolved against the base URL once per
            call chain. Can also be an absolute URL when no base URL is
            configured.
        method: The HTTP method. Defaults to GET.
        content_type: Optional content type sent as ``Content-Type``.
        headers: Optional custom headers. They are applied after the
            content type header, so a custom ``Content-Type`` wins.
        body: Optional body bytes.
        expected_response_content_type: Optional content type the response
            must have to be considered successful.

    Attributes:
        retries_count: Number of retries already performed in the call
            chain. Always 0 for a caller-built request.

    Example:
        ```pycon
        >>> from netkit.content_type import HTTPContentType
        >>> from netkit.request import HTTPMethod, HTTPRequest
        >>> request = HTTPRequest(
        ...     path="post",
        ...     method=HTTPMethod.POST,
        ...     content_type=HTTPContentType.TEXT,
        ...     body=b"Hello World",
        ... )
        >>> request.retries_count
        0
        >>> request.next_retry().retries_count
        1

        ```
    """

    path: str = ""
    method: HTTPMethod = HTTPMethod.GET
    content_type: HTTPContentType | None = None
    headers: Mapping[str, str] | None = None
    body: bytes | None = None
    expected_response_content_type: HTTPContentType | None = None
    retries_count: int = field(default=0, init=False)

    def next_retry(self) -> HTTPRequest:
        """Derive the descriptor used for the next retry attempt.

        Returns:
            A copy of this descriptor with ``retries_count`` incremented.
        """
        request = replace(self)
        object.__setattr__(request, "retries_count", self.retries_count + 1)
        return request

    def build_headers(self) -> dict[str, str]:
        """Build the wire-level headers of the request.

        Returns:
            The ``Content-Type`` header (if any) followed by the custom
            headers. Later entries override earlier ones.
        """
        headers: dict[str, str] = {}
        if self.content_type is not None:
            headers["Content-Type"] = self.content_type.mime_type
        for key, value in (self.headers or {}).items():
            # Header names are case-insensitive on the wire
            for existing in [k for k in headers if k.lower() == key.lower()]:
                del headers[existing]
            headers[key] = value
        return headers

    def with_basic_authentication(self, user_name: str, password: str) -> HTTPRequest | None:
        """Return a copy of the request carrying a basic authentication
        header.

        Args:
            user_name: User name for authentication.
            password: Password for authentication.

        Returns:
            The new request, or ``None`` if the user name or the password
            is empty.
        """
        auth_header = self.basic_authentication_header(user_name=user_name, password=password)
        if auth_header is None:
            return None
        headers = dict(self.headers or {})
        headers.update(auth_header)
        return replace(self, headers=headers)

    @staticmethod
    def basic_authentication_header(user_name: str, password: str) -> dict[str, str] | None:
        r"""Generate a basic authentication header.

        Surrounding whitespace is removed from both credentials.

        Args:
            user_name: User name for authentication.
            password: Password for authentication.

        Returns:
            A single-entry ``Authorization`` header, or ``None`` if the user
            name or the password is empty.

        Example:
            ```pycon
            >>> from netkit.request import HTTPRequest
            >>> HTTPRequest.basic_authentication_header("neo", "secret")
            {'Authorization': 'Basic bmVvOnNlY3JldA=='}
            >>> HTTPRequest.basic_authentication_header(" ", "secret") is None
            True

            ```
        """
        user_name = user_name.strip()
        password = password.strip()
        if not user_name or not password:
            return None
        encoded = base64.b64encode(f"{user_name}:{password}".encode()).decode("ascii")
        return {"Authorization": f"Basic {encoded}"}

    @staticmethod
    def path_with_query(
        path: str, query_items: Mapping[str, str] | Sequence[tuple[str, str]]
    ) -> str | None:
        r"""Append percent-encoded query items to a path.

        Args:
            path: The relative path.
            query_items: The query items, in order.

        Returns:
            The path with its query string, or ``None`` if the path is not
            a valid URL reference.

        Example:
            ```pycon
            >>> from netkit.request import HTTPRequest
            >>> HTTPRequest.path_with_query("device/info", [("width", "1125"), ("scale", "2x")])
            'device/info?width=1125&scale=2x'

            ```
        """
        try:
            return str(httpx.URL(path, params=query_items))
        except (httpx.InvalidURL, TypeError) as exc:
            logger.debug(f"Could not add query items to {path!r}: {exc}")
            return None
