r"""netkit - HTTP client SDK core built on httpx.

This package provides a callback-based HTTP client with automatic retry
on timeout, reachability-gated requests, response envelopes with cached
JSON decoding, cancellation tokens, and JWT bearer token lifecycle
management.

Key Features:
    - Relative request paths resolved once per call chain against a base URL
    - Retry on timeout with a configurable budget
    - Requests short-circuited while no monitored host is reachable
    - Callbacks and global response observers delivered on a main queue
    - Cancellation tokens with an explicit lifecycle state
    - Typed JSON (de)serialization with pydantic
    - Bearer token persistence in the system keyring and proactive expiry

Example:
    ```pycon
    >>> from netkit import ClientConfig, HTTPClient, HTTPRequest
    >>> client = HTTPClient(config=ClientConfig(base_url="https://api.example.com"))  # doctest: +SKIP
    >>> token = client.request(
    ...     HTTPRequest(path="users/1"),
    ...     on_success=lambda response: print(response.json()),
    ...     on_error=lambda response: print(response.status_code),
    ... )  # doctest: +SKIP
    >>> token.cancel()  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "CancellationToken",
    "ClientConfig",
    "Dispatcher",
    "HTTPClient",
    "HTTPContentType",
    "HTTPMethod",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPStatusCode",
    "HttpxTransport",
    "JSONCodec",
    "NetkitError",
    "ReachabilityMonitor",
    "RequestState",
    "TokenManager",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from netkit.cancellation import CancellationToken, RequestState
from netkit.client import HTTPClient
from netkit.codec import JSONCodec
from netkit.content_type import HTTPContentType
from netkit.core.config import ClientConfig
from netkit.dispatch import Dispatcher
from netkit.exceptions import NetkitError
from netkit.reachability import ReachabilityMonitor
from netkit.request import HTTPMethod, HTTPRequest
from netkit.response import HTTPResponse
from netkit.status import HTTPStatusCode
from netkit.token import TokenManager
from netkit.transport import HttpxTransport

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
