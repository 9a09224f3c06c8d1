r"""Human-readable dumps of response envelopes.

``log_response`` has the signature of a response observer and can be
registered on an ``HTTPClient`` to log every completed call.

Example:
    ```pycon
    >>> from netkit.content_type import HTTPContentType
    >>> from netkit.response import HTTPResponse
    >>> from netkit.status import HTTPStatusCode
    >>> from netkit.utils.describe import describe_response
    >>> response = HTTPResponse(
    ...     url="https://api.example.com/users/1",
    ...     status_code=HTTPStatusCode.OK,
    ...     headers={"Content-Type": "application/json"},
    ...     body=b'{"id": 1}',
    ...     content_type=HTTPContentType.JSON,
    ... )
    >>> print(describe_response(response))
    URL: https://api.example.com/users/1
    Status: 200 (OK)
    Body:
    {
      "id": 1
    }

    ```
"""

from __future__ import annotations

__all__ = ["describe_response", "log_response"]

import json
import logging
from typing import TYPE_CHECKING

from netkit.content_type import HTTPContentType

if TYPE_CHECKING:
    from netkit.response import HTTPResponse

response_logger: logging.Logger = logging.getLogger("netkit.response")


def describe_response(
    response: HTTPResponse, show_headers: bool = False, show_body: bool = True
) -> str:
    r"""Render a response envelope as multi-line text.

    JSON bodies are pretty-printed; other bodies are decoded as UTF-8
    with replacement characters.

    Args:
        response: The envelope to render.
        show_headers: If ``True``, include the headers.
        show_body: If ``True``, include the body.

    Returns:
        The rendered text.
    """
    lines = [
        f"URL: {response.url}",
        f"Status: {response.status_code.value} ({response.status_code.name})",
    ]
    if response.error is not None:
        lines.append(f"Error: {type(response.error).__name__}: {response.error}")
    if show_headers and response.headers:
        lines.append("Headers:")
        lines.extend(f"  {name}: {value}" for name, value in sorted(response.headers.items()))
    if show_body and response.body:
        lines.append("Body:")
        lines.append(_render_body(response))
    return "\n".join(lines)


def log_response(response: HTTPResponse) -> None:
    """Log ``response`` at INFO level on the ``netkit.response`` logger."""
    if response_logger.isEnabledFor(logging.INFO):
        response_logger.info(describe_response(response, show_headers=True))


def _render_body(response: HTTPResponse) -> str:
    if response.content_type == HTTPContentType.JSON:
        value = response.json()
        if value is not None:
            return json.dumps(value, indent=2, ensure_ascii=False)
    return response.body.decode("utf-8", errors="replace")
