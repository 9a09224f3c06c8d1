r"""Retry and validation decisions for completed attempts.

This module provides the RetryDecider class that decides whether an
attempt should be retried and whether a response counts as a success.
"""

from __future__ import annotations

__all__ = ["RetryDecider"]

import logging
from typing import TYPE_CHECKING

import httpx

from netkit.content_type import HTTPContentType

if TYPE_CHECKING:
    from netkit.request import HTTPRequest

logger: logging.Logger = logging.getLogger(__name__)


class RetryDecider:
    r"""Decides whether an attempt should be retried.

    Only timeouts are retried, up to ``max_retries`` times.

    Args:
        max_retries: Maximum number of retries of the call chain.

    Example:
        ```pycon
        >>> import httpx
        >>> from netkit.retry.decider import RetryDecider
        >>> decider = RetryDecider(max_retries=1)
        >>> decider.should_retry(httpx.ReadTimeout("timed out"), retries_count=0)
        (True, 'ReadTimeout')
        >>> decider.should_retry(httpx.ReadTimeout("timed out"), retries_count=1)
        (False, 'max retries exhausted')
        >>> decider.should_retry(httpx.ConnectError("refused"), retries_count=0)
        (False, 'not a timeout')

        ```
    """

    def __init__(self, max_retries: int) -> None:
        self.max_retries = max_retries

    def should_retry(self, error: Exception | None, retries_count: int) -> tuple[bool, str]:
        """Determine if an attempt should trigger a retry.

        Args:
            error: The transport error of the attempt, if any.
            retries_count: Retries already performed in the chain.

        Returns:
            Tuple of (should_retry, reason).
        """
        if error is None:
            return (False, "no error")
        if not isinstance(error, httpx.TimeoutException):
            return (False, "not a timeout")
        if retries_count >= self.max_retries:
            return (False, "max retries exhausted")
        return (True, type(error).__name__)

    @staticmethod
    def validate_response(request: HTTPRequest, response: httpx.Response | None) -> bool:
        """Check whether a response counts as a success.

        A response is successful if its status is in the 200-399 range
        and, when the request expects a response content type, the
        response content type matches it.

        Args:
            request: The request descriptor.
            response: The response, if any.

        Returns:
            ``True`` if the response is valid.
        """
        if response is None:
            return False
        if not 200 <= response.status_code <= 399:
            logger.debug(f"Response from {response.url} has status {response.status_code}")
            return False
        expected = request.expected_response_content_type
        if expected is not None:
            actual = HTTPContentType.from_mime_type(response.headers.get("content-type"))
            if actual != expected:
                logger.debug(
                    f"Response from {response.url} has content type {actual.value}, "
                    f"expected {expected.value}"
                )
                return False
        return True
