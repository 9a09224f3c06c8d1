r"""Result record of an encoding or decoding transaction."""

from __future__ import annotations

__all__ = ["HTTPResults"]

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from netkit.status import HTTPStatusCode

R = TypeVar("R")


@dataclass
class HTTPResults(Generic[R]):
    """Outcome of a transaction with the backend.

    Attributes:
        is_success: Whether the transaction succeeded.
        response_code: Status code of the API response.
        headers: Lower-cased response headers.
        message: Info message from the SDK or the backend.
        object: The decoded object, if any.
        error: The error raised under the transaction, if any.
    """

    is_success: bool = False
    response_code: HTTPStatusCode = HTTPStatusCode.UNKNOWN_STATUS
    headers: dict[str, str] = field(default_factory=dict)
    message: str = ""
    object: R | None = None
    error: BaseException | None = None
