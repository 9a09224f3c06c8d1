r"""Exception classes raised by netkit.

Terminal request outcomes are always delivered through callbacks as
``HTTPResponse`` envelopes, so these exceptions only surface from
configuration, decoding helpers, and collaborators.
"""

from __future__ import annotations

__all__ = ["CodecError", "InvalidJWTError", "JWTErrorKind", "NetkitError", "ReachabilityError"]

from enum import Enum


class NetkitError(Exception):
    """Base class for all netkit errors."""


class JWTErrorKind(Enum):
    """Reasons why decoding a JSON Web Token can fail.

    Attributes:
        NOT_ENOUGH_SEGMENTS: The compact token has fewer than 3 segments.
        INVALID_BASE64: The payload segment is not valid base64url.
        INVALID_JSON: The payload is not a JSON object.
    """

    NOT_ENOUGH_SEGMENTS = "not_enough_segments"
    INVALID_BASE64 = "invalid_base64"
    INVALID_JSON = "invalid_json"


class InvalidJWTError(NetkitError):
    r"""Exception raised when a JSON Web Token cannot be decoded.

    Args:
        kind: The failure kind.
        reason: A human readable reason.

    Example:
        ```pycon
        >>> from netkit.exceptions import InvalidJWTError, JWTErrorKind
        >>> error = InvalidJWTError(JWTErrorKind.NOT_ENOUGH_SEGMENTS, "Not enough segments")
        >>> error.kind
        <JWTErrorKind.NOT_ENOUGH_SEGMENTS: 'not_enough_segments'>
        >>> str(error)
        'Decode Error: Not enough segments'

        ```
    """

    def __init__(self, kind: JWTErrorKind, reason: str) -> None:
        super().__init__(f"Decode Error: {reason}")
        self.kind = kind
        self.reason = reason


class ReachabilityError(NetkitError):
    """Exception raised when a reachability probe cannot be created for a
    host."""


class CodecError(NetkitError):
    r"""Exception describing a JSON encoding or decoding failure.

    Instances are stored on ``HTTPResults.error`` rather than raised
    across the public API.

    Args:
        message: A descriptive error message.
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
