r"""Decoding of JSON Web Token payloads.

Only the payload segment is decoded. Signatures are not verified: the
token is issued and checked by the server, the client only needs the
registered claims to schedule expiry.

Example:
    ```pycon
    >>> from netkit.token.jwt import base64url_encode, decode_jwt
    >>> payload = base64url_encode(b'{"iss": "sunflash", "exp": 1504962000}')
    >>> result = decode_jwt(f"e30.{payload}.signature")
    >>> result.error is None
    True
    >>> result.payload.issuer
    'sunflash'
    >>> result.payload.expiration.isoformat()
    '2017-09-09T13:00:00+00:00'

    ```
"""

from __future__ import annotations

__all__ = [
    "JWTDecodeResult",
    "JWTPayload",
    "base64url_decode",
    "base64url_encode",
    "decode_jwt",
    "decode_payload",
]

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from jose import utils as jose_utils

from netkit.exceptions import InvalidJWTError, JWTErrorKind

logger: logging.Logger = logging.getLogger(__name__)

_BASE64URL_PATTERN = re.compile(r"[A-Za-z0-9_-]*")


@dataclass(frozen=True)
class JWTPayload:
    """Registered claims of a JWT payload.

    Attributes:
        issuer: The ``iss`` claim.
        subject: The ``sub`` claim.
        audience: The ``aud`` claim.
        expiration: The ``exp`` claim as a UTC datetime.
        not_before: The ``nbf`` claim as a UTC datetime.
        issued_at: The ``iat`` claim as a UTC datetime.
        unique_id: The ``jti`` claim.
        raw: Every claim of the payload, registered or not.
    """

    issuer: str | None = None
    subject: str | None = None
    audience: str | None = None
    expiration: datetime | None = None
    not_before: datetime | None = None
    issued_at: datetime | None = None
    unique_id: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> JWTPayload:
        """Build a payload from decoded claims. Claims of the wrong type
        are ignored."""
        return cls(
            issuer=_string_claim(claims, "iss"),
            subject=_string_claim(claims, "sub"),
            audience=_string_claim(claims, "aud"),
            expiration=_date_claim(claims, "exp"),
            not_before=_date_claim(claims, "nbf"),
            issued_at=_date_claim(claims, "iat"),
            unique_id=_string_claim(claims, "jti"),
            raw=dict(claims),
        )


@dataclass(frozen=True)
class JWTDecodeResult:
    """Outcome of ``decode_jwt``: exactly one of ``payload`` and ``error``
    is set."""

    payload: JWTPayload | None = None
    error: InvalidJWTError | None = None


def decode_payload(jwt: str) -> JWTPayload:
    r"""Decode the payload of a compact JWT.

    Segments after the third one are ignored.

    Args:
        jwt: The compact token ``header.payload.signature``.

    Returns:
        The decoded payload.

    Raises:
        InvalidJWTError: If the token has fewer than 3 segments, or the
            payload is not base64url-encoded JSON object.

    Example:
        ```pycon
        >>> from netkit.token.jwt import decode_payload
        >>> decode_payload("only.two")
        Traceback (most recent call last):
        ...
        netkit.exceptions.InvalidJWTError: Decode Error: Not enough segments

        ```
    """
    segments = jwt.split(".")
    if len(segments) < 3:
        raise InvalidJWTError(JWTErrorKind.NOT_ENOUGH_SEGMENTS, "Not enough segments")
    try:
        data = base64url_decode(segments[1])
    except ValueError as exc:
        raise InvalidJWTError(
            JWTErrorKind.INVALID_BASE64, f"Payload is not correctly encoded as base64: {exc}"
        ) from exc
    try:
        claims = json.loads(data)
    except ValueError as exc:
        raise InvalidJWTError(JWTErrorKind.INVALID_JSON, f"Payload is not valid JSON: {exc}") from exc
    if not isinstance(claims, dict):
        raise InvalidJWTError(JWTErrorKind.INVALID_JSON, "Payload is not a JSON object")
    return JWTPayload.from_claims(claims)


def decode_jwt(jwt: str) -> JWTDecodeResult:
    """Decode the payload of a compact JWT without raising.

    Args:
        jwt: The compact token.

    Returns:
        The payload, or the decoding error.
    """
    try:
        return JWTDecodeResult(payload=decode_payload(jwt))
    except InvalidJWTError as exc:
        logger.debug(f"Could not decode JWT: {exc}")
        return JWTDecodeResult(error=exc)


def base64url_encode(data: bytes) -> str:
    r"""Encode bytes as unpadded base64url.

    Example:
        ```pycon
        >>> from netkit.token.jwt import base64url_encode
        >>> base64url_encode(b'{"exp":1504962000}')
        'eyJleHAiOjE1MDQ5NjIwMDB9'

        ```
    """
    return jose_utils.base64url_encode(data).decode("ascii")


def base64url_decode(text: str) -> bytes:
    r"""Decode unpadded base64url text.

    Raises:
        ValueError: If ``text`` is not valid base64url.

    Example:
        ```pycon
        >>> from netkit.token.jwt import base64url_decode
        >>> base64url_decode("eyJleHAiOjE1MDQ5NjIwMDB9")
        b'{"exp":1504962000}'

        ```
    """
    if not _BASE64URL_PATTERN.fullmatch(text):
        msg = f"invalid base64url character in {text!r}"
        raise ValueError(msg)
    if len(text) % 4 == 1:
        msg = f"invalid base64url length {len(text)}"
        raise ValueError(msg)
    return jose_utils.base64url_decode(text.encode("ascii"))


def _string_claim(claims: dict[str, Any], name: str) -> str | None:
    value = claims.get(name)
    return value if isinstance(value, str) else None


def _date_claim(claims: dict[str, Any], name: str) -> datetime | None:
    value = claims.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug(f"Claim {name!r} is out of range: {value}")
        return None
