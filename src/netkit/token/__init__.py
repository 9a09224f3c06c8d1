r"""Bearer token lifecycle: JWT decoding, secure storage and expiry."""

from __future__ import annotations

__all__ = [
    "JWTDecodeResult",
    "JWTPayload",
    "KeyringStorage",
    "MemoryStorage",
    "SecureStorage",
    "TokenManager",
    "decode_jwt",
    "decode_payload",
]

from netkit.token.jwt import JWTDecodeResult, JWTPayload, decode_jwt, decode_payload
from netkit.token.manager import TokenManager
from netkit.token.storage import KeyringStorage, MemoryStorage, SecureStorage
