r"""Secure storage backends for persisted tokens.

``KeyringStorage`` stores secrets in the operating system's credential
store through the ``keyring`` library. ``MemoryStorage`` keeps them in a
dictionary and is meant for tests and ephemeral sessions.
"""

from __future__ import annotations

__all__ = ["KeyringStorage", "MemoryStorage", "SecureStorage"]

import logging
import threading
from typing import Protocol

import keyring
from keyring.errors import PasswordDeleteError

logger: logging.Logger = logging.getLogger(__name__)


class SecureStorage(Protocol):
    """Key-value store for secrets."""

    def get(self, key: str) -> str | None:
        """Return the secret stored under ``key``, if any."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def delete(self, key: str) -> bool:
        """Delete the secret stored under ``key``.

        Returns:
            ``True`` if a secret was deleted.
        """


class KeyringStorage:
    r"""Secure storage backed by the system keyring.

    Args:
        prefix: Service name under which secrets are stored.
        synchronizable: Whether the secrets may be synchronized across
            devices. Recorded for backends supporting it, the default
            keyring backends ignore it.

    Example:
        ```pycon
        >>> from netkit.token.storage import KeyringStorage
        >>> storage = KeyringStorage(prefix="com.example.app")
        >>> storage.set("authorization", "Bearer abc")  # doctest: +SKIP
        >>> storage.get("authorization")  # doctest: +SKIP
        'Bearer abc'

        ```
    """

    def __init__(self, prefix: str = "netkit", synchronizable: bool = False) -> None:
        self.prefix = prefix
        self.synchronizable = synchronizable

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(prefix={self.prefix!r}, "
            f"synchronizable={self.synchronizable})"
        )

    def get(self, key: str) -> str | None:
        return keyring.get_password(self.prefix, key)

    def set(self, key: str, value: str) -> None:
        keyring.set_password(self.prefix, key, value)

    def delete(self, key: str) -> bool:
        try:
            keyring.delete_password(self.prefix, key)
        except PasswordDeleteError:
            logger.debug(f"No secret {key!r} to delete in {self.prefix!r}")
            return False
        return True


class MemoryStorage:
    r"""In-memory secure storage.

    Example:
        ```pycon
        >>> from netkit.token.storage import MemoryStorage
        >>> storage = MemoryStorage()
        >>> storage.set("authorization", "abc")
        >>> storage.get("authorization")
        'abc'
        >>> storage.delete("authorization")
        True
        >>> storage.delete("authorization")
        False

        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._values.pop(key, None) is not None
