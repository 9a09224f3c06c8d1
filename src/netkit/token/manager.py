r"""Bearer token lifecycle management.

``TokenManager`` picks the bearer token up from response headers,
persists it in a secure storage, and checks its JWT expiration claim
periodically. A token expiring within one check interval is treated as
expired and cleared proactively.

Example:
    ```pycon
    >>> from netkit import HTTPResponse, HTTPStatusCode
    >>> from netkit.dispatch import InlineQueue
    >>> from netkit.token import MemoryStorage, TokenManager
    >>> manager = TokenManager(MemoryStorage(), queue=InlineQueue())
    >>> manager.on_token_configured = lambda token: print(f"configured {token}")
    >>> response = HTTPResponse(
    ...     url="https://api.example.com/login",
    ...     status_code=HTTPStatusCode.OK,
    ...     headers={"Authorization": "opaque-token"},
    ... )
    >>> manager.configure_token(response)
    configured opaque-token
    >>> manager.configure_token(response)
    >>> manager.existing_token
    'opaque-token'
    >>> manager.close()

    ```
"""

from __future__ import annotations

__all__ = ["TokenManager"]

import logging
import time
from datetime import datetime
from typing import TYPE_CHECKING

from netkit.core.config import DEFAULT_CHECK_INTERVAL, DEFAULT_TOKEN_HEADER
from netkit.core.validation import validate_interval
from netkit.dispatch import RepeatingTimer
from netkit.token.jwt import decode_jwt

if TYPE_CHECKING:
    from collections.abc import Callable

    from netkit.dispatch import DispatchQueue
    from netkit.response import HTTPResponse
    from netkit.token.storage import SecureStorage

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_PERSISTENCE_KEY = "authorization"

_BEARER_PREFIX = "bearer "


class TokenManager:
    r"""Manages the bearer token of an authenticated session.

    ``configure_token`` has the signature of a response observer, so the
    manager can follow every response of a client:
    ``client.add_response_observer("token", manager.configure_token)``.

    The token cache and the expiry timer are only mutated on ``queue``.

    Args:
        storage: Secure storage persisting the token.
        persistence_key: Storage key of the token.
        queue: The main queue.
        check_interval: Seconds between two expiry checks. Must be > 0.
        header_name: Response header carrying the token, matched
            case-insensitively.
        clock: Returns the current time in seconds since the epoch.

    Attributes:
        on_token_configured: Optional callback receiving a new token.
        on_token_cleared: Optional callback invoked when the token is
            cleared.
        on_token_expired: Optional callback invoked when the token
            expired, after it was cleared.
    """

    def __init__(
        self,
        storage: SecureStorage,
        persistence_key: str = DEFAULT_PERSISTENCE_KEY,
        *,
        queue: DispatchQueue,
        check_interval: float = DEFAULT_CHECK_INTERVAL,
        header_name: str = DEFAULT_TOKEN_HEADER,
        clock: Callable[[], float] = time.time,
    ) -> None:
        validate_interval("check_interval", check_interval)
        self.storage = storage
        self.persistence_key = persistence_key
        self.check_interval = check_interval
        self.header_name = header_name
        self.clock = clock
        self.on_token_configured: Callable[[str], None] | None = None
        self.on_token_cleared: Callable[[], None] | None = None
        self.on_token_expired: Callable[[], None] | None = None
        self._queue = queue
        self._existing_token: str | None = None
        self._timer: RepeatingTimer | None = None

    @property
    def existing_token(self) -> str | None:
        """The token configured last, if not cleared since."""
        return self._existing_token

    def configure_token(self, response: HTTPResponse) -> None:
        """Adopt the token carried by ``response``.

        Nothing happens if the response has no token header or carries
        the token already configured.

        Args:
            response: The response envelope.
        """
        token = response.header(self.header_name)
        if not token:
            return
        self._queue.submit(self._configure, token)

    def is_current_token_valid(self) -> bool:
        """Check the persisted token.

        A valid token is adopted again: ``on_token_configured`` runs and
        the expiry check restarts, even for the cached token. An expired
        token is cleared without calling ``on_token_expired``.

        Returns:
            ``True`` if a persisted token exists and is not expired.
        """
        token = self.storage.get(self.persistence_key)
        if not token:
            return False
        if self._is_expired(token):
            self._queue.submit(self._clear)
            return False
        self._queue.submit(self._adopt, token)
        return True

    def clear_token(self) -> None:
        """Delete the persisted token and stop the expiry check. Calling
        it again is harmless, ``on_token_cleared`` runs every time."""
        self._queue.submit(self._clear)

    def schedule_expiry_check(self, token: str) -> None:
        """Restart the periodic expiry check of ``token``.

        The first check runs immediately.
        """
        self._queue.submit(self._schedule, token)

    def expiration(self, token: str) -> datetime | None:
        """Decode the expiration date of ``token``.

        Returns:
            The expiration date, or ``None`` if the token is not a JWT
            or has no ``exp`` claim.
        """
        if token[: len(_BEARER_PREFIX)].lower() == _BEARER_PREFIX:
            token = token[len(_BEARER_PREFIX) :].strip()
        result = decode_jwt(token)
        if result.error is not None:
            logger.debug(f"Token expiration unknown: {result.error}")
            return None
        return result.payload.expiration

    def close(self) -> None:
        """Stop the expiry check. The persisted token is kept."""
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.invalidate()

    def _is_expired(self, token: str) -> bool:
        expiration = self.expiration(token)
        if expiration is None:
            return False
        return expiration.timestamp() - self.clock() <= self.check_interval

    def _configure(self, token: str) -> None:
        if token == self._existing_token:
            logger.debug("Token already configured")
            return
        self._adopt(token, persist=True)

    def _adopt(self, token: str, persist: bool = False) -> None:
        self._existing_token = token
        if persist:
            self.storage.set(self.persistence_key, token)
            logger.debug(f"Token configured under {self.persistence_key!r}")
        if self.on_token_configured is not None:
            self.on_token_configured(token)
        self._schedule(token)

    def _schedule(self, token: str) -> None:
        self.close()
        timer = RepeatingTimer(self.check_interval, lambda: self._check_expiry(token), self._queue)
        self._timer = timer
        timer.start()
        timer.fire()

    def _check_expiry(self, token: str) -> None:
        if token != self._existing_token:
            return
        if self._is_expired(token):
            self._expire(token)

    def _expire(self, token: str) -> None:
        logger.warning(f"Token {self.persistence_key!r} expired at {self.expiration(token)}")
        self._clear()
        if self.on_token_expired is not None:
            self.on_token_expired()

    def _clear(self) -> None:
        if self.storage.get(self.persistence_key) is not None:
            self.storage.delete(self.persistence_key)
        self.close()
        self._existing_token = None
        logger.debug(f"Token {self.persistence_key!r} cleared")
        if self.on_token_cleared is not None:
            self.on_token_cleared()
