r"""Configuration dataclass and defaults for HTTPClient.

This module provides configuration constants and a dataclass-based
configuration object for the ``HTTPClient`` service object.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_ACTIVITY_REFRESH_DELAY",
    "DEFAULT_CHECK_INTERVAL",
    "DEFAULT_REACHABILITY_HOSTS",
    "DEFAULT_RETRY",
    "DEFAULT_TIMEOUT",
    "DEFAULT_TOKEN_HEADER",
    "ClientConfig",
]

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from netkit.core.validation import validate_interval, validate_retry, validate_timeout

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping


# Default timeout in seconds for HTTP requests
DEFAULT_TIMEOUT = 10.0

# Default number of retries after a timeout
# Total attempts = retry + 1 (initial attempt)
DEFAULT_RETRY = 0

# Hosts probed to decide whether a network path exists
DEFAULT_REACHABILITY_HOSTS = ("google.com", "apple.com")

# Delay before refreshing the network activity flag after an attempt,
# avoids reading a stale outstanding task count
DEFAULT_ACTIVITY_REFRESH_DELAY = 0.1

# Seconds between two token expiry checks
DEFAULT_CHECK_INTERVAL = 60.0

# Response header carrying the bearer token
DEFAULT_TOKEN_HEADER = "Authorization"


@dataclass
class ClientConfig:
    """Configuration for HTTPClient.

    Args:
        base_url: Optional base URL used when a request does not specify one.
        retry: Number of retries after a timeout when a request does not
            override it. Must be >= 0.
        timeout: Timeout in seconds of the underlying httpx client. Must be > 0.
        headers: Optional session headers sent with every request.
        reachability_hosts: Hosts monitored for reachability. The base
            URL's host is added to them. An empty tuple disables the
            reachability gate.
        activity_refresh_delay: Seconds to wait before refreshing the
            network activity flag after an attempt. Must be > 0.
        on_network_activity: Optional callback receiving the network
            activity flag each time it is refreshed.

    Example:
        ```pycon
        >>> from netkit.core.config import ClientConfig
        >>> config = ClientConfig()
        >>> config.retry
        0
        >>> config = ClientConfig(retry=2, reachability_hosts=())
        >>> merged = config.merge(retry=5)
        >>> merged.retry
        5
        >>> config.retry
        2

        ```
    """

    base_url: str | None = None
    retry: int = DEFAULT_RETRY
    timeout: float = DEFAULT_TIMEOUT
    headers: Mapping[str, str] | None = None
    reachability_hosts: tuple[str, ...] = field(default_factory=lambda: DEFAULT_REACHABILITY_HOSTS)
    activity_refresh_delay: float = DEFAULT_ACTIVITY_REFRESH_DELAY
    on_network_activity: Callable[[bool], None] | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            ValueError: If any parameter fails validation.
        """
        validate_retry(self.retry)
        validate_timeout(self.timeout)
        validate_interval("activity_refresh_delay", self.activity_refresh_delay)
        self.reachability_hosts = tuple(self.reachability_hosts)

    def merge(self, **overrides: Any) -> ClientConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ClientConfig instance with overrides applied.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary with the configuration parameters.
        """
        return {
            "base_url": self.base_url,
            "retry": self.retry,
            "timeout": self.timeout,
            "headers": self.headers,
            "reachability_hosts": self.reachability_hosts,
            "activity_refresh_delay": self.activity_refresh_delay,
            "on_network_activity": self.on_network_activity,
        }

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments used to build the ``httpx.Client``."""
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if self.headers:
            kwargs["headers"] = dict(self.headers)
        return kwargs
