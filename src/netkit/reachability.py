r"""Reachability monitoring of a set of hosts.

The internet is considered available while at least one monitored host is
reachable. Each host is watched by a ``ReachabilityProbe``; the default
``SocketProbe`` polls a TCP connection in a daemon thread. Probe
notifications hop to the main queue, where the aggregate flag is
recomputed and every subscriber is notified.

Example:
    ```pycon
    >>> from netkit.dispatch import InlineQueue
    >>> from netkit.reachability import ReachabilityMonitor
    >>> monitor = ReachabilityMonitor(InlineQueue(), probe_factory=lambda host: None)
    >>> monitor.start(["https://api.example.com", "bad host"])
    ReachabilityStatus(success=False, description="Invalid host: 'bad host'")
    >>> monitor.monitoring_hosts
    []

    ```
"""

from __future__ import annotations

__all__ = [
    "ReachabilityMonitor",
    "ReachabilityProbe",
    "ReachabilityStatus",
    "SocketProbe",
    "extract_host",
]

import logging
import socket
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import httpx

from netkit.core.validation import validate_interval, validate_timeout
from netkit.exceptions import ReachabilityError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from netkit.dispatch import DispatchQueue

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_PROBE_PORT = 443
DEFAULT_PROBE_INTERVAL = 5.0
DEFAULT_PROBE_TIMEOUT = 3.0


class ReachabilityProbe(Protocol):
    """Watches the reachability of one host."""

    @property
    def is_reachable(self) -> bool:
        """Last known reachability of the host."""

    def start(self, on_change: Callable[[bool], None]) -> None:
        """Start watching. ``on_change`` may be called from any thread."""

    def stop(self) -> None:
        """Stop watching. No notification is sent afterwards."""


class SocketProbe:
    r"""Probe polling a TCP connection to a host.

    The probe is optimistic: ``is_reachable`` is ``True`` until the
    first failed connection.

    Args:
        host: The host name or address.
        port: The TCP port to connect to.
        interval: Seconds between two connection attempts.
        timeout: Connection timeout in seconds.

    Raises:
        ReachabilityError: If ``host`` is empty.
        ValueError: If ``interval`` or ``timeout`` is not positive.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PROBE_PORT,
        interval: float = DEFAULT_PROBE_INTERVAL,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        if not host:
            msg = "Cannot create a reachability probe without host"
            raise ReachabilityError(msg)
        validate_interval("interval", interval)
        validate_timeout(timeout)
        self.host = host
        self.port = port
        self.interval = interval
        self.timeout = timeout
        self._reachable = True
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(host={self.host!r}, port={self.port})"

    @property
    def is_reachable(self) -> bool:
        return self._reachable

    def start(self, on_change: Callable[[bool], None]) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._poll, args=(on_change,), name=f"netkit-probe-{self.host}", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()

    def check(self) -> bool:
        """Attempt one TCP connection.

        Returns:
            ``True`` if the connection succeeded.
        """
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout):
                return True
        except OSError as exc:
            logger.debug(f"{self.host}:{self.port} is unreachable: {exc}")
            return False

    def _poll(self, on_change: Callable[[bool], None]) -> None:
        while not self._stop_event.is_set():
            reachable = self.check()
            if self._stop_event.is_set():
                return
            if reachable != self._reachable:
                self._reachable = reachable
                on_change(reachable)
            self._stop_event.wait(self.interval)


@dataclass(frozen=True)
class ReachabilityStatus:
    """Outcome of ``ReachabilityMonitor.start``.

    Attributes:
        success: ``True`` if monitoring started.
        description: Human-readable description of the outcome.
    """

    success: bool
    description: str


class ReachabilityMonitor:
    r"""Aggregates the reachability of several hosts.

    Args:
        queue: The main queue. Subscribers are notified on it.
        probe_factory: Builds the probe of a host name. It may raise
            ``ReachabilityError`` or return ``None`` to skip the host.
    """

    def __init__(
        self,
        queue: DispatchQueue,
        probe_factory: Callable[[str], ReachabilityProbe | None] = SocketProbe,
    ) -> None:
        self._queue = queue
        self._probe_factory = probe_factory
        self._lock = threading.Lock()
        self._probes: list[tuple[str, ReachabilityProbe]] = []
        self._subscribers: dict[str, Callable[[bool], None]] = {}
        self._available = True

    @property
    def monitoring_hosts(self) -> list[str]:
        """Host names currently monitored, in start order."""
        with self._lock:
            return [host for host, _ in self._probes]

    @property
    def is_internet_available(self) -> bool:
        """``True`` while at least one monitored host is reachable."""
        return self._available

    def start(self, hosts: Iterable[str]) -> ReachabilityStatus:
        """Start monitoring ``hosts`` in addition to the current ones.

        Args:
            hosts: URLs or host names.

        Returns:
            The outcome. A single malformed host aborts the whole call.
        """
        hosts = list(hosts)
        names = []
        for host in hosts:
            name = extract_host(host)
            if name is None:
                logger.warning(f"Cannot monitor reachability of malformed host {host!r}")
                return ReachabilityStatus(success=False, description=f"Invalid host: {host!r}")
            names.append(name)

        started = 0
        for name in names:
            if name in self.monitoring_hosts:
                logger.debug(f"Reachability of {name} is already monitored")
                continue
            try:
                probe = self._probe_factory(name)
            except ReachabilityError as exc:
                logger.warning(f"Skipping reachability of {name}: {exc}")
                continue
            if probe is None:
                logger.warning(f"Skipping reachability of {name}: no probe available")
                continue
            with self._lock:
                self._probes.append((name, probe))
            probe.start(lambda reachable, probe=probe: self._queue.submit(self._on_probe_change, probe))
            started += 1

        self._available = True
        logger.debug(f"Monitoring reachability of {self.monitoring_hosts}")
        return ReachabilityStatus(success=True, description=f"Started monitoring {started} host(s)")

    def stop(self) -> None:
        """Stop every probe and clear hosts and subscribers."""
        with self._lock:
            probes, self._probes = self._probes, []
        for _, probe in probes:
            probe.stop()
        self._available = True
        self._queue.submit(self._subscribers.clear)

    def add_subscriber(self, name: str, callback: Callable[[bool], None]) -> None:
        """Register ``callback`` under ``name``, replacing any previous one."""
        self._queue.submit(self._subscribers.__setitem__, name, callback)

    def remove_subscriber(self, name: str) -> None:
        """Unregister the subscriber registered under ``name``."""
        self._queue.submit(self._subscribers.pop, name, None)

    def _on_probe_change(self, probe: ReachabilityProbe) -> None:
        with self._lock:
            probes = [item for _, item in self._probes]
        if not any(item is probe for item in probes):
            return
        self._available = any(item.is_reachable for item in probes)
        logger.info(f"Internet available: {self._available}")
        for callback in list(self._subscribers.values()):
            callback(self._available)


def extract_host(value: str) -> str | None:
    r"""Extract the host name of a URL or bare host name.

    Args:
        value: A URL such as ``"https://api.example.com/v1"`` or a host
            name such as ``"example.com"``.

    Returns:
        The host name, or ``None`` if ``value`` is malformed.

    Example:
        ```pycon
        >>> from netkit.reachability import extract_host
        >>> extract_host("https://api.example.com/v1")
        'api.example.com'
        >>> extract_host("example.com")
        'example.com'
        >>> extract_host("not a host") is None
        True

        ```
    """
    if not value or any(char.isspace() for char in value):
        return None
    try:
        url = httpx.URL(value)
        if url.scheme in ("http", "https"):
            return url.host or None
        return httpx.URL(f"//{value}").host or None
    except httpx.InvalidURL:
        return None
