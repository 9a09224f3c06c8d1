r"""Shared test helpers: controllable queues, scripted transports and
reachability probes.

Requests go through a real ``HttpxTransport`` whose ``httpx.Client`` is
backed by ``httpx.MockTransport``, so only the network is faked.
"""

from __future__ import annotations

__all__ = [
    "BASE_URL",
    "CountingCodec",
    "FakeProbe",
    "ManualQueue",
    "ProbeFactory",
    "ScriptedHandler",
    "make_client",
    "make_jwt",
    "make_transport",
]

import json
from typing import TYPE_CHECKING, Any

import httpx
from jose import jwt

from netkit.client import HTTPClient
from netkit.core.config import ClientConfig
from netkit.dispatch import Dispatcher, InlineQueue
from netkit.reachability import ReachabilityMonitor
from netkit.transport import HttpxTransport

if TYPE_CHECKING:
    from collections.abc import Callable

    from netkit.dispatch import DispatchQueue

BASE_URL = "https://api.example.com"


class ManualQueue:
    """Queue collecting callables until ``run_pending`` is called."""

    def __init__(self) -> None:
        self.pending: list[tuple[Callable[..., Any], tuple[Any, ...]]] = []
        self.delays: list[float] = []

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        self.pending.append((fn, args))

    def submit_after(self, delay: float, fn: Callable[..., Any], *args: Any) -> None:
        self.delays.append(delay)
        self.pending.append((fn, args))

    def shutdown(self) -> None:
        self.pending.clear()

    def run_pending(self) -> int:
        """Run queued callables, including the ones queued meanwhile.

        Returns:
            The number of callables run.
        """
        count = 0
        while self.pending:
            fn, args = self.pending.pop(0)
            fn(*args)
            count += 1
        return count


class ScriptedHandler:
    """``httpx.MockTransport`` handler replaying scripted outcomes.

    Each outcome is an ``httpx.Response`` or an exception class/instance
    raised for the request. The last outcome is repeated once the script
    is exhausted.
    """

    def __init__(self, *outcomes: httpx.Response | Exception | type[Exception]) -> None:
        self.outcomes = list(outcomes) or [httpx.Response(200)]
        self.requests: list[httpx.Request] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, type) and issubclass(outcome, Exception):
            outcome = outcome("scripted failure", request=request)
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(
            outcome.status_code,
            headers=outcome.headers,
            content=outcome.content,
            request=request,
        )


class FakeProbe:
    """Reachability probe driven by the test."""

    def __init__(self, host: str, reachable: bool = True) -> None:
        self.host = host
        self._reachable = reachable
        self.on_change: Callable[[bool], None] | None = None
        self.stopped = False

    @property
    def is_reachable(self) -> bool:
        return self._reachable

    def start(self, on_change: Callable[[bool], None]) -> None:
        self.on_change = on_change

    def stop(self) -> None:
        self.stopped = True

    def set_reachable(self, reachable: bool) -> None:
        self._reachable = reachable
        if self.on_change is not None and not self.stopped:
            self.on_change(reachable)


class ProbeFactory:
    """Probe factory remembering the probes it built."""

    def __init__(self) -> None:
        self.probes: dict[str, FakeProbe] = {}

    def __call__(self, host: str) -> FakeProbe:
        probe = FakeProbe(host)
        self.probes[host] = probe
        return probe


class CountingCodec:
    """JSON loader counting its parse calls."""

    def __init__(self) -> None:
        self.calls = 0

    def loads(self, data: bytes) -> Any:
        self.calls += 1
        return json.loads(data)


def make_transport(handler: Callable[[httpx.Request], httpx.Response], queue: DispatchQueue) -> HttpxTransport:
    return HttpxTransport(queue, client=httpx.Client(transport=httpx.MockTransport(handler)))


def make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    dispatcher: Dispatcher | None = None,
    monitor: ReachabilityMonitor | None = None,
    **config_kwargs: Any,
) -> HTTPClient:
    """Build a client sending its requests to ``handler``.

    Reachability monitoring is disabled unless ``reachability_hosts`` is
    given.
    """
    dispatcher = dispatcher or Dispatcher.inline()
    config_kwargs.setdefault("base_url", BASE_URL)
    config_kwargs.setdefault("reachability_hosts", ())
    return HTTPClient(
        config=ClientConfig(**config_kwargs),
        dispatcher=dispatcher,
        transport=make_transport(handler, dispatcher.worker),
        monitor=monitor or ReachabilityMonitor(InlineQueue(), probe_factory=ProbeFactory()),
    )


def make_jwt(claims: dict[str, Any]) -> str:
    """Build a compact JWT carrying ``claims``, signed with a test key."""
    return jwt.encode(claims, "netkit-test-secret", algorithm="HS256")
