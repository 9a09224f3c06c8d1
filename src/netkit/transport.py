r"""Transport layer issuing wire-level HTTP requests with httpx.

``HttpxTransport`` plays the role of a shared connection pool: it owns an
``httpx.Client``, creates one ``TransportTask`` per attempt, runs it on the
worker queue, and reports the outcome through a completion callback of
the form ``completion(body, response, error)``.
"""

from __future__ import annotations

__all__ = ["Completion", "HttpxTransport", "TransportTask"]

import logging
import threading
from typing import TYPE_CHECKING, Any

import httpx

from netkit.core.config import DEFAULT_TIMEOUT
from netkit.core.validation import validate_timeout

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from netkit.dispatch import DispatchQueue

    Completion = Callable[[bytes | None, httpx.Response | None, Exception | None], None]
else:
    Completion = Any

logger: logging.Logger = logging.getLogger(__name__)


class TransportTask:
    r"""One wire-level request attempt.

    The task does nothing until ``resume`` is called. Its completion
    callback is invoked exactly once from the worker queue.

    Args:
        transport: The transport that created the task.
        client: The httpx client used to send the request.
        method: The HTTP method.
        url: The absolute URL.
        headers: The request headers.
        body: The request body bytes, if any.
        completion: Callback receiving ``(body, response, error)``.
    """

    def __init__(
        self,
        transport: HttpxTransport,
        client: httpx.Client,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None,
        completion: Completion,
    ) -> None:
        self.method = method
        self.url = url
        self.headers = dict(headers)
        self.body = body
        self._transport = transport
        self._client = client
        self._completion = completion
        self._cancelled = False
        self._resumed = False

    @property
    def is_cancelled(self) -> bool:
        """``True`` if ``cancel`` was called."""
        return self._cancelled

    def resume(self) -> None:
        """Start the request on the worker queue. Later calls are
        ignored."""
        if self._resumed:
            return
        self._resumed = True
        self._transport._task_started(self)
        self._transport.queue.submit(self._run)

    def cancel(self) -> None:
        """Mark the task as cancelled.

        A blocking httpx request cannot be interrupted once sent. A task
        cancelled before it runs completes with ``httpx.RequestError``
        without touching the network.
        """
        self._cancelled = True

    def _run(self) -> None:
        body: bytes | None = None
        response: httpx.Response | None = None
        error: Exception | None = None
        try:
            if self._cancelled:
                msg = f"{self.method} request to {self.url} was cancelled"
                raise httpx.RequestError(msg)
            response = self._client.request(
                self.method, self.url, headers=self.headers, content=self.body
            )
            body = response.content
        except httpx.HTTPError as exc:
            logger.debug(f"{self.method} request to {self.url} encountered {type(exc).__name__}: {exc}")
            error = exc
        except Exception as exc:
            logger.warning(
                f"{self.method} request to {self.url} failed before completing: "
                f"{type(exc).__name__}: {exc}"
            )
            error = exc
        finally:
            self._transport._task_finished(self)
        self._completion(body, response, error)


class HttpxTransport:
    r"""Connection pool built on an ``httpx.Client``.

    Args:
        queue: The worker queue running the requests.
        client: Optional pre-configured client. If ``None``, a client is
            created from ``client_kwargs``.
        **client_kwargs: Keyword arguments forwarded to ``httpx.Client``
            when no client is given. ``timeout`` defaults to
            ``DEFAULT_TIMEOUT``.

    Example:
        ```pycon
        >>> from netkit.dispatch import InlineQueue
        >>> from netkit.transport import HttpxTransport
        >>> transport = HttpxTransport(InlineQueue(), timeout=5.0)
        >>> transport.outstanding_count()
        0
        >>> transport.close()

        ```
    """

    def __init__(
        self,
        queue: DispatchQueue,
        client: httpx.Client | None = None,
        **client_kwargs: Any,
    ) -> None:
        self.queue = queue
        self._lock = threading.Lock()
        self._outstanding: dict[httpx.Client, set[TransportTask]] = {}
        self._retired: set[httpx.Client] = set()
        self._client = client if client is not None else self._create_client(**client_kwargs)

    @property
    def client(self) -> httpx.Client:
        """The client used for new tasks."""
        return self._client

    def data_task(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None,
        completion: Completion,
    ) -> TransportTask:
        """Create a task for one request attempt. Call ``resume`` on the
        task to start it."""
        return TransportTask(
            transport=self,
            client=self._client,
            method=method,
            url=url,
            headers=headers,
            body=body,
            completion=completion,
        )

    def outstanding_count(self) -> int:
        """Number of tasks started and not yet finished, across clients."""
        with self._lock:
            return sum(len(tasks) for tasks in self._outstanding.values())

    def reconfigure(self, **client_kwargs: Any) -> None:
        """Replace the client with a new one built from ``client_kwargs``.

        Tasks already running keep using the previous client, which is
        closed once its last task finishes.
        """
        new_client = self._create_client(**client_kwargs)
        with self._lock:
            old_client = self._client
            self._client = new_client
            if self._outstanding.get(old_client):
                self._retired.add(old_client)
                old_client = None
        if old_client is not None:
            old_client.close()
        logger.debug("Transport client replaced")

    def close(self) -> None:
        """Close the current client."""
        self._client.close()

    def _create_client(self, **client_kwargs: Any) -> httpx.Client:
        client_kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
        validate_timeout(client_kwargs["timeout"])
        return httpx.Client(**client_kwargs)

    def _task_started(self, task: TransportTask) -> None:
        with self._lock:
            self._outstanding.setdefault(task._client, set()).add(task)

    def _task_finished(self, task: TransportTask) -> None:
        close_client = None
        with self._lock:
            tasks = self._outstanding.get(task._client)
            if tasks is not None:
                tasks.discard(task)
                if not tasks:
                    del self._outstanding[task._client]
                    if task._client in self._retired:
                        self._retired.discard(task._client)
                        close_client = task._client
        if close_client is not None:
            close_client.close()
