r"""HTTP client service object.

``HTTPClient`` resolves request URLs, gates requests on reachability,
runs each call chain through a ``RequestOperation`` and delivers the
outcome on its main queue. It replaces a process-wide shared instance:
construct one per application and inject it where needed.
"""

from __future__ import annotations

__all__ = ["HTTPClient"]

import logging
from typing import TYPE_CHECKING, Any

import httpx

from netkit.callbacks import ResponseObservers
from netkit.cancellation import CancellationToken, RequestState
from netkit.codec import JSONCodec
from netkit.core.config import ClientConfig
from netkit.core.validation import validate_retry
from netkit.dispatch import Dispatcher
from netkit.reachability import ReachabilityMonitor, extract_host
from netkit.request import HTTPMethod, HTTPRequest
from netkit.response import HTTPResponse
from netkit.retry import CallbackConfig, CallbackManager, RequestOperation, RetryConfig, RetryDecider
from netkit.status import HTTPStatusCode
from netkit.transport import HttpxTransport

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

    from netkit.callbacks import ErrorCallback, ResponseCallback, SuccessCallback

logger: logging.Logger = logging.getLogger(__name__)


class HTTPClient:
    r"""Client issuing HTTP requests with retry on timeout.

    Every terminal outcome is delivered exactly once, on the main queue,
    first to the caller's callback and then to every response observer.
    Local failures (invalid URL, no internet) call ``on_error``
    synchronously and skip the observers.

    Args:
        config: Optional client configuration. Defaults to ``ClientConfig()``.
        dispatcher: Optional execution contexts. Defaults to
            ``Dispatcher.threaded()``, owned and shut down by the client.
        transport: Optional transport. Defaults to an ``HttpxTransport``
            built from ``config``.
        monitor: Optional reachability monitor. Monitoring of
            ``config.reachability_hosts`` and of the base URL's host
            starts at construction.
        codec: Optional JSON codec attached to every response envelope.

    Example:
        ```pycon
        >>> from netkit import ClientConfig, HTTPClient
        >>> with HTTPClient(
        ...     config=ClientConfig(base_url="https://httpbin.org", retry=2)
        ... ) as client:  # doctest: +SKIP
        ...     token = client.get(
        ...         "get",
        ...         on_success=lambda response: print(response.json()),
        ...         on_error=lambda response: print(response.status_code),
        ...     )
        ...

        ```
    """

    def __init__(
        self,
        *,
        config: ClientConfig | None = None,
        dispatcher: Dispatcher | None = None,
        transport: HttpxTransport | None = None,
        monitor: ReachabilityMonitor | None = None,
        codec: JSONCodec | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._owns_dispatcher = dispatcher is None
        self._dispatcher = dispatcher or Dispatcher.threaded()
        self._transport = transport or HttpxTransport(
            self._dispatcher.worker, **self._config.client_kwargs()
        )
        self._monitor = monitor or ReachabilityMonitor(self._dispatcher.main)
        self._codec = codec or JSONCodec(dispatcher=self._dispatcher)
        self._observers = ResponseObservers(self._dispatcher.main)
        self._session_base_url = self._config.base_url
        self._network_activity_visible = False
        self._start_monitoring()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def transport(self) -> HttpxTransport:
        return self._transport

    @property
    def monitor(self) -> ReachabilityMonitor:
        return self._monitor

    @property
    def codec(self) -> JSONCodec:
        return self._codec

    @property
    def network_activity_visible(self) -> bool:
        """``True`` while transport tasks were outstanding at the last
        refresh."""
        return self._network_activity_visible

    @property
    def session_base_url(self) -> str | None:
        """Base URL used when a request does not provide one."""
        return self._session_base_url

    @session_base_url.setter
    def session_base_url(self, base_url: str | None) -> None:
        self._session_base_url = base_url
        self._monitor.stop()
        self._start_monitoring()

    def request(
        self,
        request: HTTPRequest,
        *,
        on_success: SuccessCallback,
        on_error: ErrorCallback | None = None,
        base_url: str | None = None,
        retry: int | None = None,
    ) -> CancellationToken:
        r"""Send a request.

        Args:
            request: The request descriptor.
            on_success: Callback receiving the success envelope.
            on_error: Optional callback receiving the error envelope.
            base_url: Optional base URL overriding ``session_base_url``.
            retry: Optional retry budget overriding ``config.retry``.

        Returns:
            The cancellation token of the call chain.

        Raises:
            ValueError: If ``retry`` is negative.
        """
        max_retries = self._config.retry if retry is None else retry
        validate_retry(max_retries)
        token = CancellationToken()

        url = self._resolve_url(request, self._session_base_url if base_url is None else base_url)
        if url is None:
            logger.warning(f"Cannot form a valid URL for {request.method.value} {request.path!r}")
            self._fail_locally(token, on_error, url=None, status_code=HTTPStatusCode.INVALID_URL)
            return token

        if self._monitor.monitoring_hosts and not self._monitor.is_internet_available:
            logger.warning(f"No internet connection, {request.method.value} {url} not sent")
            self._fail_locally(token, on_error, url=url, status_code=HTTPStatusCode.NO_INTERNET)
            return token

        operation = RequestOperation(
            transport=self._transport,
            request=request,
            config=RetryConfig(url=url, max_retries=max_retries),
            token=token,
            callbacks=CallbackManager(
                CallbackConfig(on_success=on_success, on_error=on_error),
                observers=self._observers,
                queue=self._dispatcher.main,
            ),
            decider=RetryDecider(max_retries),
            envelope_kwargs=self._envelope_kwargs(),
            on_attempt_finished=self._schedule_activity_refresh,
        )
        operation.start()
        self._schedule_activity_refresh()
        return token

    def get(self, path: str = "", **kwargs: Any) -> CancellationToken:
        """Send a GET request. See ``send`` for the keyword arguments."""
        return self.send(HTTPMethod.GET, path, **kwargs)

    def post(self, path: str = "", **kwargs: Any) -> CancellationToken:
        """Send a POST request. See ``send`` for the keyword arguments."""
        return self.send(HTTPMethod.POST, path, **kwargs)

    def put(self, path: str = "", **kwargs: Any) -> CancellationToken:
        """Send a PUT request. See ``send`` for the keyword arguments."""
        return self.send(HTTPMethod.PUT, path, **kwargs)

    def delete(self, path: str = "", **kwargs: Any) -> CancellationToken:
        """Send a DELETE request. See ``send`` for the keyword arguments."""
        return self.send(HTTPMethod.DELETE, path, **kwargs)

    def patch(self, path: str = "", **kwargs: Any) -> CancellationToken:
        """Send a PATCH request. See ``send`` for the keyword arguments."""
        return self.send(HTTPMethod.PATCH, path, **kwargs)

    def head(self, path: str = "", **kwargs: Any) -> CancellationToken:
        """Send a HEAD request. See ``send`` for the keyword arguments."""
        return self.send(HTTPMethod.HEAD, path, **kwargs)

    def options(self, path: str = "", **kwargs: Any) -> CancellationToken:
        """Send an OPTIONS request. See ``send`` for the keyword arguments."""
        return self.send(HTTPMethod.OPTIONS, path, **kwargs)

    def send(
        self,
        method: HTTPMethod | str,
        path: str = "",
        *,
        on_success: SuccessCallback,
        on_error: ErrorCallback | None = None,
        base_url: str | None = None,
        retry: int | None = None,
        **request_kwargs: Any,
    ) -> CancellationToken:
        """Build a request descriptor and send it.

        Args:
            method: The HTTP method.
            path: The relative path.
            on_success: Callback receiving the success envelope.
            on_error: Optional callback receiving the error envelope.
            base_url: Optional base URL overriding ``session_base_url``.
            retry: Optional retry budget overriding ``config.retry``.
            **request_kwargs: Other ``HTTPRequest`` fields
                (``content_type``, ``headers``, ``body``,
                ``expected_response_content_type``).

        Returns:
            The cancellation token of the call chain.
        """
        request = HTTPRequest(path=path, method=HTTPMethod(method), **request_kwargs)
        return self.request(
            request, on_success=on_success, on_error=on_error, base_url=base_url, retry=retry
        )

    def add_response_observer(self, name: str, observer: ResponseCallback) -> None:
        """Register a global response observer under ``name``."""
        self._observers.add(name, observer)

    def remove_response_observer(self, name: str) -> None:
        """Unregister the response observer registered under ``name``."""
        self._observers.remove(name)

    def configure_transport(self, **client_kwargs: Any) -> None:
        """Replace the underlying ``httpx.Client``.

        The keyword arguments are forwarded to ``httpx.Client`` on top of
        the ones derived from the configuration. In-flight requests
        finish on the previous client.
        """
        self._transport.reconfigure(**{**self._config.client_kwargs(), **client_kwargs})

    def close(self) -> None:
        """Stop monitoring and release the transport. The dispatcher is
        shut down if the client created it."""
        self._monitor.stop()
        self._transport.close()
        if self._owns_dispatcher:
            self._dispatcher.shutdown()

    def _start_monitoring(self) -> None:
        hosts = list(self._config.reachability_hosts)
        if not hosts:
            return
        if self._session_base_url:
            host = extract_host(self._session_base_url)
            if host is not None and host not in hosts:
                hosts.append(host)
        status = self._monitor.start(hosts)
        if not status.success:
            logger.warning(f"Reachability monitoring not started: {status.description}")

    def _envelope_kwargs(self) -> dict[str, Any]:
        return {"codec": self._codec, "dispatcher": self._dispatcher}

    def _fail_locally(
        self,
        token: CancellationToken,
        on_error: ErrorCallback | None,
        url: str | None,
        status_code: HTTPStatusCode,
    ) -> None:
        token._finish(RequestState.FAILED)
        if on_error is not None:
            on_error(HTTPResponse(url=url, status_code=status_code, **self._envelope_kwargs()))

    def _schedule_activity_refresh(self) -> None:
        self._dispatcher.main.submit_after(
            self._config.activity_refresh_delay, self._refresh_network_activity
        )

    def _refresh_network_activity(self) -> None:
        visible = self._transport.outstanding_count() > 0
        self._network_activity_visible = visible
        if self._config.on_network_activity is not None:
            self._config.on_network_activity(visible)

    @staticmethod
    def _resolve_url(request: HTTPRequest, base_url: str | None) -> str | None:
        if request.path and request.retries_count == 0:
            target = request.path
            base = base_url
        else:
            target = base_url
            base = None
        if not target:
            return None
        try:
            url = httpx.URL(base).join(target) if base else httpx.URL(target)
        except httpx.InvalidURL as exc:
            logger.debug(f"Invalid URL {target!r} (base {base!r}): {exc}")
            return None
        if url.scheme not in ("http", "https") or not url.host:
            return None
        return str(url)
