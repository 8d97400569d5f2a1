"""Serial request dispatcher with bounded retries and platform-aware spacing."""

import asyncio
import sys
from collections import deque
from collections.abc import Awaitable, Callable
from typing import NamedTuple, Protocol

from pydantic import ValidationError

from miniapp_http._internal.dispatch.models import (
    HttpMethod,
    RequestCallback,
    RequestDescriptor,
    RetryPolicy,
    TransportResult,
)
from miniapp_http._internal.dispatch.redaction import redact_headers
from miniapp_http.exceptions import RequestValidationError
from miniapp_http.platform import CapabilitySource, PlatformCapabilities

Sleep = Callable[[float], Awaitable[None]]


class Transport(Protocol):
    """Performs the network I/O for one attempt of a queued request."""

    async def execute(
        self,
        method: HttpMethod,
        url: str,
        body: str | None,
        headers: dict[str, str],
        timeout: float,
    ) -> TransportResult: ...


class _Pending(NamedTuple):
    request: RequestDescriptor
    future: "asyncio.Future[TransportResult]"


def build_request(
    method: HttpMethod | str,
    url: str,
    body: str | None = None,
    headers: dict[str, str] | None = None,
    callback: RequestCallback | None = None,
) -> RequestDescriptor:
    """Build a validated request descriptor.

    Raises:
        RequestValidationError: If the URL is empty, the method is not one of
            GET/POST/PUT/DELETE, or a body is given for GET/DELETE.
    """
    try:
        return RequestDescriptor(
            url=url,
            method=method,
            body=body,
            headers=headers or {},
            callback=callback,
        )
    except ValidationError as e:
        message = "; ".join(err["msg"] for err in e.errors())
        raise RequestValidationError(f"Invalid request: {message}") from e


class Dispatcher:
    """Single-worker FIFO dispatcher for HTTP requests.

    Requests are executed strictly one at a time in submission order. A
    failed attempt is retried in place, so a retrying request keeps the head
    of the queue until it succeeds or runs out of retries. Every accepted
    request resolves its future, and calls its callback, exactly once, unless
    it is dropped by ``clear_queue()`` before it starts. Cancelling a returned
    future does not stop its request, and the callback still fires.

    All methods must be called from the thread running the event loop.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        capabilities: CapabilitySource | None = None,
        policy: RetryPolicy | None = None,
        default_headers: dict[str, str] | None = None,
        sleep: Sleep = asyncio.sleep,
        debug: bool = False,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            transport: Performs the network I/O for each attempt.
            capabilities: Answers whether the runtime is a constrained platform.
            policy: Configured timeout/retry budget before platform ceilings.
            default_headers: Headers merged into every new request.
            sleep: Coroutine used for retry delays and request spacing.
            debug: Enable debug logging to stderr.
        """
        self._transport = transport
        self._capabilities = capabilities or PlatformCapabilities()
        self._policy = policy or RetryPolicy()
        self._default_headers = dict(default_headers or {})
        self._sleep = sleep
        self._debug = debug
        self._queue: deque[_Pending] = deque()
        self._processing = False
        self._worker: asyncio.Task[None] | None = None

    @property
    def processing(self) -> bool:
        """True while a worker is draining the queue."""
        return self._processing

    @property
    def queue_size(self) -> int:
        """Number of requests waiting to start."""
        return len(self._queue)

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def effective_policy(self) -> RetryPolicy:
        """The configured policy with the current platform's ceilings applied."""
        return self._policy.resolve(self._capabilities.is_constrained_platform())

    @property
    def default_headers(self) -> dict[str, str]:
        return dict(self._default_headers)

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[miniapp-http] {message}", file=sys.stderr)

    # =========================================================================
    # Headers
    # =========================================================================

    def set_default_header(self, key: str, value: str) -> None:
        """Set a default header for requests submitted from now on."""
        self._default_headers[key] = value

    def remove_default_header(self, key: str) -> None:
        """Remove a default header. Unknown keys are ignored."""
        self._default_headers.pop(key, None)

    def merge_headers(self, headers: dict[str, str] | None = None) -> dict[str, str]:
        """Overlay per-call headers on a copy of the defaults."""
        merged = dict(self._default_headers)
        if headers:
            merged.update(headers)
        return merged

    # =========================================================================
    # Submission
    # =========================================================================

    def request(
        self,
        method: HttpMethod | str,
        url: str,
        body: str | None = None,
        *,
        callback: RequestCallback | None = None,
        headers: dict[str, str] | None = None,
    ) -> "asyncio.Future[TransportResult]":
        """Build a request from call arguments and submit it.

        Malformed requests are never queued: the callback is invoked right
        away with ``success=False`` and the returned future is already
        resolved with the same failure.

        Args:
            method: HTTP method.
            url: Target URL.
            body: Request body for POST and PUT.
            callback: Invoked once with (success, data, error).
            headers: Per-call headers; they win over the defaults.

        Returns:
            A future resolved with the terminal result.
        """
        future: asyncio.Future[TransportResult] = asyncio.get_running_loop().create_future()
        try:
            request = build_request(method, url, body, self.merge_headers(headers), callback)
        except RequestValidationError as e:
            self._log_debug(str(e))
            result = TransportResult.failure(str(e))
            future.set_result(result)
            self.notify(callback, result)
            return future
        return self._enqueue(request, future)

    def submit(self, request: RequestDescriptor) -> "asyncio.Future[TransportResult]":
        """Append a prebuilt request to the queue and start a worker if idle.

        The request's headers are sent exactly as given; use ``request()`` to
        merge the default headers.

        Returns:
            A future resolved with the terminal result.
        """
        return self._enqueue(request, asyncio.get_running_loop().create_future())

    def _enqueue(
        self,
        request: RequestDescriptor,
        future: "asyncio.Future[TransportResult]",
    ) -> "asyncio.Future[TransportResult]":
        self._queue.append(_Pending(request, future))
        if not self._processing:
            self._processing = True
            self._worker = asyncio.get_running_loop().create_task(self._drain())
        return future

    def clear_queue(self) -> int:
        """Drop every request that has not started yet.

        Callbacks of dropped requests are not invoked and their futures are
        cancelled. The request currently executing is not affected.

        Returns:
            Number of requests dropped.
        """
        dropped = len(self._queue)
        while self._queue:
            self._queue.popleft().future.cancel()
        if dropped:
            self._log_debug(f"Cleared {dropped} queued request(s)")
        return dropped

    async def join(self) -> None:
        """Wait until the queue is empty and the worker has stopped."""
        while self._worker is not None:
            await asyncio.wait({self._worker})

    async def aclose(self) -> None:
        """Drop queued requests and cancel the request in flight."""
        self.clear_queue()
        worker = self._worker
        if worker is not None:
            worker.cancel()
            await asyncio.wait({worker})

    # =========================================================================
    # Worker
    # =========================================================================

    async def _drain(self) -> None:
        try:
            while self._queue:
                pending = self._queue.popleft()
                await self._run(pending)
                if self._capabilities.is_constrained_platform():
                    await self._sleep(self.effective_policy.request_spacing)
        finally:
            self._processing = False
            self._worker = None

    async def _run(self, pending: _Pending) -> None:
        request = pending.request
        try:
            while True:
                policy = self.effective_policy
                result = await self._attempt(request, policy.timeout)
                if result.success:
                    self._log_debug(f"Request successful: {request.method} {request.url}")
                    self._complete(pending, result)
                    return

                self._log_debug(result.error)
                if request.retry_count >= policy.max_retries:
                    self._complete(pending, result)
                    return

                # Retried in place: requests queued behind this one keep waiting.
                request.retry_count += 1
                self._log_debug(f"Retrying request ({request.retry_count}/{policy.max_retries})...")
                await self._sleep(policy.retry_delay)
        except asyncio.CancelledError:
            pending.future.cancel()
            raise

    async def _attempt(self, request: RequestDescriptor, timeout: float) -> TransportResult:
        self._log_debug(
            f"Sending {request.method} request to: {request.url} "
            f"headers={redact_headers(request.headers)}"
        )
        try:
            return await asyncio.wait_for(
                self._transport.execute(
                    request.method,
                    request.url,
                    request.body,
                    dict(request.headers),
                    timeout,
                ),
                timeout,
            )
        except TimeoutError:
            return TransportResult.failure(f"Request timed out after {timeout:g}s")
        except Exception as e:
            return TransportResult.failure(f"Request failed: {e}")

    def _complete(self, pending: _Pending, result: TransportResult) -> None:
        if result.success:
            outcome = TransportResult.ok(result.data, status_code=result.status_code)
        else:
            outcome = TransportResult.failure(
                result.error or "Request failed",
                status_code=result.status_code,
            )
        # The caller may have cancelled its future; the callback still fires.
        if not pending.future.done():
            pending.future.set_result(outcome)
        self.notify(pending.request.callback, outcome)

    def notify(self, callback: RequestCallback | None, result: TransportResult) -> None:
        """Invoke a request callback, logging instead of raising if it fails."""
        if callback is None:
            return
        try:
            callback(result.success, result.data, result.error)
        except Exception as e:
            self._log_debug(f"Request callback raised: {e}")
