"""User-facing network client.

Example usage:
    from miniapp_http import NetworkClient

    async with NetworkClient.from_env() as client:
        client.set_default_header("Authorization", "Bearer abc")
        result = await client.get("https://api.example.com/profile")
        client.post("/scores", '{"score": 10}', callback=on_score_saved)
"""

import asyncio
import os
import sys
from pathlib import Path

from miniapp_http._internal.dispatch import (
    Dispatcher,
    HttpMethod,
    RequestCallback,
    RetryPolicy,
    TransportResult,
)
from miniapp_http._internal.dispatch.client import Sleep
from miniapp_http._internal.dispatch.models import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
)
from miniapp_http._internal.http import HttpxTransport, default_headers
from miniapp_http.exceptions import TransportError
from miniapp_http.platform import (
    NETWORK_TYPE_NAMES,
    PLATFORM_DISPLAY_NAMES,
    CapabilitySource,
    NetworkReachability,
    PlatformCapabilities,
    PlatformType,
    ReachabilityProbe,
    probe_reachability,
)


class NetworkClient:
    """Queued HTTP client for mini-app and mobile hosts.

    Requests go through a single FIFO dispatcher: they run one at a time,
    failed attempts are retried in place, and on mini-game platforms the
    timeout and retry budget are reduced and requests are spaced out.

    The request methods return a future resolved with the terminal
    ``TransportResult``; the optional callback receives the same outcome as
    ``(success, data, error)``.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        app_version: str | None = None,
        capabilities: CapabilitySource | None = None,
        transport: HttpxTransport | None = None,
        reachability: ReachabilityProbe | None = None,
        sleep: Sleep = asyncio.sleep,
        debug: bool = False,
    ) -> None:
        """Initialize the network client.

        Args:
            base_url: Optional base URL for relative request URLs.
            timeout: Per-attempt timeout in seconds (clamped on mini-games).
            max_retries: Retries after the first attempt (clamped on mini-games).
            retry_delay: Delay in seconds before each retry.
            app_version: Version tag for the User-Agent header.
            capabilities: Platform capability source. Defaults to detection.
            transport: Transport to use instead of a new httpx client.
            reachability: Probe used by the network availability queries.
            sleep: Coroutine used for retry delays and request spacing.
            debug: Enable debug logging to stderr.
        """
        self._capabilities = capabilities or PlatformCapabilities.detect()
        self._transport = transport or HttpxTransport(base_url=base_url)
        self._reachability = reachability or probe_reachability
        self._debug = debug
        self._dispatcher = Dispatcher(
            transport=self._transport,
            capabilities=self._capabilities,
            policy=RetryPolicy(
                timeout=timeout,
                max_retries=max_retries,
                retry_delay=retry_delay,
            ),
            default_headers=default_headers(self._capabilities.platform_name(), app_version),
            sleep=sleep,
            debug=debug,
        )

        weixin = PLATFORM_DISPLAY_NAMES[PlatformType.WEIXIN_MINI_GAME]
        if self._capabilities.platform_name() == weixin:
            self._log_debug("Weixin mini-games require request domains to be whitelisted")

    @classmethod
    def from_env(cls) -> "NetworkClient":
        """Create a network client from environment variables.

        Optional environment variables:
            MINIAPP_HTTP_BASE_URL: Base URL for relative request URLs.
            MINIAPP_HTTP_TIMEOUT: Per-attempt timeout in seconds.
            MINIAPP_HTTP_MAX_RETRIES: Retries after the first attempt.
            MINIAPP_HTTP_RETRY_DELAY: Delay in seconds before each retry.
            MINIAPP_HTTP_DEBUG: Set to "1" to enable debug logging.
            MINIAPP_APP_VERSION: Version tag for the User-Agent header.
            MINIAPP_PLATFORM: Platform override (e.g. "weixin_mini_game").

        Returns:
            A configured NetworkClient.

        Raises:
            ValueError: If a numeric variable is malformed.
            ConfigError: If MINIAPP_PLATFORM names an unknown platform.
        """
        base_url = os.environ.get("MINIAPP_HTTP_BASE_URL")
        app_version = os.environ.get("MINIAPP_APP_VERSION")

        debug = os.environ.get("MINIAPP_HTTP_DEBUG", "") == "1"
        timeout = float(os.environ.get("MINIAPP_HTTP_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS)))
        max_retries = int(os.environ.get("MINIAPP_HTTP_MAX_RETRIES", str(DEFAULT_MAX_RETRIES)))
        retry_delay = float(
            os.environ.get("MINIAPP_HTTP_RETRY_DELAY", str(DEFAULT_RETRY_DELAY_SECONDS))
        )

        return cls(
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            app_version=app_version,
            capabilities=PlatformCapabilities.detect(),
            debug=debug,
        )

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[miniapp-http] {message}", file=sys.stderr)

    # =========================================================================
    # Requests
    # =========================================================================

    def get(
        self,
        url: str,
        callback: RequestCallback | None = None,
        headers: dict[str, str] | None = None,
    ) -> "asyncio.Future[TransportResult]":
        """Queue a GET request."""
        return self._dispatcher.request(HttpMethod.GET, url, callback=callback, headers=headers)

    def post(
        self,
        url: str,
        body: str | None,
        callback: RequestCallback | None = None,
        headers: dict[str, str] | None = None,
    ) -> "asyncio.Future[TransportResult]":
        """Queue a POST request with a (usually JSON) body."""
        return self._dispatcher.request(
            HttpMethod.POST, url, body, callback=callback, headers=headers
        )

    def put(
        self,
        url: str,
        body: str | None,
        callback: RequestCallback | None = None,
        headers: dict[str, str] | None = None,
    ) -> "asyncio.Future[TransportResult]":
        """Queue a PUT request with a (usually JSON) body."""
        return self._dispatcher.request(
            HttpMethod.PUT, url, body, callback=callback, headers=headers
        )

    def delete(
        self,
        url: str,
        callback: RequestCallback | None = None,
        headers: dict[str, str] | None = None,
    ) -> "asyncio.Future[TransportResult]":
        """Queue a DELETE request."""
        return self._dispatcher.request(HttpMethod.DELETE, url, callback=callback, headers=headers)

    async def download_file(
        self,
        url: str,
        save_path: str | Path,
        callback: RequestCallback | None = None,
    ) -> TransportResult:
        """Download ``url`` straight to ``save_path``.

        Downloads bypass the request queue and are not retried. On success
        the result data is the save path. A callback that raises is logged
        in debug mode and does not affect the returned result.
        """
        timeout = self._dispatcher.effective_policy.timeout
        try:
            content = await self._transport.download(
                url, self._dispatcher.default_headers, timeout
            )
            Path(save_path).write_bytes(content)
            result = TransportResult.ok(str(save_path))
        except TransportError as e:
            result = TransportResult.failure(str(e), status_code=e.status_code)
        except OSError as e:
            result = TransportResult.failure(f"Failed to save file: {e}")

        if not result.success:
            self._log_debug(result.error)
        self._dispatcher.notify(callback, result)
        return result

    # =========================================================================
    # Queue and headers
    # =========================================================================

    def set_default_header(self, key: str, value: str) -> None:
        self._dispatcher.set_default_header(key, value)

    def remove_default_header(self, key: str) -> None:
        self._dispatcher.remove_default_header(key)

    def clear_queue(self) -> int:
        """Drop queued requests that have not started. Their callbacks never fire."""
        return self._dispatcher.clear_queue()

    # =========================================================================
    # Network status
    # =========================================================================

    def is_network_available(self) -> bool:
        """Report whether the network is reachable.

        The status queries call the reachability probe synchronously on the
        calling thread. The default probe opens a TCP connection and can block
        the event loop for up to its timeout; hosts with a native reachability
        API should inject it as ``reachability``.
        """
        return self._reachability() != NetworkReachability.NOT_REACHABLE

    def get_network_type(self) -> str:
        """Return "WiFi", "Mobile Data" or "No Network"."""
        return NETWORK_TYPE_NAMES[self._reachability()]

    def get_network_info(self) -> str:
        """Summarize network status, queue size and effective timeout."""
        reachability = self._reachability()
        return (
            f"Network Available: {reachability != NetworkReachability.NOT_REACHABLE}, "
            f"Network Type: {NETWORK_TYPE_NAMES[reachability]}, "
            f"Queue Size: {self._dispatcher.queue_size}, "
            f"Timeout: {self._dispatcher.effective_policy.timeout:g}s"
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def aclose(self) -> None:
        """Drop queued requests, cancel the one in flight and close the transport."""
        await self._dispatcher.aclose()
        await self._transport.aclose()

    async def __aenter__(self) -> "NetworkClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
