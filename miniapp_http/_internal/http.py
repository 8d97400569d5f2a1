"""Shared HTTP client configuration and the httpx-backed transport."""

import httpx

from miniapp_http._internal.dispatch.models import HttpMethod, TransportResult
from miniapp_http._version import __version__
from miniapp_http.exceptions import TransportError

DEFAULT_TIMEOUT = 30.0
DEFAULT_APP_NAME = "GameApp"
DEFAULT_CONTENT_TYPE = "application/json"


def build_user_agent(platform_name: str, app_version: str | None = None) -> str:
    """Build the ``User-Agent`` sent with every request.

    Args:
        platform_name: Display name of the detected platform.
        app_version: Host application version. Defaults to the SDK version.

    Returns:
        A string such as ``GameApp/1.2.0 (WeixinMiniGame)``.
    """
    return f"{DEFAULT_APP_NAME}/{app_version or __version__} ({platform_name})"


def default_headers(platform_name: str, app_version: str | None = None) -> dict[str, str]:
    """Process-wide default headers for a new dispatcher."""
    return {
        "Content-Type": DEFAULT_CONTENT_TYPE,
        "User-Agent": build_user_agent(platform_name, app_version),
    }


def create_http_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str | None = None,
) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Args:
        timeout: Request timeout in seconds.
        base_url: Optional base URL for all requests.

    Returns:
        Configured httpx.AsyncClient instance.
    """
    return httpx.AsyncClient(
        timeout=timeout,
        base_url=base_url or "",
    )


class HttpxTransport:
    """Transport that sends requests through a shared ``httpx.AsyncClient``.

    Non-2xx responses, connection errors and timeouts are all reported as
    failed results rather than raised.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
    ) -> None:
        self._client = client or create_http_client(base_url=base_url)

    async def execute(
        self,
        method: HttpMethod,
        url: str,
        body: str | None,
        headers: dict[str, str],
        timeout: float,
    ) -> TransportResult:
        try:
            response = await self._client.request(
                method.value,
                url,
                content=body.encode("utf-8") if body is not None else None,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException:
            return TransportResult.failure(f"Request timed out after {timeout:g}s")
        except httpx.HTTPError as e:
            return TransportResult.failure(f"Request failed: {e}")

        if response.status_code >= 200 and response.status_code < 300:
            return TransportResult.ok(response.text, status_code=response.status_code)
        return TransportResult.failure(
            f"Request failed: HTTP {response.status_code}",
            status_code=response.status_code,
        )

    async def download(self, url: str, headers: dict[str, str], timeout: float) -> bytes:
        """Fetch ``url`` and return the raw response body.

        Raises:
            TransportError: On timeout, connection error or non-2xx status.
        """
        try:
            response = await self._client.get(url, headers=headers, timeout=timeout)
        except httpx.TimeoutException:
            raise TransportError(f"Download timed out after {timeout:g}s") from None
        except httpx.HTTPError as e:
            raise TransportError(f"Download failed: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise TransportError(
                f"Download failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()
