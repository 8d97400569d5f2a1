"""miniapp-http: queued HTTP client for mini-app and mobile hosts.

Public API:
    NetworkClient - Queued GET/POST/PUT/DELETE with bounded retries
    TransportResult - Terminal outcome of a request
    PlatformCapabilities - Platform detection used to pick the retry budget

Internal (system-level, not for direct use):
    _internal.dispatch - Request queue and retry engine
"""

from miniapp_http._internal.dispatch import HttpMethod, RetryPolicy, TransportResult
from miniapp_http._version import __version__
from miniapp_http.client import NetworkClient
from miniapp_http.exceptions import (
    ConfigError,
    MiniAppHttpError,
    RequestValidationError,
    TransportError,
)
from miniapp_http.platform import NetworkReachability, PlatformCapabilities, PlatformType

__all__ = [
    "__version__",
    "NetworkClient",
    "HttpMethod",
    "RetryPolicy",
    "TransportResult",
    "PlatformCapabilities",
    "PlatformType",
    "NetworkReachability",
    "MiniAppHttpError",
    "TransportError",
    "ConfigError",
    "RequestValidationError",
]
