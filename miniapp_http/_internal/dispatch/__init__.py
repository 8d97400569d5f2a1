"""Request dispatch engine.

WARNING: This is a system-level module used by ``miniapp_http.NetworkClient``.
Prefer the public client in application code.
"""

from miniapp_http._internal.dispatch.client import Dispatcher, Transport, build_request
from miniapp_http._internal.dispatch.models import (
    HttpMethod,
    RequestCallback,
    RequestDescriptor,
    RetryPolicy,
    TransportResult,
)

__all__ = [
    "Dispatcher",
    "Transport",
    "build_request",
    "HttpMethod",
    "RequestCallback",
    "RequestDescriptor",
    "RetryPolicy",
    "TransportResult",
]
