"""Pydantic models for queued HTTP requests and the retry policy."""

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0
CONSTRAINED_TIMEOUT_CEILING_SECONDS = 10.0
CONSTRAINED_MAX_RETRIES = 2
CONSTRAINED_REQUEST_SPACING_SECONDS = 0.1

RequestCallback = Callable[[bool, str, str], None]


class HttpMethod(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


METHODS_WITH_BODY: frozenset[HttpMethod] = frozenset({HttpMethod.POST, HttpMethod.PUT})

# =============================================================================
# Request Descriptor
# =============================================================================


class RequestDescriptor(BaseModel):
    """One logical HTTP call plus its retry state and completion callback.

    Required fields:
        url: Target endpoint, absolute or relative to the client's base URL
        method: One of GET, POST, PUT, DELETE

    Optional fields:
        body: Request body, only allowed for POST and PUT
        headers: Header set captured at submission (defaults merged with overrides)
        retry_count: Number of retries performed so far
        callback: Invoked once with (success, data, error) on the terminal outcome

    Everything except ``retry_count`` is fixed at creation.
    """

    url: str = Field(frozen=True)
    method: HttpMethod = Field(frozen=True)
    body: str | None = Field(default=None, frozen=True)
    headers: dict[str, str] = Field(default_factory=dict, frozen=True)
    retry_count: int = Field(default=0, ge=0)
    callback: RequestCallback | None = Field(default=None, frozen=True, exclude=True)

    @field_validator("url")
    @classmethod
    def url_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("url must not be empty")
        return v

    @field_validator("method", mode="before")
    @classmethod
    def method_upper(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @model_validator(mode="after")
    def body_only_for_post_put(self) -> "RequestDescriptor":
        if self.body is not None and self.method not in METHODS_WITH_BODY:
            raise ValueError(f"{self.method} requests cannot carry a body")
        return self


# =============================================================================
# Transport Result
# =============================================================================


class TransportResult(BaseModel):
    """Outcome of one transport attempt, or the terminal outcome of a request.

    A successful result never carries error text and a failed one never
    carries data.
    """

    model_config = {"frozen": True}

    success: bool
    data: str = ""
    error: str = ""
    status_code: int | None = None

    @classmethod
    def ok(cls, data: str = "", status_code: int | None = None) -> "TransportResult":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: int | None = None) -> "TransportResult":
        return cls(success=False, error=error, status_code=status_code)


# =============================================================================
# Retry Policy
# =============================================================================


class RetryPolicy(BaseModel):
    """Timeout, retry and spacing budget for the dispatcher.

    ``resolve()`` applies the constrained-platform ceilings; the configured
    values are never changed in place.
    """

    model_config = {"frozen": True}

    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY_SECONDS, ge=0)
    request_spacing: float = Field(default=CONSTRAINED_REQUEST_SPACING_SECONDS, ge=0)

    def resolve(self, constrained: bool) -> "RetryPolicy":
        """Return the effective policy for the current platform.

        Args:
            constrained: Whether the runtime is a constrained platform.

        Returns:
            A policy with the timeout clamped to 10s and retries to 2 on
            constrained platforms, and with no request spacing elsewhere.
        """
        if not constrained:
            return self.model_copy(update={"request_spacing": 0.0})
        return self.model_copy(
            update={
                "timeout": min(self.timeout, CONSTRAINED_TIMEOUT_CEILING_SECONDS),
                "max_retries": min(self.max_retries, CONSTRAINED_MAX_RETRIES),
            }
        )
