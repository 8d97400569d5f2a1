"""Public exceptions for the mini-app HTTP client."""


class MiniAppHttpError(Exception):
    """Base exception for all miniapp-http errors."""


class TransportError(MiniAppHttpError):
    """Error from the network transport."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigError(MiniAppHttpError):
    """Configuration error (unknown platform, invalid settings)."""


class RequestValidationError(MiniAppHttpError):
    """A request descriptor could not be built (empty URL, unsupported method)."""
