"""Redaction of sensitive request headers before they reach the debug log."""

REDACT_HEADERS: frozenset[str] = frozenset({
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "api-key",
    "x-auth-token",
    "x-access-token",
    "x-refresh-token",
    "x-session-token",
})

REDACTED_VALUE = "[REDACTED]"


def redact_headers(headers: dict[str, str] | None) -> dict[str, str]:
    """Return a copy of ``headers`` with sensitive values replaced.

    Header names are matched case-insensitively. The original mapping is
    never mutated.

    Args:
        headers: The headers to redact. ``None`` is treated as empty.

    Returns:
        A new dictionary with sensitive values replaced by "[REDACTED]".
    """
    if not headers:
        return {}
    return {
        key: REDACTED_VALUE if key.lower() in REDACT_HEADERS else value
        for key, value in headers.items()
    }
