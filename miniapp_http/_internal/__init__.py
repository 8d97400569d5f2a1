"""Internal modules for miniapp-http.

WARNING: This package contains system-level modules used by the public
client. They are not intended for direct use in application code.

Modules:
    dispatch - Serial request queue and retry engine
    http - Shared HTTP client configuration and httpx transport
"""
