"""Tests for header redaction."""

from miniapp_http._internal.dispatch.redaction import REDACTED_VALUE, redact_headers


class TestRedactHeaders:
    """Tests for redact_headers function."""

    def test_redacts_authorization(self):
        """Should redact the Authorization header."""
        headers = {"Authorization": "Bearer secret", "Accept": "application/json"}
        result = redact_headers(headers)
        assert result["Authorization"] == REDACTED_VALUE
        assert result["Accept"] == "application/json"

    def test_matches_case_insensitively(self):
        """Should redact regardless of header name casing."""
        headers = {"COOKIE": "sid=1", "x-Api-Key": "k", "X-Auth-Token": "t"}
        result = redact_headers(headers)
        assert result == {
            "COOKIE": REDACTED_VALUE,
            "x-Api-Key": REDACTED_VALUE,
            "X-Auth-Token": REDACTED_VALUE,
        }

    def test_keeps_header_names(self):
        """Should keep the original header names."""
        result = redact_headers({"Authorization": "x"})
        assert list(result) == ["Authorization"]

    def test_does_not_mutate_original(self):
        """Should not mutate the original headers."""
        headers = {"Authorization": "Bearer secret"}
        redact_headers(headers)
        assert headers["Authorization"] == "Bearer secret"

    def test_none_and_empty(self):
        """Should return an empty dict for None or empty headers."""
        assert redact_headers(None) == {}
        assert redact_headers({}) == {}
