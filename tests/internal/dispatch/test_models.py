"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from miniapp_http._internal.dispatch.models import (
    CONSTRAINED_MAX_RETRIES,
    CONSTRAINED_REQUEST_SPACING_SECONDS,
    CONSTRAINED_TIMEOUT_CEILING_SECONDS,
    HttpMethod,
    RequestDescriptor,
    RetryPolicy,
    TransportResult,
)


class TestRequestDescriptor:
    """Tests for RequestDescriptor model."""

    def test_valid_descriptor(self):
        """Should create a descriptor with defaults."""
        request = RequestDescriptor(url="https://api.test/a", method="GET")
        assert request.url == "https://api.test/a"
        assert request.method is HttpMethod.GET
        assert request.body is None
        assert request.headers == {}
        assert request.retry_count == 0
        assert request.callback is None

    def test_descriptor_with_all_fields(self):
        """Should accept body, headers and callback."""

        def callback(success, data, error):
            pass

        request = RequestDescriptor(
            url="/scores",
            method=HttpMethod.POST,
            body='{"score": 1}',
            headers={"X-Test": "1"},
            callback=callback,
        )
        assert request.body == '{"score": 1}'
        assert request.headers == {"X-Test": "1"}
        assert request.callback is callback

    def test_method_is_case_insensitive(self):
        """Should normalize lowercase method names."""
        request = RequestDescriptor(url="/a", method="delete")
        assert request.method is HttpMethod.DELETE

    def test_empty_url_rejected(self):
        """Should reject empty or blank URLs."""
        for url in ("", "   "):
            with pytest.raises(ValidationError) as exc_info:
                RequestDescriptor(url=url, method="GET")
            assert "url must not be empty" in str(exc_info.value)

    def test_unsupported_method_rejected(self):
        """Should reject methods outside GET/POST/PUT/DELETE."""
        with pytest.raises(ValidationError):
            RequestDescriptor(url="/a", method="PATCH")

    def test_body_rejected_for_get_and_delete(self):
        """Should only allow a body for POST and PUT."""
        for method in ("GET", "DELETE"):
            with pytest.raises(ValidationError) as exc_info:
                RequestDescriptor(url="/a", method=method, body="{}")
            assert "cannot carry a body" in str(exc_info.value)

    def test_fixed_fields_are_frozen(self):
        """Should reject reassigning fields fixed at creation."""
        request = RequestDescriptor(url="/a", method="GET")
        with pytest.raises(ValidationError):
            request.url = "/b"
        with pytest.raises(ValidationError):
            request.method = HttpMethod.POST

    def test_retry_count_is_mutable(self):
        """Should allow the dispatcher to bump the retry counter."""
        request = RequestDescriptor(url="/a", method="GET")
        request.retry_count += 1
        assert request.retry_count == 1

    def test_negative_retry_count_rejected(self):
        """Should reject a negative initial retry count."""
        with pytest.raises(ValidationError):
            RequestDescriptor(url="/a", method="GET", retry_count=-1)

    def test_callback_excluded_from_dump(self):
        """Should not serialize the callback."""
        request = RequestDescriptor(url="/a", method="GET", callback=lambda s, d, e: None)
        assert "callback" not in request.model_dump()


class TestTransportResult:
    """Tests for TransportResult model."""

    def test_ok(self):
        """Should build a success result without error text."""
        result = TransportResult.ok("body", status_code=200)
        assert result.success is True
        assert result.data == "body"
        assert result.error == ""
        assert result.status_code == 200

    def test_failure(self):
        """Should build a failure result without data."""
        result = TransportResult.failure("Request failed: HTTP 500", status_code=500)
        assert result.success is False
        assert result.data == ""
        assert result.error == "Request failed: HTTP 500"

    def test_frozen(self):
        """Should be immutable."""
        result = TransportResult.ok("body")
        with pytest.raises(ValidationError):
            result.success = False


class TestRetryPolicy:
    """Tests for RetryPolicy model."""

    def test_defaults(self):
        """Should use the standard budget."""
        policy = RetryPolicy()
        assert policy.timeout == 30.0
        assert policy.max_retries == 3
        assert policy.retry_delay == 1.0
        assert policy.request_spacing == CONSTRAINED_REQUEST_SPACING_SECONDS

    def test_resolve_unconstrained(self):
        """Should keep the configured budget and drop spacing."""
        policy = RetryPolicy(timeout=45, max_retries=5).resolve(False)
        assert policy.timeout == 45
        assert policy.max_retries == 5
        assert policy.request_spacing == 0.0

    def test_resolve_constrained_clamps(self):
        """Should clamp timeout and retries on constrained platforms."""
        policy = RetryPolicy(timeout=45, max_retries=5).resolve(True)
        assert policy.timeout == CONSTRAINED_TIMEOUT_CEILING_SECONDS
        assert policy.max_retries == CONSTRAINED_MAX_RETRIES
        assert policy.request_spacing == CONSTRAINED_REQUEST_SPACING_SECONDS

    def test_resolve_constrained_keeps_lower_values(self):
        """Should not raise values already below the ceilings."""
        policy = RetryPolicy(timeout=5, max_retries=1).resolve(True)
        assert policy.timeout == 5
        assert policy.max_retries == 1

    def test_resolve_does_not_mutate(self):
        """Should return a new policy."""
        policy = RetryPolicy(timeout=45)
        policy.resolve(True)
        assert policy.timeout == 45

    def test_invalid_values_rejected(self):
        """Should reject non-positive timeouts and negative budgets."""
        with pytest.raises(ValidationError):
            RetryPolicy(timeout=0)
        with pytest.raises(ValidationError):
            RetryPolicy(max_retries=-1)
        with pytest.raises(ValidationError):
            RetryPolicy(retry_delay=-0.5)
