"""Tests for the error hierarchy and classification utilities."""

import asyncio

import pytest

from partnercenter_bindings.errors import (
    ArgumentError,
    AuthenticationError,
    ConfigurationError,
    ErrorCategory,
    ForbiddenError,
    NotFoundError,
    PartnerCenterError,
    PermanentError,
    SecretAccessError,
    ServiceUnavailableError,
    ThrottlingError,
    TimeoutError,
    TransientNetworkError,
    classify_exception,
    classify_http_status,
    error_for_http_status,
    is_transient_error,
    wrap_exception,
)


class TestHierarchy:
    """Categories and retryability."""

    @pytest.mark.parametrize(
        "error_type,category",
        [
            (ArgumentError, ErrorCategory.PERMANENT),
            (ConfigurationError, ErrorCategory.PERMANENT),
            (SecretAccessError, ErrorCategory.PERMANENT),
            (AuthenticationError, ErrorCategory.AUTH),
            (TransientNetworkError, ErrorCategory.TRANSIENT),
            (TimeoutError, ErrorCategory.TRANSIENT),
            (ThrottlingError, ErrorCategory.TRANSIENT),
        ],
    )
    def test_categories(self, error_type, category):
        error = error_type("x")
        assert error.category == category
        assert error.is_retryable == (category == ErrorCategory.TRANSIENT)

    def test_argument_error_is_value_error(self):
        assert isinstance(ArgumentError("x"), ValueError)

    def test_str_includes_cause(self):
        error = PartnerCenterError("outer", cause=RuntimeError("inner"))
        assert str(error) == "outer | Caused by: inner"

    def test_context_defaults_to_empty_dict(self):
        assert PartnerCenterError("x").context == {}

    def test_authentication_error_code(self):
        assert AuthenticationError("x", error_code="invalid_grant").error_code == "invalid_grant"


class TestHttpClassification:
    """HTTP status mapping."""

    @pytest.mark.parametrize(
        "status,category",
        [
            (401, ErrorCategory.AUTH),
            (403, ErrorCategory.PERMANENT),
            (404, ErrorCategory.PERMANENT),
            (408, ErrorCategory.TRANSIENT),
            (429, ErrorCategory.TRANSIENT),
            (500, ErrorCategory.TRANSIENT),
            (503, ErrorCategory.TRANSIENT),
        ],
    )
    def test_classify_http_status(self, status, category):
        assert classify_http_status(status) == category

    @pytest.mark.parametrize(
        "status,error_type",
        [
            (401, AuthenticationError),
            (403, ForbiddenError),
            (404, NotFoundError),
            (408, TimeoutError),
            (429, ThrottlingError),
            (502, ServiceUnavailableError),
            (409, PermanentError),
        ],
    )
    def test_error_for_http_status(self, status, error_type):
        error = error_for_http_status(status, "https://pc.example/x")
        assert type(error) is error_type
        assert error.context["http_status"] == status

    @pytest.mark.parametrize("status", [401, 403, 404, 408, 409, 429, 500, 503])
    def test_error_category_matches_classification(self, status):
        error = error_for_http_status(status, "u")
        assert error.category == classify_http_status(status)

    def test_unexpected_status(self):
        error = error_for_http_status(302, "u")
        assert type(error) is PartnerCenterError
        assert error.category == ErrorCategory.UNKNOWN

    def test_throttling_retry_after(self):
        error = error_for_http_status(429, "u", retry_after=3.0)
        assert error.retry_after == 3.0


class TestExceptionClassification:
    """Classifying arbitrary exceptions."""

    def test_cancelled(self):
        assert classify_exception(asyncio.CancelledError()) == ErrorCategory.CANCELLED

    def test_asyncio_timeout(self):
        assert classify_exception(asyncio.TimeoutError()) == ErrorCategory.TRANSIENT

    def test_connection_error(self):
        assert is_transient_error(ConnectionError("Connection refused")) is True

    def test_auth_markers(self):
        assert classify_exception(RuntimeError("invalid_client")) == ErrorCategory.AUTH

    def test_unknown(self):
        assert classify_exception(RuntimeError("weird")) == ErrorCategory.UNKNOWN


class TestWrapException:
    """Wrapping into typed errors."""

    def test_existing_error_returned_with_context(self):
        error = NotFoundError("x")
        wrapped = wrap_exception(error, context={"a": 1})
        assert wrapped is error
        assert error.context == {"a": 1}

    def test_timeout_wrapped(self):
        wrapped = wrap_exception(asyncio.TimeoutError())
        assert isinstance(wrapped, TimeoutError)

    def test_throttle_wrapped(self):
        assert isinstance(wrap_exception(RuntimeError("429 Too Many Requests")), ThrottlingError)

    def test_forbidden_wrapped(self):
        assert isinstance(wrap_exception(RuntimeError("403 Forbidden")), ForbiddenError)

    def test_default_class(self):
        wrapped = wrap_exception(RuntimeError("weird"), default_class=AuthenticationError)
        assert isinstance(wrapped, AuthenticationError)
        assert isinstance(wrapped.cause, RuntimeError)
