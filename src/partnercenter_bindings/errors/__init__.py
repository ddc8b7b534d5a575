"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- PartnerCenterError hierarchy for typed exceptions
- Classification utilities for error handling
"""

from partnercenter_bindings.errors.exceptions import (
    # Enums
    ErrorCategory,
    # Base classes
    PartnerCenterError,
    PermanentError,
    TransientNetworkError,
    # Caller / configuration errors
    ArgumentError,
    ConfigurationError,
    SecretAccessError,
    # Auth errors
    AuthenticationError,
    # Transient errors
    TimeoutError,
    ThrottlingError,
    ServiceUnavailableError,
    # HTTP errors
    NotFoundError,
    ForbiddenError,
    # Classification utilities
    classify_http_status,
    classify_exception,
    error_for_http_status,
    is_transient_error,
    wrap_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "PartnerCenterError",
    "PermanentError",
    "TransientNetworkError",
    # Caller / configuration errors
    "ArgumentError",
    "ConfigurationError",
    "SecretAccessError",
    # Auth errors
    "AuthenticationError",
    # Transient errors
    "TimeoutError",
    "ThrottlingError",
    "ServiceUnavailableError",
    # HTTP errors
    "NotFoundError",
    "ForbiddenError",
    # Classification utilities
    "classify_http_status",
    "classify_exception",
    "error_for_http_status",
    "is_transient_error",
    "wrap_exception",
]
