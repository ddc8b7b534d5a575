"""
Exception types and error classification for partnercenter_bindings.

Provides:
- ErrorCategory enum for retry decisions
- Typed exception hierarchy for credential and transport errors
- Error classification utilities
"""

import asyncio
from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that the HTTP retry layer retries
                   (e.g., network timeouts, 429/503 errors)
        AUTH: Identity provider rejected the credentials or exchange
        PERMANENT: Non-retriable failures that won't succeed on retry
                   (e.g., bad arguments, configuration, missing secrets)
        CANCELLED: The caller cancelled the operation
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class PartnerCenterError(Exception):
    """
    Base exception for all binding errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether the HTTP retry layer should retry this error."""
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Caller and Configuration Errors (Permanent)
# =============================================================================


class PermanentError(PartnerCenterError):
    """Base class for permanent/non-retriable errors."""

    category = ErrorCategory.PERMANENT


class ArgumentError(PermanentError, ValueError):
    """Required input is missing or null (caller bug)."""

    pass


class ConfigurationError(PermanentError):
    """Mutually dependent settings are inconsistent or unparseable."""

    pass


class SecretAccessError(PermanentError):
    """Key Vault denied access or the secret does not exist."""

    pass


class NotFoundError(PermanentError):
    """Resource not found (404)."""

    pass


class ForbiddenError(PermanentError):
    """Access denied (403) - permissions issue, not auth."""

    pass


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(PartnerCenterError):
    """Identity provider rejected the credentials or the token exchange."""

    category = ErrorCategory.AUTH

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message, cause, context)
        self.error_code = error_code


# =============================================================================
# Network Errors (Transient)
# =============================================================================


class TransientNetworkError(PartnerCenterError):
    """Network failure that may succeed on a later attempt."""

    category = ErrorCategory.TRANSIENT


class TimeoutError(TransientNetworkError):
    """A single attempt exceeded its timeout."""

    pass


class ThrottlingError(TransientNetworkError):
    """Rate limited (429) - should back off."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message, cause, context)
        self.retry_after = retry_after  # Seconds to wait if provided


class ServiceUnavailableError(TransientNetworkError):
    """Service temporarily unavailable (5xx)."""

    pass


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """
    Classify HTTP status code into error category.

    Args:
        status_code: HTTP response status

    Returns:
        Appropriate ErrorCategory
    """
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code in (408, 429):
        return ErrorCategory.TRANSIENT

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def error_for_http_status(
    status_code: int,
    url: str,
    retry_after: Optional[float] = None,
    context: Optional[dict] = None,
) -> PartnerCenterError:
    """
    Create the appropriate exception for a failed HTTP response.

    Args:
        status_code: HTTP response status
        url: Request URL (already sanitized) for the message
        retry_after: Parsed Retry-After header, if any
        context: Additional context to include

    Returns:
        PartnerCenterError subclass instance
    """
    ctx = {"http_status": status_code}
    ctx.update(context or {})
    category = classify_http_status(status_code)

    if category == ErrorCategory.AUTH:
        return AuthenticationError(f"Unauthorized (401): {url}", context=ctx)

    if category == ErrorCategory.TRANSIENT:
        if status_code == 429:
            return ThrottlingError(
                f"Rate limited (429): {url}", retry_after=retry_after, context=ctx
            )
        if status_code == 408:
            return TimeoutError(f"Request timeout (408): {url}", context=ctx)
        return ServiceUnavailableError(
            f"Server error ({status_code}): {url}", context=ctx
        )

    if status_code == 403:
        return ForbiddenError(f"Forbidden (403): {url}", context=ctx)
    if status_code == 404:
        return NotFoundError(f"Not found (404): {url}", context=ctx)
    if category == ErrorCategory.PERMANENT:
        return PermanentError(f"Client error ({status_code}): {url}", context=ctx)
    return PartnerCenterError(f"Unexpected status ({status_code}): {url}", context=ctx)


def classify_exception(exc: BaseException) -> ErrorCategory:
    """
    Classify an exception into error category.

    Args:
        exc: Exception to classify

    Returns:
        Appropriate ErrorCategory
    """
    # Already classified
    if isinstance(exc, PartnerCenterError):
        return exc.category

    if isinstance(exc, asyncio.CancelledError):
        return ErrorCategory.CANCELLED

    if isinstance(exc, asyncio.TimeoutError):
        return ErrorCategory.TRANSIENT

    exc_type = type(exc).__name__.lower()
    exc_str = str(exc).lower()

    connection_markers = (
        "connectionerror",
        "connection refused",
        "connection reset",
        "connection aborted",
        "no route to host",
        "network unreachable",
        "name resolution",
        "dns",
        "socket",
        "broken pipe",
        "serviceresponseerror",
        "servicerequesterror",
    )
    if any(m in exc_type or m in exc_str for m in connection_markers):
        return ErrorCategory.TRANSIENT

    if "timeout" in exc_type or "timeout" in exc_str:
        return ErrorCategory.TRANSIENT

    auth_markers = (
        "401",
        "unauthorized",
        "invalid_client",
        "invalid_grant",
        "unauthorized_client",
        "authentication",
    )
    if any(m in exc_str for m in auth_markers):
        return ErrorCategory.AUTH

    if "429" in exc_str or "throttl" in exc_str or "rate limit" in exc_str:
        return ErrorCategory.TRANSIENT

    if "503" in exc_str or "502" in exc_str or "504" in exc_str:
        return ErrorCategory.TRANSIENT

    if "403" in exc_str or "forbidden" in exc_str or "access denied" in exc_str:
        return ErrorCategory.PERMANENT

    if "404" in exc_str or "not found" in exc_str:
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN


def wrap_exception(
    exc: Exception,
    default_class: type = PartnerCenterError,
    context: Optional[dict] = None,
) -> PartnerCenterError:
    """
    Wrap a generic exception in appropriate PartnerCenterError subclass.

    Args:
        exc: Exception to wrap
        default_class: Class to use if can't classify
        context: Additional context to include

    Returns:
        Appropriate PartnerCenterError subclass instance
    """
    if isinstance(exc, PartnerCenterError):
        if context:
            exc.context.update(context)
        return exc

    category = classify_exception(exc)
    exc_str = str(exc).lower()

    if category == ErrorCategory.AUTH:
        return AuthenticationError(str(exc), cause=exc, context=context)

    if category == ErrorCategory.TRANSIENT:
        if isinstance(exc, asyncio.TimeoutError) or "timeout" in exc_str:
            return TimeoutError(str(exc) or "Operation timed out", cause=exc, context=context)
        if "429" in exc_str or "throttl" in exc_str:
            return ThrottlingError(str(exc), cause=exc, context=context)
        return TransientNetworkError(str(exc), cause=exc, context=context)

    if category == ErrorCategory.PERMANENT:
        if "404" in exc_str or "not found" in exc_str:
            return NotFoundError(str(exc), cause=exc, context=context)
        if "403" in exc_str or "forbidden" in exc_str:
            return ForbiddenError(str(exc), cause=exc, context=context)
        return PermanentError(str(exc), cause=exc, context=context)

    return default_class(str(exc), cause=exc, context=context)


def is_transient_error(exc: BaseException) -> bool:
    """Check whether an exception should be retried by the HTTP layer."""
    return classify_exception(exc) == ErrorCategory.TRANSIENT
