"""Resilience patterns for outbound Partner Center calls."""

from partnercenter_bindings.resilience.retry import (
    DEFAULT_RETRY,
    RetryConfig,
    compute_delay,
    retry_async,
)

__all__ = [
    "DEFAULT_RETRY",
    "RetryConfig",
    "compute_delay",
    "retry_async",
]
