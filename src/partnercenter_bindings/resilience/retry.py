"""
Bounded retry with exponential backoff and jitter.

Only errors classified as transient are retried; everything else
propagates on the first failure.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from partnercenter_bindings.errors import (
    ConfigurationError,
    PartnerCenterError,
    ThrottlingError,
    is_transient_error,
    wrap_exception,
)
from partnercenter_bindings.logging import get_logger, log_with_context

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry logic.

    max_retries counts retries after the first attempt, so the total
    number of attempts is max_retries + 1.
    """

    max_retries: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0
    jitter_max: float = 0.25

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must be >= 0, got {self.max_retries}"
            )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


DEFAULT_RETRY = RetryConfig()


def compute_delay(
    attempt: int,
    config: RetryConfig,
    retry_after: Optional[float] = None,
) -> float:
    """Compute the delay before the next attempt.

    Args:
        attempt: Zero-based retry index (0 = first retry)
        config: Retry configuration
        retry_after: Server-provided Retry-After in seconds, if any

    Returns:
        Delay in seconds, capped at max_delay.
    """
    if retry_after is not None and retry_after >= 0:
        return min(retry_after, config.max_delay)

    delay = config.base_delay * (2**attempt)
    delay += random.uniform(0, config.jitter_max)
    return min(delay, config.max_delay)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig = DEFAULT_RETRY,
    description: str = "operation",
    on_retry: Optional[Callable[[int, PartnerCenterError], None]] = None,
) -> T:
    """
    Run an async operation, retrying transient failures.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt
        config: Retry configuration
        description: Name used in log lines
        on_retry: Callback invoked with (retry_number, error) before sleeping

    Returns:
        Result of the first successful attempt

    Raises:
        TransientNetworkError: When every attempt failed transiently
        PartnerCenterError: Immediately for non-transient failures
        asyncio.CancelledError: If the caller cancels; never retried
    """
    last_error: PartnerCenterError

    for attempt in range(config.max_attempts):
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not is_transient_error(e):
                raise

            error = wrap_exception(e)
            last_error = error

            if attempt >= config.max_retries:
                break

            retry_after = error.retry_after if isinstance(error, ThrottlingError) else None
            delay = compute_delay(attempt, config, retry_after)

            log_with_context(
                logger,
                logging.WARNING,
                f"Retrying {description} after transient failure",
                attempt=attempt + 1,
                max_attempts=config.max_attempts,
                delay_seconds=round(delay, 3),
                error_category=error.category.value,
                error_message=str(error),
            )
            if on_retry is not None:
                on_retry(attempt + 1, error)

            await asyncio.sleep(delay)

    log_with_context(
        logger,
        logging.ERROR,
        f"All retries exhausted for {description}",
        max_attempts=config.max_attempts,
        error_message=str(last_error),
    )
    last_error.context["attempts"] = config.max_attempts
    raise last_error
