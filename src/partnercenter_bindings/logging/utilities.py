"""Logging utility functions."""

import asyncio
import functools
import inspect
import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from partnercenter_bindings.security import sanitize_error_message

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Use this instead of logging.getLogger() to ensure consistent naming.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Additional context fields (application_id, strategy, etc.)

    Example:
        log_with_context(
            logger, logging.INFO, "Credential acquired",
            application_id=params.application_id,
            strategy="client_credentials",
        )
    """
    logger.log(level, msg, extra=kwargs)


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log exception with context and optional traceback.

    Automatically extracts error_category from PartnerCenterError subclasses.
    Sanitizes error messages to remove tokens and secrets.

    Args:
        logger: Logger instance
        exc: Exception to log
        msg: Context message
        level: Log level (default: ERROR)
        include_traceback: Include full traceback (default: True)
        **kwargs: Additional context fields
    """
    error_category = kwargs.get("error_category")
    if error_category is None and hasattr(exc, "category"):
        cat = exc.category
        kwargs["error_category"] = cat.value if hasattr(cat, "value") else str(cat)

    kwargs["error_message"] = sanitize_error_message(str(exc))

    if include_traceback:
        logger.log(level, msg, exc_info=exc, extra=kwargs)
    else:
        logger.log(level, msg, extra=kwargs)


def _extract_instance_context(obj: Any) -> Dict[str, Any]:
    """Extract loggable identifiers from instance attributes."""
    ctx: Dict[str, Any] = {}
    for attr in ("application_id",):
        value = getattr(obj, attr, None)
        if value is not None:
            ctx[attr] = value
    return ctx


def logged_operation(
    level: int = logging.DEBUG,
    log_start: bool = False,
    operation_name: Optional[str] = None,
) -> Callable[[F], F]:
    """
    Decorator for automatic operation logging on class methods.

    Args:
        level: Log level for completion message
        log_start: Also log when operation starts
        operation_name: Override operation name (default: method_name)

    Example:
        class VaultReader(LoggedClass):
            @logged_operation(level=logging.DEBUG)
            async def read(self):
                ...
    """

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(self, *args, **kwargs):
                _logger = getattr(self, "_logger", None) or get_logger(
                    self.__class__.__module__
                )
                full_op = f"{self.__class__.__name__}.{operation_name or func.__name__}"

                if log_start:
                    log_with_context(_logger, level, f"{full_op} starting")

                try:
                    result = await func(self, *args, **kwargs)
                except asyncio.CancelledError:
                    log_with_context(_logger, level, f"{full_op} cancelled")
                    raise
                except Exception as e:
                    log_exception(
                        _logger, e, f"{full_op} failed", include_traceback=False
                    )
                    raise
                log_with_context(_logger, level, f"{full_op} completed")
                return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(self, *args, **kwargs):
            _logger = getattr(self, "_logger", None) or get_logger(
                self.__class__.__module__
            )
            full_op = f"{self.__class__.__name__}.{operation_name or func.__name__}"

            if log_start:
                log_with_context(_logger, level, f"{full_op} starting")

            try:
                result = func(self, *args, **kwargs)
            except Exception as e:
                log_exception(_logger, e, f"{full_op} failed", include_traceback=False)
                raise
            log_with_context(_logger, level, f"{full_op} completed")
            return result

        return sync_wrapper  # type: ignore

    return decorator


class LoggedClass:
    """
    Mixin providing logging infrastructure for classes.

    Provides:
    - self._logger: Logger instance
    - self._log(): Log with auto-extracted context
    - self._log_exception(): Exception logging with context
    """

    log_component: Optional[str] = None  # Optional logger name suffix

    def __init__(self, *args, **kwargs):
        logger_name = self.__class__.__module__
        if self.log_component:
            logger_name = f"{logger_name}.{self.log_component}"
        self._logger = get_logger(logger_name)
        super().__init__(*args, **kwargs)

    def _log(self, level: int, msg: str, **extra: Any) -> None:
        """Log with automatic context extraction from instance."""
        context = _extract_instance_context(self)
        context.update(extra)
        log_with_context(self._logger, level, msg, **context)

    def _log_exception(
        self,
        exc: BaseException,
        msg: str,
        level: int = logging.ERROR,
        **extra: Any,
    ) -> None:
        """Log exception with automatic context extraction from instance."""
        context = _extract_instance_context(self)
        context.update(extra)
        log_exception(self._logger, exc, msg, level=level, **context)
