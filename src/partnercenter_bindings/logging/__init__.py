"""
Structured logging module.

Provides JSON logging with invocation context and token redaction.
"""

from partnercenter_bindings.logging.context import (
    clear_log_context,
    get_log_context,
    set_log_context,
)
from partnercenter_bindings.logging.formatters import ConsoleFormatter, JSONFormatter
from partnercenter_bindings.logging.setup import NOISY_LOGGERS, setup_logging
from partnercenter_bindings.logging.utilities import (
    LoggedClass,
    get_logger,
    log_exception,
    log_with_context,
    logged_operation,
)

__all__ = [
    "ConsoleFormatter",
    "JSONFormatter",
    "LoggedClass",
    "NOISY_LOGGERS",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "log_exception",
    "log_with_context",
    "logged_operation",
    "set_log_context",
    "setup_logging",
]
