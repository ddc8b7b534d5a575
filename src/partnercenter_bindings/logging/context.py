"""Per-invocation log context carried across async boundaries."""

from contextvars import ContextVar
from typing import Dict, Optional

_function_name: ContextVar[Optional[str]] = ContextVar("function_name", default=None)
_invocation_id: ContextVar[Optional[str]] = ContextVar("invocation_id", default=None)
_application_id: ContextVar[Optional[str]] = ContextVar("application_id", default=None)


def set_log_context(
    function_name: Optional[str] = None,
    invocation_id: Optional[str] = None,
    application_id: Optional[str] = None,
) -> None:
    """Set context fields; only non-None arguments are changed."""
    if function_name is not None:
        _function_name.set(function_name)
    if invocation_id is not None:
        _invocation_id.set(invocation_id)
    if application_id is not None:
        _application_id.set(application_id)


def get_log_context() -> Dict[str, Optional[str]]:
    """Return the current context fields."""
    return {
        "function_name": _function_name.get(),
        "invocation_id": _invocation_id.get(),
        "application_id": _application_id.get(),
    }


def clear_log_context() -> None:
    """Reset all context fields."""
    _function_name.set(None)
    _invocation_id.set(None)
    _application_id.set(None)
