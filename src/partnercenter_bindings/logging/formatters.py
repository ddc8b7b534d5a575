"""Log formatters for JSON and console output."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from partnercenter_bindings.logging.context import get_log_context
from partnercenter_bindings.security import sanitize_error_message, sanitize_url


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter with context injection.

    Produces one JSON object per line for easy parsing with jq/grep.
    Sanitizes URLs and messages to remove tokens before logging.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        # Identity
        "application_id",
        "authority",
        "strategy",
        "grant",
        "binding",
        "expires_at",
        "returns_single",
        # Key Vault
        "vault_endpoint",
        "secret_name",
        "managed_identity_client_id",
        # HTTP
        "url",
        "http_method",
        "http_status",
        "attempt",
        "max_attempts",
        "delay_seconds",
        "duration_ms",
        "cached_clients",
        "closed_clients",
        # Errors
        "error_category",
        "error_message",
        "error_code",
    ]

    # Fields that contain URLs and should be sanitized
    URL_FIELDS = ["url", "vault_endpoint", "authority"]

    def _sanitize_value(self, key: str, value: Any) -> Any:
        if key in self.URL_FIELDS and isinstance(value, str):
            return sanitize_url(value)
        if key == "error_message" and isinstance(value, str):
            return sanitize_error_message(value)
        return value

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with sanitized fields."""
        log_entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]
            + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": sanitize_error_message(record.getMessage(), max_length=2000),
        }

        ctx = get_log_context()
        for key, value in ctx.items():
            if value:
                log_entry[key] = value

        # Add source location for DEBUG/ERROR
        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = self._sanitize_value(field, value)

        if record.exc_info:
            log_entry["exception"] = sanitize_error_message(
                self.formatException(record.exc_info), max_length=8000
            )

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter.

    Includes invocation context when available.
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_log_context()

        parts = [
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            record.levelname,
        ]
        if ctx["function_name"]:
            parts.append(f"[{ctx['function_name']}]")

        prefix = " - ".join(parts)
        message = sanitize_error_message(record.getMessage(), max_length=2000)

        invocation_id = ctx["invocation_id"]
        if invocation_id:
            return f"{prefix} - [{invocation_id[:8]}] {message}"

        return f"{prefix} - {message}"
