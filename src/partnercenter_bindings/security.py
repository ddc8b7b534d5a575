"""
Redaction helpers for anything that may reach a log line.

Provides:
- URL sanitization (token removal for logs)
- Error message sanitization
"""

import re
from typing import Set
from urllib.parse import urlparse, urlunparse

# Query parameters that can grant access if leaked
SENSITIVE_PARAMS: Set[str] = {
    "access_token",
    "refresh_token",
    "client_secret",
    "client_assertion",
    "code",
    "token",
    "sig",
    "secret",
    "password",
}

SENSITIVE_PATTERNS = [
    (re.compile(r"bearer\s+[a-zA-Z0-9\-_.~+/=]+", re.IGNORECASE), "Bearer [REDACTED]"),
    (re.compile(r'access_token["\']?\s*[=:]\s*["\']?[^&\s"\',}]+', re.IGNORECASE), "access_token=[REDACTED]"),
    (re.compile(r'refresh_token["\']?\s*[=:]\s*["\']?[^&\s"\',}]+', re.IGNORECASE), "refresh_token=[REDACTED]"),
    (re.compile(r'client_secret["\']?\s*[=:]\s*["\']?[^&\s"\',}]+', re.IGNORECASE), "client_secret=[REDACTED]"),
    (re.compile(r'password=[^&\s"\']+', re.IGNORECASE), "password=[REDACTED]"),
    (re.compile(r'secret=[^&\s"\']+', re.IGNORECASE), "secret=[REDACTED]"),
    (re.compile(r'sig=[^&\s"\']+', re.IGNORECASE), "sig=[REDACTED]"),
    # Bare JWTs (header.payload.signature)
    (re.compile(r"eyJ[a-zA-Z0-9\-_]+\.[a-zA-Z0-9\-_]+\.[a-zA-Z0-9\-_]+"), "[REDACTED_JWT]"),
]

_URL_PATTERN = re.compile(r'https?://[^\s"\'<>]+')


def sanitize_url(url: str) -> str:
    """
    Remove sensitive query parameters from URL.

    Args:
        url: URL that may contain sensitive parameters

    Returns:
        URL with sensitive parameters replaced with [REDACTED]
    """
    if not url:
        return url

    try:
        parsed = urlparse(url)
    except ValueError:
        return url

    if not parsed.query:
        return url

    sanitized_params = []
    for param in parsed.query.split("&"):
        if "=" in param:
            key, _ = param.split("=", 1)
            if key.lower() in SENSITIVE_PARAMS:
                sanitized_params.append(f"{key}=[REDACTED]")
                continue
        sanitized_params.append(param)

    return urlunparse(parsed._replace(query="&".join(sanitized_params)))


def sanitize_error_message(msg: str, max_length: int = 500) -> str:
    """
    Remove potentially sensitive data from error messages.

    Applies pattern-based redaction and truncates to max_length.

    Args:
        msg: Error message that may contain sensitive data
        max_length: Maximum length of returned message

    Returns:
        Sanitized and truncated error message
    """
    if not msg:
        return msg

    for pattern, replacement in SENSITIVE_PATTERNS:
        msg = pattern.sub(replacement, msg)

    for match in _URL_PATTERN.finditer(msg):
        original_url = match.group(0)
        sanitized = sanitize_url(original_url)
        if sanitized != original_url:
            msg = msg.replace(original_url, sanitized)

    if len(msg) > max_length:
        msg = msg[: max_length - 3] + "..."

    return msg

