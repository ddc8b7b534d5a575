"""
Bearer credential value and expiry parsing.

A CredentialToken is built once per acquisition and handed to exactly one
outbound call sequence. Nothing in this package caches it.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, Optional, Union

from partnercenter_bindings.errors import ConfigurationError

ExpiresOn = Union[str, int, float, datetime]

# Fractional seconds are cut or padded to the 6 digits fromisoformat accepts
_FRACTION = re.compile(r"(?<=:\d{2})\.(\d+)")


def _six_digit_fraction(match: "re.Match") -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Optional[ExpiresOn], setting: str = "ExpiresOn") -> datetime:
    """
    Parse a timestamp setting into an aware UTC datetime.

    Accepts datetimes, epoch seconds (as numbers or numeric strings),
    ISO-8601 strings and RFC 2822 date strings. Naive values are UTC.

    Args:
        value: Raw setting value
        setting: Setting name used in error messages

    Raises:
        ConfigurationError: If the value is empty or can't be parsed
    """
    if value is None or isinstance(value, bool):
        raise ConfigurationError(f"{setting} is required")

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ConfigurationError(f"{setting} is out of range: {value!r}") from e

    text = str(value).strip()
    if not text:
        raise ConfigurationError(f"{setting} is required")

    try:
        return datetime.fromtimestamp(float(text), tz=timezone.utc)
    except ValueError:
        pass
    except (OverflowError, OSError) as e:
        raise ConfigurationError(f"{setting} is out of range: {text!r}") from e

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    iso_text = _FRACTION.sub(_six_digit_fraction, iso_text, count=1)
    try:
        return _as_utc(datetime.fromisoformat(iso_text))
    except ValueError:
        pass

    try:
        return _as_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{setting} is not a valid timestamp: {text!r}") from e


def parse_expires_on(value: Optional[ExpiresOn]) -> datetime:
    """Parse the ExpiresOn setting of a pre-supplied access token."""
    return parse_timestamp(value, "ExpiresOn")


@dataclass(frozen=True)
class CredentialToken:
    """Bearer token and its UTC expiry instant."""

    token: str = field(repr=False)
    expires_at: datetime

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "expires_at", _as_utc(self.expires_at))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True iff now is strictly after expires_at."""
        current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        return current > self.expires_at

    def remaining_seconds(self, now: Optional[datetime] = None) -> float:
        """Seconds left before expiry (negative once expired)."""
        current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        return (self.expires_at - current).total_seconds()

    @property
    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    @classmethod
    def from_expires_on(cls, token: str, expires_on: Optional[ExpiresOn]) -> "CredentialToken":
        """Build a token from a raw expiry value (see parse_expires_on)."""
        return cls(token=token, expires_at=parse_expires_on(expires_on))
