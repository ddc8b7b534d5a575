"""Extension configuration from environment variables (Functions app settings)."""

import os
from dataclasses import dataclass
from typing import Optional

from partnercenter_bindings.errors import ConfigurationError
from partnercenter_bindings.resilience.retry import RetryConfig

DEFAULT_AUTHORITY = "https://login.microsoftonline.com"
DEFAULT_SCOPES = "https://api.partnercenter.microsoft.com/user_impersonation"
DEFAULT_APPLICATION_SCOPE = "https://api.partnercenter.microsoft.com/.default"
DEFAULT_API_ENDPOINT = "https://api.partnercenter.microsoft.com"

DEFAULT_MAX_RETRIES = 3
DEFAULT_ATTEMPT_TIMEOUT_SECONDS = 10.0


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class ExtensionConfig:
    """Partner Center extension behavior configuration.

    Load from environment using ExtensionConfig.from_env().
    All timing values in seconds.
    """

    # Identity defaults applied to bindings that don't set them
    authority: str = DEFAULT_AUTHORITY
    scopes: str = DEFAULT_SCOPES
    application_scope: str = DEFAULT_APPLICATION_SCOPE

    # Partner Center REST endpoint
    api_endpoint: str = DEFAULT_API_ENDPOINT

    # HTTP client resilience
    max_retries: int = DEFAULT_MAX_RETRIES
    attempt_timeout_seconds: float = DEFAULT_ATTEMPT_TIMEOUT_SECONDS
    retry_base_delay_seconds: float = 0.5
    retry_max_delay_seconds: float = 8.0

    # User-assigned managed identity used for Key Vault (None = system identity)
    managed_identity_client_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must be >= 0, got {self.max_retries}"
            )
        if self.attempt_timeout_seconds <= 0:
            raise ConfigurationError(
                f"attempt_timeout_seconds must be > 0, got {self.attempt_timeout_seconds}"
            )
        if self.retry_base_delay_seconds < 0 or self.retry_max_delay_seconds < 0:
            raise ConfigurationError("retry delays must be >= 0")

    @classmethod
    def from_env(cls) -> "ExtensionConfig":
        """Load configuration from environment variables.

        Optional environment variables (with defaults):
            PARTNER_CENTER_AUTHORITY: https://login.microsoftonline.com
            PARTNER_CENTER_SCOPES: https://api.partnercenter.microsoft.com/user_impersonation
            PARTNER_CENTER_APPLICATION_SCOPE: https://api.partnercenter.microsoft.com/.default
            PARTNER_CENTER_API_ENDPOINT: https://api.partnercenter.microsoft.com
            PARTNER_CENTER_MAX_RETRIES: 3
            PARTNER_CENTER_ATTEMPT_TIMEOUT_SECONDS: 10
            PARTNER_CENTER_RETRY_BASE_DELAY_SECONDS: 0.5
            PARTNER_CENTER_RETRY_MAX_DELAY_SECONDS: 8
            AZURE_CLIENT_ID: user-assigned managed identity for Key Vault

        Raises:
            ConfigurationError: If a numeric variable can't be parsed or is out of range
        """
        return cls(
            authority=os.getenv("PARTNER_CENTER_AUTHORITY") or DEFAULT_AUTHORITY,
            scopes=os.getenv("PARTNER_CENTER_SCOPES") or DEFAULT_SCOPES,
            application_scope=(
                os.getenv("PARTNER_CENTER_APPLICATION_SCOPE") or DEFAULT_APPLICATION_SCOPE
            ),
            api_endpoint=os.getenv("PARTNER_CENTER_API_ENDPOINT") or DEFAULT_API_ENDPOINT,
            max_retries=_get_int("PARTNER_CENTER_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            attempt_timeout_seconds=_get_float(
                "PARTNER_CENTER_ATTEMPT_TIMEOUT_SECONDS", DEFAULT_ATTEMPT_TIMEOUT_SECONDS
            ),
            retry_base_delay_seconds=_get_float(
                "PARTNER_CENTER_RETRY_BASE_DELAY_SECONDS", 0.5
            ),
            retry_max_delay_seconds=_get_float(
                "PARTNER_CENTER_RETRY_MAX_DELAY_SECONDS", 8.0
            ),
            managed_identity_client_id=os.getenv("AZURE_CLIENT_ID") or None,
        )

    def retry_config(self) -> RetryConfig:
        """Build the retry policy used by cached HTTP clients."""
        return RetryConfig(
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay_seconds,
            max_delay=self.retry_max_delay_seconds,
        )
