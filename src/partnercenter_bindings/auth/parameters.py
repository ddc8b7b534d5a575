"""
Authentication parameters declared on a Partner Center binding.

AuthParameters is validated eagerly: a "-name" field that points into
Key Vault without a vault endpoint fails at construction rather than on
first use.
"""

import re
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional

from partnercenter_bindings.config import DEFAULT_AUTHORITY, DEFAULT_SCOPES
from partnercenter_bindings.errors import ConfigurationError

_SCOPE_SPLIT = re.compile(r"[,\s]+")

# Binding attribute names accepted by from_mapping
ATTRIBUTE_NAMES: Dict[str, str] = {
    "ApplicationId": "application_id",
    "ApplicationSecret": "application_secret",
    "ApplicationSecretName": "application_secret_name",
    "KeyVaultEndpoint": "key_vault_endpoint",
    "Authority": "authority",
    "RefreshToken": "refresh_token",
    "RefreshTokenName": "refresh_token_name",
    "Scopes": "scopes",
    "TenantId": "tenant_id",
    "AccessToken": "access_token",
    "ExpiresOn": "expires_on",
}

_SECRET_FIELDS = ("application_secret", "refresh_token", "access_token")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class AuthParameters:
    """
    Credential fields for one binding.

    Empty strings mean "not set". When both a "-name" field and its literal
    counterpart are present, the vault value wins.
    """

    application_id: str = ""
    application_secret: str = ""
    application_secret_name: str = ""
    refresh_token: str = ""
    refresh_token_name: str = ""
    key_vault_endpoint: str = ""
    authority: str = DEFAULT_AUTHORITY
    tenant_id: str = ""
    scopes: str = DEFAULT_SCOPES
    access_token: str = ""
    expires_on: Any = ""

    def __post_init__(self) -> None:
        for f in fields(self):
            if f.name == "expires_on":
                continue
            value = getattr(self, f.name)
            normalized = "" if value is None else str(value).strip()
            object.__setattr__(self, f.name, normalized)

        if self.expires_on is None:
            object.__setattr__(self, "expires_on", "")
        elif isinstance(self.expires_on, str):
            object.__setattr__(self, "expires_on", self.expires_on.strip())

        if not self.authority:
            object.__setattr__(self, "authority", DEFAULT_AUTHORITY)
        if not self.scopes:
            object.__setattr__(self, "scopes", DEFAULT_SCOPES)

        if self.uses_key_vault and not self.key_vault_endpoint:
            named = [
                name
                for name in ("application_secret_name", "refresh_token_name")
                if getattr(self, name)
            ]
            raise ConfigurationError(
                "KeyVaultEndpoint is required when a secret name is set",
                context={"fields": named},
            )

    @property
    def uses_key_vault(self) -> bool:
        return bool(self.application_secret_name or self.refresh_token_name)

    @property
    def has_access_token(self) -> bool:
        return bool(self.access_token)

    @property
    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token or self.refresh_token_name)

    @property
    def scope_list(self) -> List[str]:
        """Scopes split on commas and/or whitespace, order preserved."""
        return [s for s in _SCOPE_SPLIT.split(self.scopes) if s]

    @property
    def authority_url(self) -> str:
        """Token authority for this tenant, e.g. https://login.microsoftonline.com/tenant1."""
        return f"{self.authority.rstrip('/')}/{self.tenant_id}"

    @classmethod
    def from_mapping(
        cls,
        mapping: Optional[Mapping[str, Any]],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> "AuthParameters":
        """
        Build parameters from binding settings.

        Keys may be snake_case field names or the binding attribute names
        (ApplicationId, KeyVaultEndpoint, ...). Unknown keys are ignored.

        Args:
            mapping: Binding settings
            defaults: Field values used where the mapping leaves a field
                missing or blank (e.g. app-wide authority and scopes)
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in (mapping or {}).items():
            name = ATTRIBUTE_NAMES.get(key, key)
            if name in known:
                kwargs[name] = value
        for name, value in (defaults or {}).items():
            if name in known and _is_blank(kwargs.get(name)):
                kwargs[name] = value
        return cls(**kwargs)

    def __repr__(self) -> str:
        parts = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _SECRET_FIELDS and value:
                value = "***"
            parts.append(f"{f.name}={value!r}")
        return f"{type(self).__name__}({', '.join(parts)})"
