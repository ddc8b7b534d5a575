"""
Credential acquisition for Partner Center bindings.

Provides:
- AuthParameters: validated credential settings
- CredentialToken: bearer token with expiry
- SecretResolver / KeyVaultClient: Key Vault-backed secrets
- MsalIdentityClient: OAuth2 grants through MSAL
- CredentialProvider / select_strategy: strategy dispatch
"""

from partnercenter_bindings.auth.identity import (
    IdentityClient,
    MsalIdentityClient,
    TokenResponse,
)
from partnercenter_bindings.auth.parameters import ATTRIBUTE_NAMES, AuthParameters
from partnercenter_bindings.auth.secrets import KeyVaultClient, SecretResolver, VaultClient
from partnercenter_bindings.auth.strategy import (
    ClientCredentials,
    CredentialProvider,
    DirectToken,
    RefreshExchange,
    Strategy,
    select_strategy,
)
from partnercenter_bindings.auth.token import CredentialToken, parse_expires_on, parse_timestamp

__all__ = [
    "ATTRIBUTE_NAMES",
    "AuthParameters",
    "ClientCredentials",
    "CredentialProvider",
    "CredentialToken",
    "DirectToken",
    "IdentityClient",
    "KeyVaultClient",
    "MsalIdentityClient",
    "RefreshExchange",
    "SecretResolver",
    "Strategy",
    "TokenResponse",
    "VaultClient",
    "parse_expires_on",
    "parse_timestamp",
    "select_strategy",
]
