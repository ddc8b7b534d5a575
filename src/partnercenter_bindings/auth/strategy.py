"""
Credential strategy selection and acquisition.

select_strategy() maps AuthParameters onto exactly one of three
strategies, first match wins:

1. DirectToken        - an access token was supplied; no network call
2. RefreshExchange    - a refresh token (literal or vault name) was supplied
3. ClientCredentials  - application-only grant

CredentialProvider executes the selected strategy. A failure in one
strategy is never retried through another.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from partnercenter_bindings import metrics
from partnercenter_bindings.auth.identity import IdentityClient, TokenResponse
from partnercenter_bindings.auth.parameters import AuthParameters
from partnercenter_bindings.auth.secrets import SecretResolver
from partnercenter_bindings.auth.token import CredentialToken, parse_expires_on
from partnercenter_bindings.config import DEFAULT_APPLICATION_SCOPE
from partnercenter_bindings.errors import ArgumentError, ConfigurationError
from partnercenter_bindings.logging import LoggedClass


@dataclass(frozen=True)
class DirectToken:
    """Caller supplied the bearer token and its expiry."""

    token: str
    expires_at: datetime

    name = "direct_token"


@dataclass(frozen=True)
class RefreshExchange:
    """Exchange a refresh token for an access token."""

    params: AuthParameters

    name = "refresh_token"


@dataclass(frozen=True)
class ClientCredentials:
    """Application-only client-credentials grant."""

    params: AuthParameters

    name = "client_credentials"


Strategy = Union[DirectToken, RefreshExchange, ClientCredentials]


def select_strategy(params: AuthParameters) -> Strategy:
    """
    Choose the credential strategy for a set of parameters.

    Pure function: no I/O. The access-token expiry is parsed here so a bad
    ExpiresOn fails before anything else happens.

    Raises:
        ArgumentError: If params is None
        ConfigurationError: If an access token has an unparseable expiry
    """
    if params is None:
        raise ArgumentError("AuthParameters are required")

    if params.has_access_token:
        return DirectToken(
            token=params.access_token,
            expires_at=parse_expires_on(params.expires_on),
        )
    if params.has_refresh_token:
        return RefreshExchange(params=params)
    return ClientCredentials(params=params)


def _require(params: AuthParameters, strategy: str, **values: str) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Missing required settings for {strategy}: {', '.join(missing)}",
            context={
                "strategy": strategy,
                "missing": missing,
                "application_id": params.application_id,
            },
        )


class CredentialProvider(LoggedClass):
    """
    Turns AuthParameters into a CredentialToken.

    Tokens are returned to the caller and never cached here; every call
    re-runs the selected strategy.

    Usage:
        provider = CredentialProvider(MsalIdentityClient(), SecretResolver(vault))
        credential = await provider.acquire_credential(params)
    """

    log_component = "credentials"

    def __init__(
        self,
        identity: IdentityClient,
        secret_resolver: Optional[SecretResolver] = None,
        application_scope: str = DEFAULT_APPLICATION_SCOPE,
    ):
        self._identity = identity
        self._secrets = secret_resolver
        self.application_scope = application_scope
        super().__init__()

    async def acquire_credential(self, params: AuthParameters) -> CredentialToken:
        """
        Acquire a bearer credential for one invocation.

        Raises:
            ArgumentError: If params is None
            ConfigurationError: If the selected strategy lacks required settings
            SecretAccessError: If a vault-backed secret can't be read
            AuthenticationError: If the identity provider rejects the request
            asyncio.CancelledError: If the caller cancels
        """
        strategy = select_strategy(params)
        start = time.perf_counter()
        try:
            if isinstance(strategy, DirectToken):
                credential = CredentialToken(
                    token=strategy.token, expires_at=strategy.expires_at
                )
            elif isinstance(strategy, RefreshExchange):
                credential = await self._refresh_exchange(strategy.params)
            else:
                credential = await self._client_credentials(strategy.params)
        except asyncio.CancelledError:
            metrics.record_credential_acquisition(
                strategy.name, "cancelled", time.perf_counter() - start
            )
            self._log(
                logging.INFO,
                "Credential acquisition cancelled",
                application_id=params.application_id,
                strategy=strategy.name,
            )
            raise
        except Exception as e:
            duration = time.perf_counter() - start
            metrics.record_credential_acquisition(strategy.name, "error", duration)
            self._log_exception(
                e,
                "Credential acquisition failed",
                level=logging.WARNING,
                application_id=params.application_id,
                strategy=strategy.name,
                error_code=getattr(e, "error_code", None),
                duration_ms=round(duration * 1000, 1),
            )
            raise

        duration = time.perf_counter() - start
        metrics.record_credential_acquisition(strategy.name, "success", duration)
        self._log(
            logging.INFO,
            "Credential acquired",
            application_id=params.application_id,
            strategy=strategy.name,
            expires_at=credential.expires_at.isoformat(),
            duration_ms=round(duration * 1000, 1),
        )
        return credential

    async def _resolve(self, params: AuthParameters, name: str, literal: str) -> str:
        """Vault value when a secret name is set, else the literal.

        An empty vault value falls back to the literal.
        """
        if not name:
            return literal
        if self._secrets is None:
            raise ConfigurationError(
                "A secret name is set but no Key Vault client is configured",
                context={"secret_name": name, "vault_endpoint": params.key_vault_endpoint},
            )
        value = await self._secrets.resolve_secret(params.key_vault_endpoint, name)
        return value or literal

    async def _refresh_exchange(self, params: AuthParameters) -> CredentialToken:
        refresh_token = await self._resolve(
            params, params.refresh_token_name, params.refresh_token
        )
        secret = await self._resolve(
            params, params.application_secret_name, params.application_secret
        )
        # application_id and tenant_id are left for the identity provider to judge
        _require(
            params,
            RefreshExchange.name,
            application_secret=secret,
            refresh_token=refresh_token,
        )
        response: TokenResponse = await self._identity.acquire_token_by_refresh_token(
            params.authority_url,
            params.application_id,
            secret,
            refresh_token,
            params.scope_list,
        )
        return response.to_credential()

    async def _client_credentials(self, params: AuthParameters) -> CredentialToken:
        _require(
            params,
            ClientCredentials.name,
            application_id=params.application_id,
            tenant_id=params.tenant_id,
        )
        secret = await self._resolve(
            params, params.application_secret_name, params.application_secret
        )
        _require(params, ClientCredentials.name, application_secret=secret)
        response: TokenResponse = await self._identity.acquire_token_for_client(
            params.authority_url,
            params.application_id,
            secret,
            [self.application_scope],
        )
        return response.to_credential()
