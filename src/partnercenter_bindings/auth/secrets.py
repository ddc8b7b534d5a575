"""
Key Vault secret resolution.

SecretResolver turns (vault endpoint, secret name) into a secret value.
It never authenticates itself and never caches: every call is one vault
round trip through the VaultClient it was given.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)
from azure.identity.aio import DefaultAzureCredential
from azure.keyvault.secrets.aio import SecretClient

from partnercenter_bindings import metrics
from partnercenter_bindings.errors import (
    ConfigurationError,
    PartnerCenterError,
    SecretAccessError,
    TransientNetworkError,
    wrap_exception,
)
from partnercenter_bindings.logging import LoggedClass


class VaultClient(Protocol):
    """Pre-authenticated access to a secret vault."""

    async def get_secret(self, vault_url: str, name: str) -> Optional[str]:
        ...


class KeyVaultClient(LoggedClass):
    """
    Azure Key Vault implementation of VaultClient.

    Authenticates with one azure.identity credential (managed identity via
    DefaultAzureCredential unless a credential is injected) and keeps one
    SecretClient per vault URL.

    Usage:
        vault = KeyVaultClient()
        value = await vault.get_secret("https://myvault.vault.azure.net", "rt1")
        await vault.close()
    """

    log_component = "keyvault"

    def __init__(
        self,
        credential: Optional[Any] = None,
        managed_identity_client_id: Optional[str] = None,
    ):
        self._owns_credential = credential is None
        self._credential = credential
        self._managed_identity_client_id = managed_identity_client_id
        self._clients: Dict[str, SecretClient] = {}
        super().__init__()

    def _get_credential(self) -> Any:
        if self._credential is None:
            self._credential = DefaultAzureCredential(
                managed_identity_client_id=self._managed_identity_client_id
            )
            self._log(
                logging.DEBUG,
                "Created DefaultAzureCredential for Key Vault",
                managed_identity_client_id=self._managed_identity_client_id,
            )
        return self._credential

    def _get_client(self, vault_url: str) -> SecretClient:
        client = self._clients.get(vault_url)
        if client is None:
            client = SecretClient(vault_url=vault_url, credential=self._get_credential())
            self._clients[vault_url] = client
        return client

    async def get_secret(self, vault_url: str, name: str) -> Optional[str]:
        secret = await self._get_client(vault_url).get_secret(name)
        return secret.value

    async def close(self) -> None:
        """Close every SecretClient and the owned credential."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            try:
                await client.close()
            except Exception as e:
                self._log_exception(
                    e, "Error closing Key Vault client", level=logging.WARNING
                )
        if self._owns_credential and self._credential is not None:
            await self._credential.close()
            self._credential = None

    async def __aenter__(self) -> "KeyVaultClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class SecretResolver(LoggedClass):
    """Resolves named secrets through a pre-authenticated VaultClient."""

    log_component = "secrets"

    def __init__(self, vault_client: VaultClient):
        self._vault = vault_client
        super().__init__()

    async def resolve_secret(self, vault_endpoint: str, secret_name: str) -> str:
        """
        Fetch a secret value from the vault.

        Args:
            vault_endpoint: Vault URL, e.g. https://myvault.vault.azure.net
            secret_name: Name of the secret

        Returns:
            The secret value

        Raises:
            ConfigurationError: If vault_endpoint or secret_name is empty
            SecretAccessError: If the vault denies access, the secret does
                not exist, or the secret has no value
            TransientNetworkError: If the vault could not be reached
        """
        vault_endpoint = (vault_endpoint or "").strip()
        secret_name = (secret_name or "").strip()
        if not vault_endpoint:
            raise ConfigurationError(
                "KeyVaultEndpoint is required to resolve a secret",
                context={"secret_name": secret_name},
            )
        if not secret_name:
            raise ConfigurationError(
                "Secret name is required to resolve a secret",
                context={"vault_endpoint": vault_endpoint},
            )

        ctx = {"vault_endpoint": vault_endpoint, "secret_name": secret_name}

        try:
            value = await self._vault.get_secret(vault_endpoint, secret_name)
        except asyncio.CancelledError:
            raise
        except ResourceNotFoundError as e:
            metrics.record_secret_resolution("denied")
            raise SecretAccessError(
                f"Secret '{secret_name}' not found in {vault_endpoint}",
                cause=e,
                context=ctx,
            ) from e
        except ClientAuthenticationError as e:
            metrics.record_secret_resolution("denied")
            raise SecretAccessError(
                f"Access to {vault_endpoint} was denied",
                cause=e,
                context=ctx,
            ) from e
        except (ServiceRequestError, ServiceResponseError) as e:
            metrics.record_secret_resolution("error")
            raise TransientNetworkError(
                f"Could not reach {vault_endpoint}", cause=e, context=ctx
            ) from e
        except HttpResponseError as e:
            status = getattr(e, "status_code", None)
            if status in (401, 403, 404):
                metrics.record_secret_resolution("denied")
                raise SecretAccessError(
                    f"Vault refused secret '{secret_name}' ({status})",
                    cause=e,
                    context={**ctx, "http_status": status},
                ) from e
            metrics.record_secret_resolution("error")
            raise wrap_exception(e, context={**ctx, "http_status": status}) from e
        except PartnerCenterError:
            metrics.record_secret_resolution("error")
            raise
        except Exception as e:
            metrics.record_secret_resolution("error")
            raise wrap_exception(e, context=ctx) from e

        if value is None:
            metrics.record_secret_resolution("denied")
            raise SecretAccessError(
                f"Secret '{secret_name}' in {vault_endpoint} has no value",
                context=ctx,
            )

        metrics.record_secret_resolution("success")
        self._log(logging.DEBUG, "Resolved secret from Key Vault", **ctx)
        return value
