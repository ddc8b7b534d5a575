"""
Partner Center binding extension.

PartnerCenterExtension owns the long-lived collaborators (credential
provider, Key Vault client, HTTP client cache) and hands a fresh
credential plus the shared HTTP client to an operations factory for each
binding invocation.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Type, TypeVar, Union

from partnercenter_bindings.auth import (
    CredentialProvider,
    CredentialToken,
    KeyVaultClient,
    MsalIdentityClient,
    SecretResolver,
)
from partnercenter_bindings.bindings.attributes import BindingSettings
from partnercenter_bindings.config import ExtensionConfig
from partnercenter_bindings.errors import ArgumentError
from partnercenter_bindings.http import HttpClientCache, PartnerCenterHttpClient
from partnercenter_bindings.logging import LoggedClass, logged_operation, set_log_context

B = TypeVar("B", bound=BindingSettings)

OperationsFactory = Callable[
    [BindingSettings, CredentialToken, PartnerCenterHttpClient],
    Union[Any, Awaitable[Any]],
]


class PartnerCenterExtension(LoggedClass):
    """
    Entry point used by function code to populate Partner Center bindings.

    Usage:
        async with PartnerCenterExtension() as extension:
            binding = extension.binding_from_mapping(CustomerBinding, settings)
            customers = await extension.bind(binding, fetch_customers)
    """

    log_component = "extension"

    def __init__(
        self,
        config: Optional[ExtensionConfig] = None,
        credential_provider: Optional[CredentialProvider] = None,
        client_cache: Optional[HttpClientCache] = None,
    ):
        """
        Args:
            config: Extension configuration (default: from environment)
            credential_provider: Override the MSAL/Key Vault backed provider
            client_cache: Override the HTTP client cache
        """
        self.config = config if config is not None else ExtensionConfig.from_env()
        self._vault: Optional[KeyVaultClient] = None

        if credential_provider is None:
            self._vault = KeyVaultClient(
                managed_identity_client_id=self.config.managed_identity_client_id
            )
            credential_provider = CredentialProvider(
                MsalIdentityClient(),
                SecretResolver(self._vault),
                application_scope=self.config.application_scope,
            )
        self.credential_provider = credential_provider
        self.client_cache = (
            client_cache if client_cache is not None else HttpClientCache(self.config)
        )
        super().__init__()

    def binding_from_mapping(
        self, binding_type: Type[B], mapping: Optional[Mapping[str, Any]]
    ) -> B:
        """Build binding settings, filling Authority and Scopes from config."""
        return binding_type.from_mapping(
            mapping,
            defaults={"authority": self.config.authority, "scopes": self.config.scopes},
        )

    async def get_credentials(self, binding: BindingSettings) -> CredentialToken:
        """Acquire a fresh credential for one invocation."""
        if binding is None:
            raise ArgumentError("binding is required")
        return await self.credential_provider.acquire_credential(binding.auth)

    def get_http_client(self, binding: BindingSettings) -> PartnerCenterHttpClient:
        """Shared HTTP client for the binding's application id."""
        if binding is None:
            raise ArgumentError("binding is required")
        return self.client_cache.get_client(binding.application_id)

    @logged_operation(level=logging.DEBUG, log_start=True)
    async def bind(self, binding: BindingSettings, operations_factory: OperationsFactory) -> Any:
        """
        Resolve a binding through the operations factory.

        The factory receives (binding, credential, http_client) and may be
        sync or async.
        """
        if binding is None:
            raise ArgumentError("binding is required")
        set_log_context(application_id=binding.application_id or None)

        credential = await self.get_credentials(binding)
        client = self.get_http_client(binding)

        result = operations_factory(binding, credential, client)
        if inspect.isawaitable(result):
            result = await result

        self._log(
            logging.DEBUG,
            "Binding resolved",
            binding=binding.binding_name,
            application_id=binding.application_id,
            returns_single=binding.returns_single,
        )
        return result

    async def close(self) -> None:
        """Close cached HTTP clients and the Key Vault client."""
        await self.client_cache.close()
        if self._vault is not None:
            await self._vault.close()

    async def __aenter__(self) -> "PartnerCenterExtension":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
