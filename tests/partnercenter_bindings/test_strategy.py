"""
Tests for credential strategy selection and acquisition.

Test coverage:
- select_strategy precedence (access token > refresh token > client credentials)
- Direct token returned verbatim with no network calls
- Vault names win over literal secrets
- Required-setting validation per strategy
- No fallback between strategies
- Cancellation propagates
- End-to-end client-credentials and vault-backed refresh exchange
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from partnercenter_bindings.auth.identity import TokenResponse
from partnercenter_bindings.auth.parameters import AuthParameters
from partnercenter_bindings.auth.secrets import SecretResolver
from partnercenter_bindings.auth.strategy import (
    ClientCredentials,
    CredentialProvider,
    DirectToken,
    RefreshExchange,
    select_strategy,
)
from partnercenter_bindings.errors import (
    ArgumentError,
    AuthenticationError,
    ConfigurationError,
    SecretAccessError,
)

VAULT = "https://vault.example"
ISSUED_EXPIRY = datetime(2024, 6, 1, 13, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def identity():
    client = MagicMock()
    client.acquire_token_for_client = AsyncMock(
        return_value=TokenResponse(access_token="app-token", expires_on=ISSUED_EXPIRY)
    )
    client.acquire_token_by_refresh_token = AsyncMock(
        return_value=TokenResponse(access_token="user-token", expires_on=ISSUED_EXPIRY)
    )
    return client


@pytest.fixture
def vault():
    secrets = {"rt1": "vault-refresh-token", "as1": "vault-app-secret"}
    client = MagicMock()
    client.get_secret = AsyncMock(side_effect=lambda url, name: secrets.get(name))
    return client


@pytest.fixture
def provider(identity, vault):
    return CredentialProvider(identity, SecretResolver(vault))


class TestSelectStrategy:
    """Precedence: access token, then refresh token, then client credentials."""

    def test_access_token_selects_direct(self):
        strategy = select_strategy(
            AuthParameters(
                access_token="tok",
                expires_on="2024-06-01T12:00:00Z",
                refresh_token="rt",
                application_secret="s",
            )
        )
        assert isinstance(strategy, DirectToken)
        assert strategy.token == "tok"
        assert strategy.expires_at == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"refresh_token": "rt"},
            {"refresh_token_name": "rt1", "key_vault_endpoint": VAULT},
            {"refresh_token": "rt", "application_secret": "s", "application_id": "a"},
        ],
    )
    def test_refresh_token_selects_exchange(self, kwargs):
        assert isinstance(select_strategy(AuthParameters(**kwargs)), RefreshExchange)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {},
            {"application_id": "app1", "application_secret": "s", "tenant_id": "t"},
            {"application_secret_name": "as1", "key_vault_endpoint": VAULT},
        ],
    )
    def test_no_tokens_selects_client_credentials(self, kwargs):
        assert isinstance(select_strategy(AuthParameters(**kwargs)), ClientCredentials)

    def test_unparseable_expiry_raises(self):
        with pytest.raises(ConfigurationError, match="ExpiresOn"):
            select_strategy(AuthParameters(access_token="tok", expires_on="soon"))

    def test_missing_expiry_raises(self):
        with pytest.raises(ConfigurationError):
            select_strategy(AuthParameters(access_token="tok"))

    def test_none_raises_argument_error(self):
        with pytest.raises(ArgumentError):
            select_strategy(None)


class TestDirectToken:
    """Pre-supplied access tokens."""

    @pytest.mark.asyncio
    async def test_returned_verbatim_without_network(self, provider, identity, vault):
        params = AuthParameters(
            access_token="eyJ.direct.token",
            expires_on="2024-06-01T12:00:00Z",
            refresh_token_name="rt1",
            application_secret_name="as1",
            key_vault_endpoint=VAULT,
        )

        credential = await provider.acquire_credential(params)

        assert credential.token == "eyJ.direct.token"
        assert credential.expires_at == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
        identity.acquire_token_for_client.assert_not_awaited()
        identity.acquire_token_by_refresh_token.assert_not_awaited()
        vault.get_secret.assert_not_awaited()


class TestClientCredentials:
    """Application-only grant."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, provider, identity):
        params = AuthParameters(
            application_id="app1",
            application_secret="s3cr3t",
            tenant_id="tenant1",
            refresh_token="",
            refresh_token_name="",
            access_token="",
        )

        credential = await provider.acquire_credential(params)

        identity.acquire_token_for_client.assert_awaited_once_with(
            "https://login.microsoftonline.com/tenant1",
            "app1",
            "s3cr3t",
            ["https://api.partnercenter.microsoft.com/.default"],
        )
        assert credential.token == "app-token"
        assert credential.expires_at == ISSUED_EXPIRY
        identity.acquire_token_by_refresh_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_secret_name_wins_over_literal(self, provider, identity, vault):
        params = AuthParameters(
            application_id="app1",
            application_secret="literal-secret",
            application_secret_name="as1",
            key_vault_endpoint=VAULT,
            tenant_id="tenant1",
        )

        await provider.acquire_credential(params)

        vault.get_secret.assert_awaited_once_with(VAULT, "as1")
        args = identity.acquire_token_for_client.await_args.args
        assert args[2] == "vault-app-secret"

    @pytest.mark.asyncio
    async def test_empty_vault_secret_falls_back_to_literal(self, provider, identity, vault):
        """An empty vault value is replaced by the literal secret."""
        vault.get_secret.side_effect = None
        vault.get_secret.return_value = ""
        params = AuthParameters(
            application_id="app1",
            application_secret="literal-secret",
            application_secret_name="as1",
            key_vault_endpoint=VAULT,
            tenant_id="tenant1",
        )

        await provider.acquire_credential(params)

        vault.get_secret.assert_awaited_once_with(VAULT, "as1")
        assert identity.acquire_token_for_client.await_args.args[2] == "literal-secret"

    @pytest.mark.asyncio
    async def test_custom_application_scope(self, identity, vault):
        provider = CredentialProvider(
            identity, SecretResolver(vault), application_scope="https://custom/.default"
        )
        await provider.acquire_credential(
            AuthParameters(application_id="a", application_secret="s", tenant_id="t")
        )
        assert identity.acquire_token_for_client.await_args.args[3] == [
            "https://custom/.default"
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs,missing",
        [
            ({"application_secret": "s", "tenant_id": "t"}, "application_id"),
            ({"application_id": "a", "application_secret": "s"}, "tenant_id"),
            ({"application_id": "a", "tenant_id": "t"}, "application_secret"),
        ],
    )
    async def test_missing_settings_raise(self, provider, identity, kwargs, missing):
        with pytest.raises(ConfigurationError, match=missing):
            await provider.acquire_credential(AuthParameters(**kwargs))
        identity.acquire_token_for_client.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_vault_failure_propagates(self, provider, vault, identity):
        vault.get_secret.side_effect = None
        vault.get_secret.return_value = None
        params = AuthParameters(
            application_id="a",
            application_secret_name="as1",
            key_vault_endpoint=VAULT,
            tenant_id="t",
        )
        with pytest.raises(SecretAccessError):
            await provider.acquire_credential(params)
        identity.acquire_token_for_client.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_secret_name_without_resolver_raises(self, identity):
        provider = CredentialProvider(identity)
        params = AuthParameters(
            application_id="a",
            application_secret_name="as1",
            key_vault_endpoint=VAULT,
            tenant_id="t",
        )
        with pytest.raises(ConfigurationError):
            await provider.acquire_credential(params)


class TestRefreshExchange:
    """Refresh-token grant."""

    @pytest.mark.asyncio
    async def test_vault_backed_end_to_end(self, provider, identity, vault):
        params = AuthParameters(
            refresh_token_name="rt1",
            application_secret_name="as1",
            key_vault_endpoint="https://vault.example",
        )

        credential = await provider.acquire_credential(params)

        fetched = [call.args for call in vault.get_secret.await_args_list]
        assert ("https://vault.example", "rt1") in fetched
        assert ("https://vault.example", "as1") in fetched
        identity.acquire_token_by_refresh_token.assert_awaited_once()
        args = identity.acquire_token_by_refresh_token.await_args.args
        assert args[2] == "vault-app-secret"
        assert args[3] == "vault-refresh-token"
        assert args[4] == ["https://api.partnercenter.microsoft.com/user_impersonation"]
        assert credential.token == "user-token"
        identity.acquire_token_for_client.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_literal_values_and_scopes(self, provider, identity, vault):
        params = AuthParameters(
            application_id="app1",
            application_secret="s3cr3t",
            refresh_token="rt-literal",
            tenant_id="tenant1",
            scopes="scope-a, scope-b",
        )

        await provider.acquire_credential(params)

        identity.acquire_token_by_refresh_token.assert_awaited_once_with(
            "https://login.microsoftonline.com/tenant1",
            "app1",
            "s3cr3t",
            "rt-literal",
            ["scope-a", "scope-b"],
        )
        vault.get_secret.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_token_name_wins_over_literal(self, provider, identity):
        params = AuthParameters(
            application_secret="s",
            refresh_token="literal-rt",
            refresh_token_name="rt1",
            key_vault_endpoint=VAULT,
        )
        await provider.acquire_credential(params)
        assert identity.acquire_token_by_refresh_token.await_args.args[3] == (
            "vault-refresh-token"
        )

    @pytest.mark.asyncio
    async def test_empty_vault_values_fall_back_to_literals(self, provider, identity, vault):
        """Empty vault values are replaced by the literal secret and refresh token."""
        vault.get_secret.side_effect = None
        vault.get_secret.return_value = ""
        params = AuthParameters(
            application_secret="literal-secret",
            application_secret_name="as1",
            refresh_token="literal-rt",
            refresh_token_name="rt1",
            key_vault_endpoint=VAULT,
        )

        await provider.acquire_credential(params)

        assert vault.get_secret.await_count == 2
        args = identity.acquire_token_by_refresh_token.await_args.args
        assert args[2] == "literal-secret"
        assert args[3] == "literal-rt"

    @pytest.mark.asyncio
    async def test_empty_vault_value_without_literal_raises(self, provider, identity, vault):
        """With no literal to fall back to, the missing setting is reported."""
        vault.get_secret.side_effect = None
        vault.get_secret.return_value = ""
        params = AuthParameters(
            application_secret="s",
            refresh_token_name="rt1",
            key_vault_endpoint=VAULT,
        )

        with pytest.raises(ConfigurationError, match="refresh_token"):
            await provider.acquire_credential(params)
        identity.acquire_token_by_refresh_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_secret_raises(self, provider, identity):
        with pytest.raises(ConfigurationError, match="application_secret"):
            await provider.acquire_credential(AuthParameters(refresh_token="rt"))
        identity.acquire_token_by_refresh_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejection_does_not_fall_back(self, provider, identity):
        identity.acquire_token_by_refresh_token.side_effect = AuthenticationError(
            "invalid_grant", error_code="invalid_grant"
        )
        params = AuthParameters(
            application_id="app1",
            application_secret="s3cr3t",
            refresh_token="expired",
            tenant_id="tenant1",
        )

        with pytest.raises(AuthenticationError):
            await provider.acquire_credential(params)

        identity.acquire_token_for_client.assert_not_awaited()


class TestAcquireCredential:
    """Cross-cutting behavior."""

    @pytest.mark.asyncio
    async def test_none_raises_argument_error(self, provider):
        with pytest.raises(ArgumentError):
            await provider.acquire_credential(None)

    @pytest.mark.asyncio
    async def test_each_call_acquires_fresh(self, provider, identity):
        params = AuthParameters(application_id="a", application_secret="s", tenant_id="t")
        await provider.acquire_credential(params)
        await provider.acquire_credential(params)
        assert identity.acquire_token_for_client.await_count == 2

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, identity, vault):
        started = asyncio.Event()

        async def slow_exchange(*args):
            started.set()
            await asyncio.Event().wait()

        identity.acquire_token_for_client = AsyncMock(side_effect=slow_exchange)
        provider = CredentialProvider(identity, SecretResolver(vault))
        params = AuthParameters(application_id="a", application_secret="s", tenant_id="t")

        task = asyncio.create_task(provider.acquire_credential(params))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_concurrent_acquisitions_are_independent(self, identity, vault):
        tokens = iter(["t1", "t2", "t3"])

        async def issue(*args):
            await asyncio.sleep(0)
            return TokenResponse(
                access_token=next(tokens),
                expires_on=datetime.now(timezone.utc) + timedelta(hours=1),
            )

        identity.acquire_token_for_client = AsyncMock(side_effect=issue)
        provider = CredentialProvider(identity, SecretResolver(vault))
        params = AuthParameters(application_id="a", application_secret="s", tenant_id="t")

        results = await asyncio.gather(
            *(provider.acquire_credential(params) for _ in range(3))
        )

        assert sorted(r.token for r in results) == ["t1", "t2", "t3"]
