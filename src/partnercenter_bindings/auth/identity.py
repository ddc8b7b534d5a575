"""
Identity provider access for the OAuth2 grants used by the bindings.

Wraps msal.ConfidentialClientApplication for:
- client-credentials (application-only) token issuance
- refresh-token exchange

MSAL is synchronous; calls run in a worker thread so they suspend only
the invoking coroutine.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Protocol

import msal
from pydantic import BaseModel, Field, field_validator

from partnercenter_bindings.auth.token import CredentialToken, parse_expires_on
from partnercenter_bindings.errors import (
    AuthenticationError,
    PartnerCenterError,
    wrap_exception,
)
from partnercenter_bindings.logging import LoggedClass
from partnercenter_bindings.security import sanitize_error_message


class TokenResponse(BaseModel):
    """Token issued by the identity provider.

    Attributes:
        access_token: Bearer token
        expires_on: UTC instant the token stops being valid
        token_type: Token type reported by the provider (normally Bearer)
    """

    access_token: str = Field(..., min_length=1, repr=False)
    expires_on: datetime
    token_type: str = "Bearer"

    @field_validator("access_token")
    @classmethod
    def validate_access_token(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("access_token cannot be empty or whitespace")
        return v

    @field_validator("expires_on", mode="before")
    @classmethod
    def parse_expiry(cls, v: Any) -> datetime:
        return parse_expires_on(v)

    @classmethod
    def from_msal(
        cls, result: Optional[Dict[str, Any]], now: Optional[datetime] = None
    ) -> "TokenResponse":
        """
        Build a TokenResponse from an MSAL result dict.

        Raises:
            AuthenticationError: If MSAL reported an error or returned no token
        """
        result = result or {}
        if "error" in result or not result.get("access_token"):
            error = result.get("error") or "no_token"
            description = sanitize_error_message(
                result.get("error_description") or "identity provider returned no access token"
            )
            raise AuthenticationError(
                f"Token request rejected: {error}: {description}",
                error_code=error,
                context={
                    "error_codes": result.get("error_codes"),
                    "correlation_id": result.get("correlation_id"),
                },
            )

        if result.get("expires_on"):
            expires_on: Any = result["expires_on"]
        else:
            issued_at = now or datetime.now(timezone.utc)
            expires_on = issued_at + timedelta(seconds=int(result.get("expires_in", 0)))

        return cls(
            access_token=result["access_token"],
            expires_on=expires_on,
            token_type=result.get("token_type") or "Bearer",
        )

    def to_credential(self) -> CredentialToken:
        return CredentialToken(token=self.access_token, expires_at=self.expires_on)


class IdentityClient(Protocol):
    """Token issuance used by CredentialProvider."""

    async def acquire_token_for_client(
        self, authority: str, client_id: str, client_secret: str, scopes: List[str]
    ) -> TokenResponse:
        ...

    async def acquire_token_by_refresh_token(
        self,
        authority: str,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        scopes: List[str],
    ) -> TokenResponse:
        ...


class MsalIdentityClient(LoggedClass):
    """
    IdentityClient backed by msal.ConfidentialClientApplication.

    A fresh application object is built per request so no MSAL token
    cache is shared between invocations.
    """

    log_component = "identity"

    def _build_app(
        self, authority: str, client_id: str, client_secret: str
    ) -> msal.ConfidentialClientApplication:
        return msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=authority,
        )

    async def _run(self, grant: str, authority: str, client_id: str, call) -> TokenResponse:
        ctx = {"authority": authority, "application_id": client_id, "grant": grant}
        try:
            result = await asyncio.to_thread(call)
        except asyncio.CancelledError:
            raise
        except PartnerCenterError:
            raise
        except Exception as e:
            error = wrap_exception(e, default_class=AuthenticationError, context=ctx)
            self._log_exception(
                error, "Token request failed", level=logging.WARNING, **ctx
            )
            raise error from e

        response = TokenResponse.from_msal(result)
        self._log(
            logging.DEBUG,
            "Token issued",
            expires_on=response.expires_on.isoformat(),
            **ctx,
        )
        return response

    async def acquire_token_for_client(
        self, authority: str, client_id: str, client_secret: str, scopes: List[str]
    ) -> TokenResponse:
        def call() -> Dict[str, Any]:
            app = self._build_app(authority, client_id, client_secret)
            return app.acquire_token_for_client(scopes=scopes)

        return await self._run("client_credentials", authority, client_id, call)

    async def acquire_token_by_refresh_token(
        self,
        authority: str,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        scopes: List[str],
    ) -> TokenResponse:
        def call() -> Dict[str, Any]:
            app = self._build_app(authority, client_id, client_secret)
            return app.acquire_token_by_refresh_token(refresh_token, scopes=scopes)

        return await self._run("refresh_token", authority, client_id, call)
