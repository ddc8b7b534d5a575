"""
Resilient HTTP client for the Partner Center REST API.

One client is shared by every invocation that uses the same application
id (see HttpClientCache). The client holds HTTP plumbing only: the bearer
credential is passed per request, so no token state lives here.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional

import aiohttp

from partnercenter_bindings import metrics
from partnercenter_bindings.auth.token import CredentialToken
from partnercenter_bindings.config import (
    DEFAULT_API_ENDPOINT,
    DEFAULT_ATTEMPT_TIMEOUT_SECONDS,
)
from partnercenter_bindings.errors import (
    PartnerCenterError,
    PermanentError,
    ServiceUnavailableError,
    ThrottlingError,
    TimeoutError,
    TransientNetworkError,
    error_for_http_status,
)
from partnercenter_bindings.logging import LoggedClass
from partnercenter_bindings.resilience import DEFAULT_RETRY, RetryConfig, retry_async
from partnercenter_bindings.security import sanitize_url


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given as seconds or an HTTP date."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def _retry_reason(error: PartnerCenterError) -> str:
    if isinstance(error, ThrottlingError):
        return "throttled"
    if isinstance(error, TimeoutError):
        return "timeout"
    if isinstance(error, ServiceUnavailableError):
        return "server_error"
    return "connection"


class PartnerCenterHttpClient(LoggedClass):
    """
    Async HTTP client with bounded retry and a per-attempt timeout.

    Features:
    - aiohttp session created on first request
    - Bearer credential applied per request
    - Transient failures (timeouts, connection errors, 408/429/5xx) retried
      with exponential backoff, honouring Retry-After
    - Non-transient HTTP failures raised immediately as typed errors

    Usage:
        async with PartnerCenterHttpClient("app1") as client:
            customers = await client.get("/v1/customers", credential=token)
    """

    log_component = "http"

    def __init__(
        self,
        application_id: str,
        base_url: str = DEFAULT_API_ENDPOINT,
        retry_config: RetryConfig = DEFAULT_RETRY,
        attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT_SECONDS,
    ):
        """
        Args:
            application_id: Application id this client is cached under
            base_url: Prefix for relative request paths
            retry_config: Retry policy (default: 3 retries)
            attempt_timeout: Total timeout for one attempt in seconds
        """
        self.application_id = application_id
        self.base_url = base_url.rstrip("/")
        self.retry_config = retry_config
        self.attempt_timeout = attempt_timeout
        self._session: Optional[aiohttp.ClientSession] = None
        super().__init__()

    @property
    def is_open(self) -> bool:
        """True once a session exists and has not been closed."""
        return self._session is not None and not self._session.closed

    async def __aenter__(self) -> "PartnerCenterHttpClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Create aiohttp session if not exists."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _build_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    async def _attempt(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        params: Optional[Dict[str, Any]],
        json_body: Optional[Any],
    ) -> Any:
        session = await self._ensure_session()
        safe_url = sanitize_url(url)
        try:
            async with session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.attempt_timeout),
            ) as response:
                metrics.record_http_request(method, str(response.status))
                if response.status >= 400:
                    error = error_for_http_status(
                        response.status,
                        safe_url,
                        retry_after=parse_retry_after(response.headers.get("Retry-After")),
                        context={"method": method},
                    )
                    self._log(
                        logging.WARNING,
                        "Partner Center request failed",
                        http_method=method,
                        http_status=response.status,
                        url=safe_url,
                        error_category=error.category.value,
                    )
                    raise error

                # UnicodeDecodeError from text() is a ValueError
                try:
                    body = await response.text()
                    if not body.strip():
                        return None
                    return json.loads(body)
                except ValueError as e:
                    raise PermanentError(
                        f"Response from {safe_url} is not valid JSON text",
                        cause=e,
                        context={"method": method, "http_status": response.status},
                    ) from e

        except asyncio.TimeoutError as e:
            metrics.record_http_request(method, "timeout")
            raise TimeoutError(
                f"Timeout after {self.attempt_timeout}s: {safe_url}",
                cause=e,
                context={"method": method},
            ) from e
        except aiohttp.ClientError as e:
            metrics.record_http_request(method, "connection_error")
            raise TransientNetworkError(
                f"Connection error: {safe_url}",
                cause=e,
                context={"method": method},
            ) from e

    async def request(
        self,
        method: str,
        url: str,
        *,
        credential: Optional[CredentialToken] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """
        Send a request, retrying transient failures.

        Args:
            method: HTTP method
            url: Absolute URL or path relative to base_url
            credential: Bearer credential for the Authorization header
            headers: Extra request headers
            params: Query parameters
            json_body: JSON body

        Returns:
            Parsed JSON response, or None for an empty body

        Raises:
            TransientNetworkError: When every attempt failed transiently
            AuthenticationError: On 401
            ForbiddenError / NotFoundError / PermanentError: Other 4xx
        """
        method = method.upper()
        full_url = self._build_url(url)
        request_headers = dict(headers or {})
        if credential is not None:
            request_headers.update(credential.authorization_header)

        def on_retry(attempt: int, error: PartnerCenterError) -> None:
            metrics.record_http_retry(_retry_reason(error))

        return await retry_async(
            lambda: self._attempt(method, full_url, request_headers, params, json_body),
            config=self.retry_config,
            description=f"{method} {sanitize_url(full_url)}",
            on_retry=on_retry,
        )

    async def get(self, url: str, **kwargs: Any) -> Any:
        """GET convenience wrapper around request()."""
        return await self.request("GET", url, **kwargs)
