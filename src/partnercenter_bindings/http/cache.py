"""
One shared HTTP client per application id.

HttpClientCache is owned by the extension and passed to every call site.
Entries live as long as the cache: there is no TTL or eviction. Clients
carry no credential state, so rotating a secret does not require a new
client.
"""

import logging
import threading
from typing import Dict, List, Optional

from partnercenter_bindings import metrics
from partnercenter_bindings.config import ExtensionConfig
from partnercenter_bindings.errors import ArgumentError
from partnercenter_bindings.http.client import PartnerCenterHttpClient
from partnercenter_bindings.logging import LoggedClass


class HttpClientCache(LoggedClass):
    """
    Thread-safe get-or-create map of application id to HTTP client.

    Keys are case-sensitive. A newly created client opens no connections
    until its first request.

    Usage:
        cache = HttpClientCache(ExtensionConfig.from_env())
        client = cache.get_client("app1")
        ...
        await cache.close()
    """

    log_component = "client_cache"

    def __init__(self, config: Optional[ExtensionConfig] = None):
        self.config = config or ExtensionConfig()
        self._clients: Dict[str, PartnerCenterHttpClient] = {}
        self._lock = threading.Lock()
        super().__init__()

    def _create_client(self, application_id: str) -> PartnerCenterHttpClient:
        return PartnerCenterHttpClient(
            application_id,
            base_url=self.config.api_endpoint,
            retry_config=self.config.retry_config(),
            attempt_timeout=self.config.attempt_timeout_seconds,
        )

    def get_client(self, application_id: str) -> PartnerCenterHttpClient:
        """
        Get or create the client for an application id.

        Raises:
            ArgumentError: If application_id is None, empty or blank
        """
        if application_id is None or not str(application_id).strip():
            raise ArgumentError("application_id is required to get an HTTP client")

        with self._lock:
            client = self._clients.get(application_id)
            if client is None:
                client = self._create_client(application_id)
                self._clients[application_id] = client
                metrics.set_cached_clients(len(self._clients))
                self._log(
                    logging.DEBUG,
                    "Created HTTP client",
                    application_id=application_id,
                    cached_clients=len(self._clients),
                )
            return client

    def application_ids(self) -> List[str]:
        """Ids with a cached client (for diagnostics)."""
        with self._lock:
            return list(self._clients)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, application_id: object) -> bool:
        with self._lock:
            return application_id in self._clients

    async def close(self) -> None:
        """Close every cached client and empty the cache."""
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
            metrics.set_cached_clients(0)

        for client in clients:
            try:
                await client.close()
            except Exception as e:
                self._log_exception(
                    e,
                    "Error closing HTTP client",
                    level=logging.WARNING,
                    application_id=client.application_id,
                )
        self._log(logging.DEBUG, "HTTP client cache closed", closed_clients=len(clients))
