"""HTTP transport for Partner Center: resilient client and per-application cache."""

from partnercenter_bindings.http.cache import HttpClientCache
from partnercenter_bindings.http.client import PartnerCenterHttpClient, parse_retry_after

__all__ = [
    "HttpClientCache",
    "PartnerCenterHttpClient",
    "parse_retry_after",
]
