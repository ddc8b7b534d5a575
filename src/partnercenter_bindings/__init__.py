"""
Partner Center input bindings for Azure Functions.

Turns declarative binding settings into a bearer credential and a shared,
retry-wrapped HTTP client per application id.
"""

__version__ = "0.1.0"

from partnercenter_bindings.auth import (
    AuthParameters,
    CredentialProvider,
    CredentialToken,
    select_strategy,
)
from partnercenter_bindings.bindings import (
    AuditRecordBinding,
    AzureUtilizationRecordBinding,
    CustomerBinding,
    InvoiceBinding,
    InvoiceLineItemBinding,
    PartnerCenterExtension,
    SubscriptionBinding,
)
from partnercenter_bindings.config import ExtensionConfig
from partnercenter_bindings.http import HttpClientCache, PartnerCenterHttpClient

__all__ = [
    "AuditRecordBinding",
    "AuthParameters",
    "AzureUtilizationRecordBinding",
    "CredentialProvider",
    "CredentialToken",
    "CustomerBinding",
    "ExtensionConfig",
    "HttpClientCache",
    "InvoiceBinding",
    "InvoiceLineItemBinding",
    "PartnerCenterExtension",
    "PartnerCenterHttpClient",
    "SubscriptionBinding",
    "select_strategy",
]
