"""Binding settings and the extension that resolves them."""

from partnercenter_bindings.bindings.attributes import (
    AuditRecordBinding,
    AzureUtilizationRecordBinding,
    BindingSettings,
    CustomerBinding,
    InvoiceBinding,
    InvoiceLineItemBinding,
    SubscriptionBinding,
)
from partnercenter_bindings.bindings.extension import (
    OperationsFactory,
    PartnerCenterExtension,
)

__all__ = [
    "AuditRecordBinding",
    "AzureUtilizationRecordBinding",
    "BindingSettings",
    "CustomerBinding",
    "InvoiceBinding",
    "InvoiceLineItemBinding",
    "OperationsFactory",
    "PartnerCenterExtension",
    "SubscriptionBinding",
]
