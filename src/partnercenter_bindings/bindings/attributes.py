"""
Binding settings for the Partner Center input bindings.

Each binding is a frozen dataclass holding its resource identifiers plus
an AuthParameters. Settings are validated on construction.

Binding                         Returns a single item when
CustomerBinding                 customer_id is set
InvoiceBinding                  invoice_id is set
InvoiceLineItemBinding          never (line items of one invoice)
SubscriptionBinding             subscription_id is set
AuditRecordBinding              never (records in a date range)
AzureUtilizationRecordBinding   never (records in a time range)
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

from partnercenter_bindings.auth.parameters import AuthParameters
from partnercenter_bindings.auth.token import parse_timestamp
from partnercenter_bindings.errors import ConfigurationError

BILLING_PROVIDERS = ("all", "azure", "office", "one_time", "marketplace")
LINE_ITEM_TYPES = ("billing_line_items", "usage_line_items")
BILLING_PERIODS = ("current", "previous")
GRANULARITIES = ("daily", "hourly")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _choice(value: Any, allowed: Tuple[str, ...], setting: str) -> str:
    """Case-insensitive enum setting; accepts BillingLineItems or billing_line_items."""
    text = _text(value)
    by_key = {a.replace("_", ""): a for a in allowed}
    normalized = by_key.get(text.replace("_", "").lower())
    if normalized is None:
        raise ConfigurationError(
            f"{setting} must be one of {', '.join(allowed)}, got {text!r}"
        )
    return normalized


def _require(binding: "BindingSettings", **values: str) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"{type(binding).__name__} requires {', '.join(missing)}",
            context={"missing": missing, "binding": binding.binding_name},
        )


@dataclass(frozen=True)
class BindingSettings:
    """Settings shared by every binding: the credential fields."""

    binding_name: ClassVar[str] = "binding"

    # Binding attribute name -> dataclass field
    resource_fields: ClassVar[Dict[str, str]] = {}

    auth: AuthParameters = field(default_factory=AuthParameters)

    @property
    def application_id(self) -> str:
        return self.auth.application_id

    @property
    def returns_single(self) -> bool:
        return False

    @classmethod
    def from_mapping(
        cls,
        mapping: Optional[Mapping[str, Any]],
        defaults: Optional[Mapping[str, Any]] = None,
    ):
        """
        Build settings from a flat binding mapping.

        Resource keys (CustomerId, customer_id, ...) go to the binding; all
        other keys are read as credential fields.
        """
        mapping = dict(mapping or {})
        own = {f.name for f in fields(cls) if f.name != "auth"}
        kwargs: Dict[str, Any] = {}
        auth_values: Dict[str, Any] = {}
        for key, value in mapping.items():
            name = cls.resource_fields.get(key, key)
            if name in own:
                kwargs[name] = value
            else:
                auth_values[key] = value
        return cls(auth=AuthParameters.from_mapping(auth_values, defaults), **kwargs)


@dataclass(frozen=True)
class CustomerBinding(BindingSettings):
    """All customers, or one customer by id."""

    binding_name: ClassVar[str] = "customer"
    resource_fields: ClassVar[Dict[str, str]] = {"CustomerId": "customer_id"}

    customer_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "customer_id", _text(self.customer_id))

    @property
    def returns_single(self) -> bool:
        return bool(self.customer_id)


@dataclass(frozen=True)
class InvoiceBinding(BindingSettings):
    """All invoices, or one invoice by id."""

    binding_name: ClassVar[str] = "invoice"
    resource_fields: ClassVar[Dict[str, str]] = {"InvoiceId": "invoice_id"}

    invoice_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "invoice_id", _text(self.invoice_id))

    @property
    def returns_single(self) -> bool:
        return bool(self.invoice_id)


@dataclass(frozen=True)
class InvoiceLineItemBinding(BindingSettings):
    """Line items of one invoice for a billing provider and line item type."""

    binding_name: ClassVar[str] = "invoice_line_item"
    resource_fields: ClassVar[Dict[str, str]] = {
        "InvoiceId": "invoice_id",
        "BillingProvider": "billing_provider",
        "LineItemType": "invoice_line_item_type",
        "Period": "period",
    }

    invoice_id: str = ""
    billing_provider: str = "all"
    invoice_line_item_type: str = "billing_line_items"
    period: str = "current"

    def __post_init__(self) -> None:
        object.__setattr__(self, "invoice_id", _text(self.invoice_id))
        _require(self, invoice_id=self.invoice_id)
        object.__setattr__(
            self,
            "billing_provider",
            _choice(self.billing_provider, BILLING_PROVIDERS, "BillingProvider"),
        )
        object.__setattr__(
            self,
            "invoice_line_item_type",
            _choice(self.invoice_line_item_type, LINE_ITEM_TYPES, "LineItemType"),
        )
        object.__setattr__(self, "period", _choice(self.period, BILLING_PERIODS, "Period"))


@dataclass(frozen=True)
class SubscriptionBinding(BindingSettings):
    """All subscriptions of a customer, or one subscription by id."""

    binding_name: ClassVar[str] = "subscription"
    resource_fields: ClassVar[Dict[str, str]] = {
        "CustomerId": "customer_id",
        "SubscriptionId": "subscription_id",
    }

    customer_id: str = ""
    subscription_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "customer_id", _text(self.customer_id))
        object.__setattr__(self, "subscription_id", _text(self.subscription_id))
        _require(self, customer_id=self.customer_id)

    @property
    def returns_single(self) -> bool:
        return bool(self.subscription_id)


@dataclass(frozen=True)
class AuditRecordBinding(BindingSettings):
    """Audit records between two dates."""

    binding_name: ClassVar[str] = "audit_record"
    resource_fields: ClassVar[Dict[str, str]] = {
        "StartDate": "start_date",
        "EndDate": "end_date",
    }

    start_date: Any = None
    end_date: Any = None

    def __post_init__(self) -> None:
        start: datetime = parse_timestamp(self.start_date, "StartDate")
        end: datetime = parse_timestamp(self.end_date, "EndDate")
        if start > end:
            raise ConfigurationError(
                "StartDate must not be after EndDate",
                context={"start_date": start.isoformat(), "end_date": end.isoformat()},
            )
        object.__setattr__(self, "start_date", start)
        object.__setattr__(self, "end_date", end)


@dataclass(frozen=True)
class AzureUtilizationRecordBinding(BindingSettings):
    """Azure utilization records of one subscription over a time range."""

    binding_name: ClassVar[str] = "azure_utilization_record"
    resource_fields: ClassVar[Dict[str, str]] = {
        "CustomerId": "customer_id",
        "SubscriptionId": "subscription_id",
        "StartTime": "start_time",
        "EndTime": "end_time",
        "Granularity": "granularity",
        "ShowDetails": "show_details",
    }

    customer_id: str = ""
    subscription_id: str = ""
    start_time: Any = None
    end_time: Any = None
    granularity: str = "daily"
    show_details: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "customer_id", _text(self.customer_id))
        object.__setattr__(self, "subscription_id", _text(self.subscription_id))
        _require(
            self, customer_id=self.customer_id, subscription_id=self.subscription_id
        )
        start = parse_timestamp(self.start_time, "StartTime")
        end = parse_timestamp(self.end_time, "EndTime")
        if start > end:
            raise ConfigurationError(
                "StartTime must not be after EndTime",
                context={"start_time": start.isoformat(), "end_time": end.isoformat()},
            )
        object.__setattr__(self, "start_time", start)
        object.__setattr__(self, "end_time", end)
        object.__setattr__(
            self, "granularity", _choice(self.granularity, GRANULARITIES, "Granularity")
        )
        if isinstance(self.show_details, str):
            object.__setattr__(
                self, "show_details", self.show_details.strip().lower() in ("true", "1", "yes")
            )
