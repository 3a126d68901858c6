# tailor_bill/domain/models.py

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from domain.errors import ValidationFailed

IST = timezone(timedelta(hours=5, minutes=30), "IST")


def as_money(value) -> Decimal:
    """
    Convert a user/DB supplied amount (int, float, str, Decimal) to Decimal.
    Floats go through str() so 0.1 stays 0.1.
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# ---------------------------------------------------------------------------
# Garment schemas
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MeasurementField:
    name: str  # storage key, unique within a garment schema
    label: str  # upper-case label printed on forms and bills
    unit: str = "inches"  # "inches" | "text"


@dataclass(frozen=True)
class MeasurementSection:
    title: str
    fields: Tuple[MeasurementField, ...]


@dataclass(frozen=True)
class GarmentTypeSchema:
    garment_type: str
    sections: Tuple[MeasurementSection, ...]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

class ItemKind(str, Enum):
    READY_MADE = "ready_made"
    STITCHING = "stitching"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    mobile: str
    email: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    """
    One priced entry on an order.

    `total_price` is never passed in: it is derived from quantity and
    unit_price whenever an instance is built, including via
    dataclasses.replace().

    `clothing_type` and `measurements` are set on stitching items and only
    on them.
    """
    id: str
    kind: ItemKind
    description: str
    quantity: int
    unit_price: Decimal
    hsn_code: Optional[str] = None
    clothing_type: Optional[str] = None  # garment type key, stitching only
    measurements: Optional[Mapping[str, str]] = None  # stitching only
    total_price: Decimal = field(init=False)

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValidationFailed(f"Quantity must be a whole number >= 1, got {self.quantity!r}", field="quantity")

        stitching = self.kind == ItemKind.STITCHING
        if stitching and (self.clothing_type is None or self.measurements is None):
            raise ValidationFailed("Stitching items need a clothing type and measurements", field="clothing_type")
        if not stitching and (self.clothing_type is not None or self.measurements is not None):
            raise ValidationFailed("Ready-made items carry no clothing type or measurements", field="clothing_type")

        object.__setattr__(self, "unit_price", as_money(self.unit_price))
        if self.unit_price < 0:
            raise ValidationFailed("Unit price cannot be negative", field="unit_price")
        object.__setattr__(self, "total_price", self.unit_price * self.quantity)
        if self.measurements is not None and not isinstance(self.measurements, MappingProxyType):
            object.__setattr__(self, "measurements", MappingProxyType(dict(self.measurements)))


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class Invoice:
    """
    Draft order (status DRAFT, no id) or persisted invoice.
    Totals are always the ones computed from `items`; build new values with
    services.order_service rather than by hand.
    """
    invoice_number: str
    customer: Customer
    items: Tuple[LineItem, ...]
    subtotal: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus = InvoiceStatus.DRAFT
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None

    @property
    def customer_id(self) -> str:
        return self.customer.id


@dataclass(frozen=True)
class BillStats:
    total_bills: int
    total_amount: Decimal
    paid_bills: int
    pending_bills: int  # anything not yet paid


# ---------------------------------------------------------------------------
# Printing
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BusinessProfile:
    name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    tax_number: str = ""


@dataclass(frozen=True)
class BillLocale:
    currency_symbol: str = "₹"
    date_format: str = "%d/%m/%Y"
    tz: tzinfo = IST  # bill dates are printed in shop time


@dataclass(frozen=True)
class DocumentRow:
    description: str
    quantity: str
    rate: str
    amount: str
    measurement_summary: Optional[str] = None  # stitching rows only


@dataclass(frozen=True)
class DocumentSection:
    title: str
    rows: Tuple[DocumentRow, ...]


@dataclass(frozen=True)
class TotalsBlock:
    subtotal: str
    discount_label: str  # e.g. "Discount (10%)"
    discount: str
    total: str


@dataclass(frozen=True)
class PrintableDocument:
    """
    Rendering-agnostic bill layout. Every value is already a display string.
    """
    title: str
    business: BusinessProfile
    invoice_number: str
    invoice_date: str
    customer_lines: Tuple[str, ...]
    sections: Tuple[DocumentSection, ...]
    totals: TotalsBlock
    delivery_date: Optional[str]
    notes: Optional[str]
    signatures: Tuple[str, ...]
