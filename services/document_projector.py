# tailor_bill/services/document_projector.py

from datetime import datetime
from typing import List, Optional

from domain.garments import all_fields, schema_for
from domain.models import (
    BillLocale,
    BusinessProfile,
    DocumentRow,
    DocumentSection,
    Invoice,
    ItemKind,
    LineItem,
    PrintableDocument,
    TotalsBlock,
)
from utils.formatting import format_money, format_rate

DEFAULT_LOCALE = BillLocale()
DEFAULT_BUSINESS = BusinessProfile(name="A1 Tailoring Services")

FABRIC_SECTION_TITLE = "Fabric Details"
STITCHING_SECTION_TITLE = "Stitching Details"
SIGNATURES = ("Customer Signature", "Shopkeeper Signature")

PLACEHOLDER = "-"


def measurement_summary(item: LineItem) -> str:
    """
    'CHEST: 40", SHOULDER: 18"' for the filled measurements of a stitching
    item, in schema order. Empty values are skipped.
    """
    values = item.measurements or {}
    parts = []
    for f in all_fields(schema_for(item.clothing_type)):
        value = values.get(f.name)
        if value is None or not str(value).strip():
            continue
        parts.append(f'{f.label}: {str(value).strip()}"')
    return ", ".join(parts)


def _placeholder_row(with_summary: bool) -> DocumentRow:
    return DocumentRow(
        description=PLACEHOLDER,
        quantity=PLACEHOLDER,
        rate=PLACEHOLDER,
        amount=PLACEHOLDER,
        measurement_summary=PLACEHOLDER if with_summary else None,
    )


def _build_section(title: str, items: List[LineItem], locale: BillLocale, stitching: bool) -> DocumentSection:
    if not items:
        return DocumentSection(title=title, rows=(_placeholder_row(stitching),))

    rows = []
    for item in items:
        rows.append(
            DocumentRow(
                description=item.description,
                quantity=str(item.quantity),
                rate=format_money(item.unit_price, locale.currency_symbol),
                amount=format_money(item.total_price, locale.currency_symbol),
                measurement_summary=measurement_summary(item) if stitching else None,
            )
        )
    return DocumentSection(title=title, rows=tuple(rows))


def _customer_lines(invoice: Invoice) -> tuple:
    customer = invoice.customer
    lines = [customer.name, customer.mobile]
    if customer.email:
        lines.append(customer.email)
    if customer.address:
        lines.append(customer.address)
    return tuple(lines)


def project(
        invoice: Invoice,
        now: datetime,
        locale: BillLocale = DEFAULT_LOCALE,
        business: BusinessProfile = DEFAULT_BUSINESS,
) -> PrintableDocument:
    """
    Lay out `invoice` as a printable bill.

    Pure: no clock or locale lookups. `now` is only used as the bill date when
    the invoice has no `created_at` yet (draft preview). Aware timestamps are
    shown in `locale.tz`; naive ones are printed as given.

    Layout:
      - header (business) + invoice number/date
      - customer block
      - "Fabric Details" (ready-made items) and "Stitching Details" (stitching
        items); an empty section gets one "-" row so the layout never shifts
      - totals, optional delivery date, optional notes, signature block
    """
    symbol = locale.currency_symbol
    bill_date = invoice.created_at or now
    if bill_date.tzinfo is not None:
        bill_date = bill_date.astimezone(locale.tz)

    fabric_items = [i for i in invoice.items if i.kind == ItemKind.READY_MADE]
    stitching_items = [i for i in invoice.items if i.kind == ItemKind.STITCHING]

    totals = TotalsBlock(
        subtotal=format_money(invoice.subtotal, symbol),
        discount_label=f"Discount ({format_rate(invoice.discount_rate)}%)",
        discount=format_money(invoice.discount_amount, symbol),
        total=format_money(invoice.total_amount, symbol),
    )

    delivery_date: Optional[str] = None
    if invoice.due_date is not None:
        delivery_date = invoice.due_date.strftime(locale.date_format)

    notes = invoice.notes.strip() if invoice.notes and invoice.notes.strip() else None

    return PrintableDocument(
        title="INVOICE",
        business=business,
        invoice_number=invoice.invoice_number,
        invoice_date=bill_date.strftime(locale.date_format),
        customer_lines=_customer_lines(invoice),
        sections=(
            _build_section(FABRIC_SECTION_TITLE, fabric_items, locale, stitching=False),
            _build_section(STITCHING_SECTION_TITLE, stitching_items, locale, stitching=True),
        ),
        totals=totals,
        delivery_date=delivery_date,
        notes=notes,
        signatures=SIGNATURES,
    )
