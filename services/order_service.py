# tailor_bill/services/order_service.py

import dataclasses
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol

from domain.errors import (
    DUPLICATE_INVOICE_NUMBER,
    PartialPersistence,
    PersistenceRejected,
    ValidationFailed,
)
from domain.garments import DEFAULT_GARMENT_TYPE, normalize_garment_name, schema_for
from domain.models import BillStats, Customer, Invoice, InvoiceStatus, ItemKind, LineItem, OrderTotals, as_money
from services import line_item_service
from services.clothing_type_mapper import to_storage_enum
from services.invoice_number import next_invoice_number
from services.measurement_service import garment_sets, save_measurement_sets
from services.totals_service import DEFAULT_DISCOUNT_RATE, check_discount_rate, compute_totals

logger = logging.getLogger(__name__)

# Value written to orders.status for a freshly submitted bill.
NEW_ORDER_STATUS = "pending"

MAX_SUBMIT_ATTEMPTS = 3


class OrderStore(Protocol):
    """
    What the billing engine needs from persistence. Implementations raise
    PersistenceRejected (or InvoiceNumberCollision) instead of returning errors.
    """

    def insert_order(self, header: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one orders row; return at least {"id", "created_at"}."""

    def insert_order_items(self, order_id: str, items: List[Dict[str, Any]]) -> None:
        """Insert order_items rows; must be safe to call again with the same rows."""

    def upsert_measurement(self, customer_id: str, clothing_type: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Upsert on (customer_id, clothing_type); return the stored row."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Draft editing
# ---------------------------------------------------------------------------

def start_invoice(
        customer: Customer,
        now: datetime,
        discount_rate=DEFAULT_DISCOUNT_RATE,
        due_date: Optional[date] = None,
        notes: Optional[str] = None,
) -> Invoice:
    """New empty draft for `customer`, numbered from `now`."""
    rate = check_discount_rate(discount_rate)
    totals = compute_totals([], rate)
    return Invoice(
        invoice_number=next_invoice_number(now),
        customer=customer,
        items=(),
        subtotal=totals.subtotal,
        discount_rate=rate,
        discount_amount=totals.discount_amount,
        total_amount=totals.total_amount,
        status=InvoiceStatus.DRAFT,
        due_date=due_date,
        notes=notes,
    )


def _ensure_draft(invoice: Invoice) -> None:
    if invoice.status != InvoiceStatus.DRAFT or invoice.id is not None:
        raise ValidationFailed(f"Invoice {invoice.invoice_number} is already submitted")


def replace_items(invoice: Invoice, items: Iterable[LineItem]) -> Invoice:
    """Swap the item list and re-derive every total from it."""
    _ensure_draft(invoice)
    items = tuple(items)
    totals = compute_totals(items, invoice.discount_rate)
    return dataclasses.replace(
        invoice,
        items=items,
        subtotal=totals.subtotal,
        discount_amount=totals.discount_amount,
        total_amount=totals.total_amount,
    )


def add_item(invoice: Invoice, item: LineItem) -> Invoice:
    return replace_items(invoice, invoice.items + (item,))


def update_item_quantity(invoice: Invoice, item_id: str, quantity: int) -> Invoice:
    items = [
        line_item_service.set_quantity(item, quantity) if item.id == item_id else item
        for item in invoice.items
    ]
    return replace_items(invoice, items)


def remove_item(invoice: Invoice, item_id: str) -> Invoice:
    return replace_items(invoice, line_item_service.remove(invoice.items, item_id))


def set_details(invoice: Invoice, due_date: Optional[date] = None, notes: Optional[str] = None) -> Invoice:
    _ensure_draft(invoice)
    return dataclasses.replace(invoice, due_date=due_date, notes=notes or None)


# ---------------------------------------------------------------------------
# Persistence payloads
# ---------------------------------------------------------------------------

def build_order_header(invoice: Invoice, created_by: Optional[str] = None) -> Dict[str, Any]:
    header = {
        "order_number": invoice.invoice_number,
        "customer_id": invoice.customer_id,
        "total_amount": float(invoice.total_amount),
        "due_date": invoice.due_date.isoformat() if invoice.due_date else None,
        "notes": invoice.notes or None,
        "status": NEW_ORDER_STATUS,
    }
    if created_by:
        header["created_by"] = created_by
    return header


def build_order_item_rows(
        order_id: str,
        items: Iterable[LineItem],
        measurement_ids: Optional[Dict[str, str]] = None,
) -> List[Dict[str, Any]]:
    """
    order_items rows for `items`. The line item id is reused as the row id so
    a retried insert hits the same rows. Stitching items get their clothing
    type collapsed onto the DB enum.
    """
    measurement_ids = measurement_ids or {}
    rows = []
    for item in items:
        stitching = item.kind == ItemKind.STITCHING
        rows.append(
            {
                "id": item.id,
                "order_id": order_id,
                "item_type": item.kind.value,
                "description": item.description,
                "quantity": item.quantity,
                "unit_price": float(item.unit_price),
                "total_price": float(item.total_price),
                "clothing_type": to_storage_enum(item.clothing_type) if stitching else None,
                "measurement_id": measurement_ids.get(item.id) if stitching else None,
            }
        )
    return rows


def _parse_created_at(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------

def _check_submittable(invoice: Invoice) -> None:
    _ensure_draft(invoice)
    if not invoice.customer_id:
        raise ValidationFailed("Please select a customer", field="customer_id")
    if not invoice.items:
        raise ValidationFailed("Please add at least one item", field="items")


def _insert_header(
        invoice: Invoice,
        store: OrderStore,
        created_by: Optional[str],
        clock: Callable[[], datetime],
        max_attempts: int,
) -> Invoice:
    """
    Insert the orders row. On a duplicate invoice number, draw a new number
    and try again, at most `max_attempts` inserts in total.
    """
    candidate = invoice
    for attempt in range(1, max_attempts + 1):
        try:
            stored = store.insert_order(build_order_header(candidate, created_by))
        except PersistenceRejected as e:
            if e.sub_code != DUPLICATE_INVOICE_NUMBER or attempt == max_attempts:
                raise
            fresh_number = next_invoice_number(clock())
            logger.warning(
                "Invoice number %s taken (attempt %d/%d), retrying as %s",
                candidate.invoice_number,
                attempt,
                max_attempts,
                fresh_number,
            )
            candidate = dataclasses.replace(candidate, invoice_number=fresh_number)
            continue

        return dataclasses.replace(
            candidate,
            id=str(stored["id"]),
            created_at=_parse_created_at(stored.get("created_at")),
            status=InvoiceStatus.SENT,
        )

    raise PersistenceRejected("Order was not stored")


def _insert_items(invoice: Invoice, store: OrderStore) -> None:
    try:
        stitching = [item for item in invoice.items if item.kind == ItemKind.STITCHING]
        measurement_ids: Dict[str, str] = {}
        if stitching:
            # Same garment twice in one order: the later item's values are stored.
            sets = {schema_for(item.clothing_type).garment_type: item.measurements or {} for item in stitching}
            saved = save_measurement_sets(store, invoice.customer_id, sets)
            for item in stitching:
                row = saved.get(schema_for(item.clothing_type).garment_type)
                if row and row.get("id") is not None:
                    measurement_ids[item.id] = str(row["id"])

        rows = build_order_item_rows(invoice.id, invoice.items, measurement_ids)
        store.insert_order_items(invoice.id, rows)
    except PersistenceRejected as e:
        logger.error("Items of order %s not stored: %s", invoice.id, e.message)
        raise PartialPersistence(invoice.id, invoice, e.message) from e


def submit_invoice(
        invoice: Invoice,
        store: OrderStore,
        *,
        created_by: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
        max_attempts: int = MAX_SUBMIT_ATTEMPTS,
) -> Invoice:
    """
    Persist a draft: orders row first, then measurements + order_items.

    Returns the persisted invoice (id, created_at, status SENT; the invoice
    number may differ from the draft's after a collision retry).

    Raises:
      ValidationFailed     - no customer / no items; nothing was sent
      PersistenceRejected  - header refused; nothing was stored
      PartialPersistence   - header stored, items not; call retry_order_items()
                             with `error.invoice` instead of submitting again
    """
    _check_submittable(invoice)

    persisted = _insert_header(invoice, store, created_by, clock, max_attempts)
    logger.info("Stored order %s as %s", persisted.invoice_number, persisted.id)

    _insert_items(persisted, store)
    logger.info("Stored %d items for order %s", len(persisted.items), persisted.id)
    return persisted


def retry_order_items(invoice: Invoice, store: OrderStore) -> Invoice:
    """Second attempt at the item insert for an invoice whose header is stored."""
    if invoice.id is None:
        raise ValidationFailed("Invoice has no stored order to attach items to")
    _insert_items(invoice, store)
    return invoice


# ---------------------------------------------------------------------------
# Saved bills
# ---------------------------------------------------------------------------

# orders.status that counts as settled on the bill list.
PAID_ORDER_STATUS = "delivered"


def _as_text(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def line_item_from_row(row: Mapping[str, Any], measurement_payload: Optional[Mapping[str, Any]] = None) -> LineItem:
    """
    Rebuild a LineItem from an order_items row.

    For stitching items the garment is picked out of the linked measurements
    row by the item description; a shared kurta_pajama row holds both sets.
    """
    kind = ItemKind(row.get("item_type") or ItemKind.READY_MADE.value)
    clothing_type = None
    measurements = None

    if kind == ItemKind.STITCHING:
        sets = garment_sets(measurement_payload)
        guess = normalize_garment_name(row.get("description")) or normalize_garment_name(row.get("clothing_type"))
        if guess in sets:
            clothing_type, values = guess, sets[guess]
        elif sets:
            clothing_type, values = next(iter(sets.items()))
        else:
            clothing_type, values = guess or DEFAULT_GARMENT_TYPE, {}
        measurements = {k: _as_text(v) for k, v in values.items()}

    return LineItem(
        id=str(row["id"]),
        kind=kind,
        description=row.get("description") or "",
        quantity=int(row.get("quantity") or 1),
        unit_price=as_money(row.get("unit_price") or 0),
        hsn_code=row.get("hsn_code"),
        clothing_type=clothing_type,
        measurements=measurements,
    )


def invoice_from_order_row(
        row: Mapping[str, Any],
        item_rows: Iterable[Mapping[str, Any]] = (),
        measurement_rows: Iterable[Mapping[str, Any]] = (),
        discount_rate=DEFAULT_DISCOUNT_RATE,
) -> Invoice:
    """
    Saved orders row (with its embedded `customer`) -> Invoice.

    Without item rows (the bill list) the stored total is all there is:
    subtotal and total both carry it and no discount is shown. With item rows
    (reprint) the totals are computed from them at `discount_rate`.

    Status is PAID once the order is delivered, otherwise SENT.
    """
    customer_row = row.get("customer") or {}
    customer = Customer(
        id=str(customer_row.get("id") or row.get("customer_id") or ""),
        name=customer_row.get("name") or "",
        mobile=customer_row.get("mobile") or "",
        email=customer_row.get("email"),
        address=customer_row.get("address"),
    )

    payloads = {str(m["id"]): m.get("measurements") for m in measurement_rows}
    items = tuple(
        line_item_from_row(r, payloads.get(str(r.get("measurement_id"))))
        for r in item_rows
    )

    stored_total = as_money(row.get("total_amount") or 0)
    if items:
        rate = check_discount_rate(discount_rate)
        totals = compute_totals(items, rate)
        if totals.total_amount != stored_total:
            logger.warning(
                "Order %s: stored total %s differs from item total %s",
                row.get("order_number"),
                stored_total,
                totals.total_amount,
            )
    else:
        rate = Decimal("0")
        totals = OrderTotals(subtotal=stored_total, discount_amount=Decimal("0"), total_amount=stored_total)

    due_date = row.get("due_date")
    return Invoice(
        invoice_number=row.get("order_number") or "",
        customer=customer,
        items=items,
        subtotal=totals.subtotal,
        discount_rate=rate,
        discount_amount=totals.discount_amount,
        total_amount=totals.total_amount,
        status=InvoiceStatus.PAID if row.get("status") == PAID_ORDER_STATUS else InvoiceStatus.SENT,
        id=str(row["id"]),
        created_at=_parse_created_at(row.get("created_at")),
        due_date=date.fromisoformat(due_date) if isinstance(due_date, str) and due_date else due_date,
        notes=row.get("notes"),
    )


def bill_stats(invoices: Iterable[Invoice]) -> BillStats:
    total_bills = 0
    total_amount = Decimal("0")
    paid_bills = 0
    for invoice in invoices:
        total_bills += 1
        total_amount += invoice.total_amount
        if invoice.status == InvoiceStatus.PAID:
            paid_bills += 1
    return BillStats(
        total_bills=total_bills,
        total_amount=total_amount,
        paid_bills=paid_bills,
        pending_bills=total_bills - paid_bills,
    )
