import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from supabase import Client

from domain.errors import InvoiceNumberCollision, PersistenceRejected
from domain.models import Customer
from supabase_client import get_supabase_client
from utils.settings import get_schema

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def _table(table_name: str, client: Optional[Client] = None):
    client = client or get_supabase_client()
    return client.schema(get_schema()).table(table_name)


def _describe(e: Exception) -> str:
    """'23505: duplicate key value ...' when PostgREST gave a code, else str(e)."""
    code = getattr(e, "code", None)
    message = getattr(e, "message", None) or str(e)
    if code:
        return f"{code}: {message}"
    return message


def is_exist(table_name: str, col_name: str, val, client: Optional[Client] = None) -> bool:
    response = (
        _table(table_name, client)
        .select("id")
        .eq(col_name, val)
        .limit(1)
        .execute()
    )
    return len(response.data) != 0


def invoice_number_exists(invoice_number: str, client: Optional[Client] = None) -> bool:
    return is_exist("orders", "order_number", invoice_number, client)


def insert_order(header: Dict[str, Any], client: Optional[Client] = None) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Insert one orders row.
    Returns (ok, message, inserted_row); inserted_row carries id + created_at.
    """
    try:
        resp = (
            _table("orders", client)
            .insert(header)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Insert order failed: {resp.error}", None

        if not resp.data:
            return False, "Insert order failed: no data returned", None

        return True, "Inserted", resp.data[0]

    except Exception as e:
        return False, _describe(e), None


def insert_order_items(
        order_id: str,
        items: List[Dict[str, Any]],
        client: Optional[Client] = None,
) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """
    Write order_items rows for `order_id`.

    Upserts on the row id, so calling this again after a failure does not
    duplicate items.
    """
    if not items:
        return True, "No items", []

    rows = [{**item, "order_id": order_id} for item in items]

    try:
        resp = (
            _table("order_items", client)
            .upsert(rows, on_conflict="id")
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Insert order items failed: {resp.error}", []

        return True, f"Stored {len(rows)} items", resp.data or []

    except Exception as e:
        return False, _describe(e), []


def upsert_measurement(
        customer_id: str,
        clothing_type: str,
        values: Dict[str, Any],
        client: Optional[Client] = None,
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    One measurements row per (customer_id, clothing_type); a later save
    overwrites the earlier one.
    """
    payload = {
        "customer_id": customer_id,
        "clothing_type": clothing_type,
        "measurements": values,
    }

    try:
        resp = (
            _table("measurements", client)
            .upsert(payload, on_conflict="customer_id,clothing_type")
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Upsert measurement failed: {resp.error}", None

        inserted = resp.data[0] if resp.data else None
        return True, "Upserted", inserted

    except Exception as e:
        return False, _describe(e), None


def query_customers(
        search: str = "",
        limit: int = 50,
        client: Optional[Client] = None,
) -> Tuple[bool, str, List[Customer]]:
    """
    Customers whose name or mobile contains `search` (case-insensitive),
    ordered by name. Empty search returns the first `limit` customers.
    """
    try:
        query = _table("customers", client).select("id, name, mobile, email, address")

        search = (search or "").strip()
        if search:
            # PostgREST or-filter values cannot contain ',' or '()'
            safe = search.replace(",", " ").replace("(", " ").replace(")", " ")
            query = query.or_(f"name.ilike.%{safe}%,mobile.ilike.%{safe}%")

        resp = query.order("name").limit(limit).execute()

        if getattr(resp, "error", None):
            return False, f"Fetch customers failed: {resp.error}", []

        customers = [
            Customer(
                id=str(row["id"]),
                name=row["name"],
                mobile=row.get("mobile") or "",
                email=row.get("email"),
                address=row.get("address"),
            )
            for row in (resp.data or [])
        ]
        return True, "Fetched", customers

    except Exception as e:
        return False, f"Unexpected error: {_describe(e)}", []


def fetch_orders(limit: int = 100, client: Optional[Client] = None) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """Latest orders with their customer embedded, newest first."""
    try:
        resp = (
            _table("orders", client)
            .select(
                """
                *,
                customer:customers(*)
                """
            )
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Fetch orders failed: {resp.error}", []

        return True, "Fetched", resp.data or []

    except Exception as e:
        return False, f"Unexpected error: {_describe(e)}", []


def fetch_order_items(order_id: str, client: Optional[Client] = None) -> Tuple[bool, str, List[Dict[str, Any]]]:
    try:
        resp = (
            _table("order_items", client)
            .select("*")
            .eq("order_id", order_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Fetch order items failed: {resp.error}", []

        return True, "Fetched", resp.data or []

    except Exception as e:
        return False, f"Unexpected error: {_describe(e)}", []


def fetch_measurements(ids: List[str], client: Optional[Client] = None) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """measurements rows by id; the ids come from order_items.measurement_id."""
    ids = list(dict.fromkeys(str(i) for i in ids if i))
    if not ids:
        return True, "Nothing to fetch", []

    try:
        resp = (
            _table("measurements", client)
            .select("*")
            .in_("id", ids)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Fetch measurements failed: {resp.error}", []

        return True, "Fetched", resp.data or []

    except Exception as e:
        return False, f"Unexpected error: {_describe(e)}", []


def subscribe_to_order_changes(
        callback: Callable[[Dict[str, Any]], None],
        client: Optional[Client] = None,
) -> Tuple[bool, str, Any]:
    """
    Call `callback(payload)` on any insert/update/delete of orders.
    Payloads are only a hint to re-fetch; nothing is merged from them.
    """
    try:
        client = client or get_supabase_client()
        channel = (
            client.channel("orders-changes")
            .on_postgres_changes(
                event="*",
                schema=get_schema(),
                table="orders",
                callback=callback,
            )
            .subscribe()
        )
        return True, "Subscribed", channel

    except Exception as e:
        logger.warning("Order change subscription failed: %s", e)
        return False, _describe(e), None


class SupabaseOrderStore:
    """
    OrderStore backed by the functions above. Turns their (ok, message, data)
    results into the billing errors the order service expects.
    """

    def __init__(self, client: Optional[Client] = None):
        self.client = client

    def insert_order(self, header: Dict[str, Any]) -> Dict[str, Any]:
        ok, msg, row = insert_order(header, self.client)
        if not ok:
            if msg.startswith(UNIQUE_VIOLATION) and "order_number" in msg:
                raise InvoiceNumberCollision(header["order_number"])
            raise PersistenceRejected(msg)
        return row

    def insert_order_items(self, order_id: str, items: List[Dict[str, Any]]) -> None:
        ok, msg, _ = insert_order_items(order_id, items, self.client)
        if not ok:
            raise PersistenceRejected(msg)

    def upsert_measurement(self, customer_id: str, clothing_type: str, values: Dict[str, Any]) -> Dict[str, Any]:
        ok, msg, row = upsert_measurement(customer_id, clothing_type, values, self.client)
        if not ok:
            raise PersistenceRejected(msg)
        return row or {}
