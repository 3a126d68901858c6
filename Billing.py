import logging
from datetime import datetime, timezone

import pandas as pd
import streamlit as st

from data_integrator import (
    SupabaseOrderStore,
    fetch_measurements,
    fetch_order_items,
    fetch_orders,
    query_customers,
)
from domain.errors import MeasurementsIncomplete, PartialPersistence, ValidationFailed
from domain.garments import list_types, schema_for
from domain.models import IST, InvoiceStatus, ItemKind
from element_component import confirmation_dialog_submit_invoice
from services import order_service
from services.document_projector import project
from services.doc_service import bill_doc_bytes
from services.line_item_service import add_ready_made, add_stitching
from utils.formatting import format_money, format_rate
from utils.settings import get_bill_template_path, get_business_profile, get_discount_rate

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# -----------------------------------------------------------------------------
# Page config
# -----------------------------------------------------------------------------
st.set_page_config(page_title="Billing", page_icon="🧵")
st.title("🧵 Billing & Invoice")

if "submitted_invoice" not in st.session_state:
    st.session_state["submitted_invoice"] = None

# -----------------------------------------------------------------------------
# 1) Customer
# -----------------------------------------------------------------------------
search = st.text_input("Search customer", placeholder="Name or mobile")
ok, msg, customers = query_customers(search)
if not ok:
    st.error(msg)
    st.stop()

if not customers:
    st.warning("No customers found.")
    st.stop()

customer = st.selectbox(
    "Customer",
    options=customers,
    format_func=lambda c: f"{c.name} ({c.mobile})",
)

# A different customer starts a new bill
invoice = st.session_state.get("invoice")
if invoice is None or invoice.customer.id != customer.id or invoice.id is not None:
    invoice = order_service.start_invoice(
        customer,
        now=datetime.now(timezone.utc),
        discount_rate=get_discount_rate(),
    )
    st.session_state["invoice"] = invoice

st.divider()

# -----------------------------------------------------------------------------
# 2) Add item
# -----------------------------------------------------------------------------
st.subheader("Add Item")

kind = st.radio(
    "Type",
    options=[ItemKind.READY_MADE, ItemKind.STITCHING],
    format_func=lambda k: "Ready Made" if k == ItemKind.READY_MADE else "Stitching",
    horizontal=True,
)

col_desc, col_qty, col_price = st.columns([2, 1, 1])
with col_desc:
    description = st.text_input("Description")
with col_qty:
    quantity = st.number_input("Qty", min_value=1, step=1, value=1)
with col_price:
    unit_price = st.number_input("Rate", min_value=0.0, step=50.0, value=0.0)
hsn_code = st.text_input("HSN Code")

measurements = {}
garment_type = None
if kind == ItemKind.STITCHING:
    garment_type = st.selectbox("Garment", options=list_types())
    for section in schema_for(garment_type).sections:
        st.markdown(f"**{section.title}**")
        cols = st.columns(3)
        for i, f in enumerate(section.fields):
            with cols[i % 3]:
                measurements[f.name] = st.text_input(
                    f.label if f.unit == "text" else f"{f.label} (in)",
                    key=f"m_{garment_type}_{f.name}",
                )

if st.button("➕ Add Item"):
    try:
        if kind == ItemKind.STITCHING:
            item = add_stitching(description, int(quantity), unit_price, garment_type, measurements, hsn_code)
        else:
            item = add_ready_made(description, int(quantity), unit_price, hsn_code)
        st.session_state["invoice"] = order_service.add_item(invoice, item)
        st.rerun()
    except MeasurementsIncomplete as e:
        st.error("Please fill: " + ", ".join(e.missing_labels))
    except ValidationFailed as e:
        st.error(e.message)

st.divider()

# -----------------------------------------------------------------------------
# 3) Items + totals
# -----------------------------------------------------------------------------
invoice = st.session_state["invoice"]
st.subheader(f"Items – {invoice.invoice_number}")

if invoice.items:
    df_items = pd.DataFrame(
        [
            {
                "Description": item.description,
                "Type": "Ready Made" if item.kind == ItemKind.READY_MADE else f"Stitching ({item.clothing_type})",
                "Qty": item.quantity,
                "Rate": format_money(item.unit_price),
                "Amount": format_money(item.total_price),
            }
            for item in invoice.items
        ]
    )
    st.dataframe(df_items, width="stretch", hide_index=True)

    labels = {f"{i + 1}. {item.description}": item.id for i, item in enumerate(invoice.items)}
    col_pick, col_new_qty, col_actions = st.columns([2, 1, 1])
    with col_pick:
        picked = st.selectbox("Item", options=list(labels.keys()))
    with col_new_qty:
        new_qty = st.number_input("New qty", min_value=1, step=1, value=1, key="new_qty")
    with col_actions:
        if st.button("Update qty"):
            st.session_state["invoice"] = order_service.update_item_quantity(invoice, labels[picked], int(new_qty))
            st.rerun()
        if st.button("🗑️ Remove"):
            st.session_state["invoice"] = order_service.remove_item(invoice, labels[picked])
            st.rerun()
else:
    st.info("No items yet.")

col_sub, col_disc, col_total = st.columns(3)
col_sub.metric("Subtotal", format_money(invoice.subtotal))
col_disc.metric(f"Discount ({format_rate(invoice.discount_rate)}%)", format_money(invoice.discount_amount))
col_total.metric("Total", format_money(invoice.total_amount))

due_date = st.date_input("Delivery date", value=invoice.due_date)
notes = st.text_area("Notes", value=invoice.notes or "")
if due_date != invoice.due_date or (notes or None) != invoice.notes:
    invoice = order_service.set_details(invoice, due_date=due_date, notes=notes)
    st.session_state["invoice"] = invoice

st.divider()

# -----------------------------------------------------------------------------
# 4) Submit / retry / download
# -----------------------------------------------------------------------------
if st.button("Save Bill", type="primary", disabled=not invoice.items):
    confirmation_dialog_submit_invoice(invoice, "submitted_invoice")

partial = st.session_state.get("partial_invoice")
if partial is not None:
    st.warning(f"Order {partial.invoice_number} was saved without its items.")
    if st.button("Retry saving items"):
        try:
            st.session_state["submitted_invoice"] = order_service.retry_order_items(partial, SupabaseOrderStore())
            st.session_state["partial_invoice"] = None
            st.rerun()
        except PartialPersistence as e:
            st.error(e.message)

submitted = st.session_state.get("submitted_invoice")
if submitted is not None:
    st.success(f"Invoice {submitted.invoice_number} saved.")
    if st.button("New bill"):
        st.session_state["submitted_invoice"] = None
        st.rerun()

with_barcode = st.checkbox("Print barcode", value=False)

to_print = submitted or invoice
if to_print.items:
    document = project(to_print, now=datetime.now(timezone.utc), business=get_business_profile())
    st.download_button(
        "Download bill (.docx)",
        data=bill_doc_bytes(document, template_path=get_bill_template_path(), with_barcode=with_barcode),
        file_name=f"{to_print.invoice_number}.docx",
        mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )

st.divider()

# -----------------------------------------------------------------------------
# 5) Saved bills
# -----------------------------------------------------------------------------
st.subheader("Saved Bills")

if st.button("🔄 Refresh"):
    st.rerun()

ok, msg, order_rows = fetch_orders()
if not ok:
    st.error(msg)
    st.stop()

saved = [order_service.invoice_from_order_row(row) for row in order_rows]
stats = order_service.bill_stats(saved)

col_bills, col_amount, col_paid, col_pending = st.columns(4)
col_bills.metric("Total Bills", stats.total_bills)
col_amount.metric("Total Amount", format_money(stats.total_amount))
col_paid.metric("Paid", stats.paid_bills)
col_pending.metric("Pending", stats.pending_bills)

if not saved:
    st.info("No saved bills yet.")
    st.stop()

df_bills = pd.DataFrame(
    [
        {
            "Invoice": inv.invoice_number,
            "Customer": inv.customer.name,
            "Date": inv.created_at.astimezone(IST).strftime("%d/%m/%Y") if inv.created_at else "",
            "Amount": format_money(inv.total_amount),
            "Status": "Paid" if inv.status == InvoiceStatus.PAID else "Pending",
        }
        for inv in saved
    ]
)
st.dataframe(df_bills, width="stretch", hide_index=True)

rows_by_number = {row["order_number"]: row for row in order_rows}
reprint_number = st.selectbox("Reprint bill", options=list(rows_by_number.keys()))
order_row = rows_by_number[reprint_number]

ok, msg, item_rows = fetch_order_items(order_row["id"])
if not ok:
    st.error(msg)
    st.stop()

ok, msg, measurement_rows = fetch_measurements([r.get("measurement_id") for r in item_rows])
if not ok:
    st.error(msg)
    st.stop()

reprint = order_service.invoice_from_order_row(
    order_row,
    item_rows,
    measurement_rows,
    discount_rate=get_discount_rate(),
)
st.download_button(
    "Reprint bill (.docx)",
    data=bill_doc_bytes(
        project(reprint, now=datetime.now(timezone.utc), business=get_business_profile()),
        template_path=get_bill_template_path(),
        with_barcode=with_barcode,
    ),
    file_name=f"{reprint.invoice_number}.docx",
    mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    key="reprint_download",
)
