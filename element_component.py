import streamlit as st
import pandas as pd

from data_integrator import SupabaseOrderStore
from domain.errors import PartialPersistence, PersistenceRejected, ValidationFailed
from services.order_service import submit_invoice
from utils.formatting import format_money


@st.dialog("Confirm")
def confirmation_dialog_submit_invoice(invoice, state_name):
    """
    Show the bill summary and submit it on "Yes".

    On success st.session_state[state_name] holds the persisted invoice.
    A header-only save lands in st.session_state["partial_invoice"] so the
    page can offer to retry the items.
    """
    df = pd.DataFrame(
        [
            ("Invoice", invoice.invoice_number),
            ("Customer", invoice.customer.name),
            ("Items", str(len(invoice.items))),
            ("Subtotal", format_money(invoice.subtotal)),
            ("Discount", format_money(invoice.discount_amount)),
            ("Total", format_money(invoice.total_amount)),
        ],
        columns=["Key", "Value"],
    )
    st.dataframe(df, hide_index=True)

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Yes", type="primary", key="confirm_yes"):
            try:
                persisted = submit_invoice(invoice, SupabaseOrderStore())
            except PartialPersistence as e:
                st.session_state["partial_invoice"] = e.invoice
                st.session_state.pop("invoice", None)
                st.error(f"Order saved without its items: {e.message}")
                return
            except PersistenceRejected as e:
                st.error(f"Order was not saved: {e.message}")
                return
            except ValidationFailed as e:
                st.error(e.message)
                return

            st.session_state[state_name] = persisted
            st.session_state.pop("invoice", None)
            st.rerun()
    with col_no:
        if st.button("No"):
            st.rerun()
