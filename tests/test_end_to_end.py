"""Tests for the full billing flow: compose, submit and print one order."""

from __future__ import annotations

from decimal import Decimal

import pytest

from domain.errors import MeasurementsIncomplete, PartialPersistence
from services import order_service
from services.doc_service import build_bill_doc
from services.document_projector import project
from services.line_item_service import add_ready_made, add_stitching


class TestRaviKumarOrder:
    def test_fabric_and_kurta_stitching(self, ravi, fixed_now, kurta_measurements, make_store):
        invoice = order_service.start_invoice(ravi, fixed_now)
        invoice = order_service.add_item(invoice, add_ready_made("Cotton Shirt", 2, 500))
        invoice = order_service.add_item(
            invoice, add_stitching("Kurta stitching", 1, 800, "kurta", kurta_measurements)
        )

        assert invoice.subtotal == Decimal("1800")
        assert invoice.discount_amount == Decimal("180")
        assert invoice.total_amount == Decimal("1620")

        store = make_store()
        persisted = order_service.submit_invoice(invoice, store)

        assert persisted.invoice_number == "INV-202510-815123"
        assert store.orders[0]["order_number"] == "INV-202510-815123"
        assert store.orders[0]["total_amount"] == 1620.0
        stitching_rows = [r for r in store.items.values() if r["item_type"] == "stitching"]
        assert [r["clothing_type"] for r in stitching_rows] == ["kurta_pajama"]

        document = project(persisted, fixed_now)
        assert document.invoice_date == "19/10/2025"
        assert document.totals.total == "₹1,620.00"
        assert [len(s.rows) for s in document.sections] == [1, 1]

        text = "\n".join(p.text for p in build_bill_doc(document).paragraphs)
        assert "Total Amount: ₹1,620.00" in text

    def test_incomplete_kurta_is_rejected(self, ravi, fixed_now):
        invoice = order_service.start_invoice(ravi, fixed_now)
        invoice = order_service.add_item(invoice, add_ready_made("Cotton Shirt", 2, 500))

        with pytest.raises(MeasurementsIncomplete) as exc:
            add_stitching("Kurta stitching", 1, 800, "kurta", {"chest": "40"})
        assert exc.value.missing_labels == ["SHOULDER", "KURTA LENGTH"]

        assert len(invoice.items) == 1
        assert invoice.subtotal == Decimal("1000")
        assert invoice.total_amount == Decimal("900")

    def test_retry_after_partial_save_keeps_one_order(self, ravi, fixed_now, kurta_measurements, make_store):
        invoice = order_service.start_invoice(ravi, fixed_now)
        invoice = order_service.add_item(
            invoice, add_stitching("Kurta stitching", 1, 800, "kurta", kurta_measurements)
        )
        store = make_store(fail_item_inserts=1)

        with pytest.raises(PartialPersistence) as exc:
            order_service.submit_invoice(invoice, store)
        order_service.retry_order_items(exc.value.invoice, store)

        assert len(store.orders) == 1
        assert len(store.items) == 1
        assert list(store.measurements) == [("cust-1", "kurta_pajama")]
