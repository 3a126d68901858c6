"""Tests for services.line_item_service: building and editing line items."""

from __future__ import annotations

from decimal import Decimal

import pytest

from domain.errors import MeasurementsIncomplete, UnknownGarmentType, ValidationFailed
from domain.models import ItemKind
from services.line_item_service import (
    add_ready_made,
    add_stitching,
    remove,
    set_quantity,
    set_unit_price,
)


class TestAddReadyMade:
    def test_builds_item(self):
        item = add_ready_made("Cotton Shirt", 2, 500, hsn_code="6205")
        assert item.kind == ItemKind.READY_MADE
        assert item.total_price == Decimal("1000")
        assert item.hsn_code == "6205"
        assert item.clothing_type is None
        assert item.measurements is None

    def test_ids_are_unique(self):
        assert add_ready_made("A", 1, 10).id != add_ready_made("A", 1, 10).id

    def test_explicit_id(self):
        assert add_ready_made("A", 1, 10, item_id="fixed").id == "fixed"

    def test_blank_hsn_stored_as_none(self):
        assert add_ready_made("A", 1, 10, hsn_code="").hsn_code is None

    @pytest.mark.parametrize("description", ["", "   ", None])
    def test_empty_description(self, description):
        with pytest.raises(ValidationFailed) as exc:
            add_ready_made(description, 1, 100)
        assert exc.value.field == "description"

    @pytest.mark.parametrize("price", [0, -5, "0.00", "abc"])
    def test_non_positive_or_bad_price(self, price):
        with pytest.raises(ValidationFailed) as exc:
            add_ready_made("Cotton Shirt", 1, price)
        assert exc.value.field == "unit_price"

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_bad_quantity(self, quantity):
        with pytest.raises(ValidationFailed) as exc:
            add_ready_made("Cotton Shirt", quantity, 100)
        assert exc.value.field == "quantity"


class TestAddStitching:
    def test_builds_item(self, kurta_measurements):
        item = add_stitching("Kurta stitching", 1, 800, "kurta", kurta_measurements)
        assert item.kind == ItemKind.STITCHING
        assert item.clothing_type == "kurta"
        assert dict(item.measurements) == kurta_measurements
        assert item.total_price == Decimal("800")

    def test_garment_label_is_normalized(self, kurta_measurements):
        item = add_stitching("Kurta stitching", 1, 800, "Kurta", kurta_measurements)
        assert item.clothing_type == "kurta"

    def test_measurements_trimmed_and_filtered(self):
        values = {"chest": " 40 ", "shoulder": "18", "kurta_length": "42", "note": "rush"}
        item = add_stitching("Kurta", 1, 800, "kurta", values)
        assert list(item.measurements) == ["chest", "shoulder", "kurta_length"]
        assert item.measurements["chest"] == "40"

    def test_missing_waist_on_pant(self, pant_measurements):
        del pant_measurements["waist"]
        with pytest.raises(MeasurementsIncomplete) as exc:
            add_stitching("Pant", 1, 600, "pant", pant_measurements)
        assert exc.value.missing_labels == ["WAIST"]

    def test_basic_checks_run_first(self):
        with pytest.raises(ValidationFailed):
            add_stitching("", 1, 600, "pant", {})

    def test_unknown_garment_rejected(self, kurta_measurements):
        with pytest.raises(UnknownGarmentType):
            add_stitching("Lehenga", 1, 900, "lehnga", kurta_measurements)

    def test_every_field_required(self, pant_measurements):
        add_stitching("Pant", 1, 600, "pant", pant_measurements)
        for name in pant_measurements:
            partial = {k: v for k, v in pant_measurements.items() if k != name}
            with pytest.raises(MeasurementsIncomplete) as exc:
                add_stitching("Pant", 1, 600, "pant", partial)
            assert len(exc.value.missing_labels) == 1


class TestSetQuantity:
    def test_returns_new_item_with_new_total(self):
        item = add_ready_made("Cotton Shirt", 2, 500)
        updated = set_quantity(item, 5)
        assert updated.total_price == Decimal("2500")
        assert item.quantity == 2
        assert updated.id == item.id

    def test_rejects_zero(self):
        with pytest.raises(ValidationFailed):
            set_quantity(add_ready_made("Cotton Shirt", 2, 500), 0)

    def test_keeps_stitching_data(self, kurta_measurements):
        item = add_stitching("Kurta", 1, 800, "kurta", kurta_measurements)
        updated = set_quantity(item, 2)
        assert updated.measurements == item.measurements
        assert updated.total_price == Decimal("1600")


class TestSetUnitPrice:
    def test_rederives_total(self):
        item = set_unit_price(add_ready_made("Cotton Shirt", 3, 500), "450.50")
        assert item.total_price == Decimal("1351.50")

    def test_rejects_zero(self):
        with pytest.raises(ValidationFailed):
            set_unit_price(add_ready_made("Cotton Shirt", 3, 500), 0)


class TestRemove:
    def test_removes_matching_id(self):
        a = add_ready_made("A", 1, 10)
        b = add_ready_made("B", 1, 20)
        assert remove([a, b], a.id) == [b]

    def test_unknown_id_is_noop(self):
        items = [add_ready_made("A", 1, 10), add_ready_made("B", 1, 20)]
        assert remove(items, "missing") == items

    def test_empty_list(self):
        assert remove([], "anything") == []
