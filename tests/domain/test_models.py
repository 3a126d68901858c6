"""Tests for domain.models: LineItem derived total and value semantics."""

from __future__ import annotations

import dataclasses
from decimal import Decimal

import pytest

from domain.errors import ValidationFailed
from domain.models import ItemKind, LineItem, as_money


def _item(**overrides) -> LineItem:
    values = dict(id="i-1", kind=ItemKind.READY_MADE, description="Cotton Shirt", quantity=2, unit_price=500)
    values.update(overrides)
    return LineItem(**values)


class TestAsMoney:
    def test_float_goes_through_str(self):
        assert as_money(0.1) == Decimal("0.1")

    def test_decimal_passthrough(self):
        d = Decimal("12.50")
        assert as_money(d) is d


class TestLineItemTotal:
    def test_total_derived_on_init(self):
        assert _item().total_price == Decimal("1000")

    def test_total_cannot_be_passed(self):
        with pytest.raises(TypeError):
            LineItem(
                id="i-1",
                kind=ItemKind.READY_MADE,
                description="x",
                quantity=1,
                unit_price=10,
                total_price=99,
            )

    def test_replace_rederives_total(self):
        item = dataclasses.replace(_item(), quantity=3)
        assert item.total_price == Decimal("1500")

    def test_fractional_price(self):
        assert _item(quantity=3, unit_price="99.99").total_price == Decimal("299.97")

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            _item().quantity = 5


class TestMeasurements:
    def test_measurements_are_read_only(self):
        item = _item(kind=ItemKind.STITCHING, clothing_type="kurta", measurements={"chest": "40"})
        with pytest.raises(TypeError):
            item.measurements["chest"] = "42"

    def test_source_dict_changes_do_not_leak(self):
        source = {"chest": "40"}
        item = _item(kind=ItemKind.STITCHING, clothing_type="kurta", measurements=source)
        source["chest"] = "44"
        assert item.measurements["chest"] == "40"


class TestLineItemChecks:
    @pytest.mark.parametrize("quantity", [0, -1, True, 1.5, "2"])
    def test_quantity_must_be_positive_int(self, quantity):
        with pytest.raises(ValidationFailed) as exc:
            _item(quantity=quantity)
        assert exc.value.field == "quantity"

    def test_replace_with_zero_quantity(self):
        with pytest.raises(ValidationFailed):
            dataclasses.replace(_item(), quantity=0)

    def test_negative_price(self):
        with pytest.raises(ValidationFailed) as exc:
            _item(unit_price="-1")
        assert exc.value.field == "unit_price"

    def test_ready_made_with_clothing_type(self):
        with pytest.raises(ValidationFailed):
            _item(clothing_type="shirt")

    def test_ready_made_with_measurements(self):
        with pytest.raises(ValidationFailed):
            _item(measurements={"chest": "40"})

    def test_stitching_without_measurements(self):
        with pytest.raises(ValidationFailed):
            _item(kind=ItemKind.STITCHING, clothing_type="kurta")

    def test_stitching_without_clothing_type(self):
        with pytest.raises(ValidationFailed):
            _item(kind=ItemKind.STITCHING, measurements={"chest": "40"})
