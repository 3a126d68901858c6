"""Tests for services.totals_service: subtotal / discount / total."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import pytest

from domain.errors import ValidationFailed
from services.line_item_service import add_ready_made, remove, set_quantity
from services.totals_service import DEFAULT_DISCOUNT_RATE, compute_totals


class TestComputeTotals:
    def test_default_rate_is_ten_percent(self):
        assert DEFAULT_DISCOUNT_RATE == 10

    def test_basic(self):
        items = [add_ready_made("Cotton Shirt", 2, 500), add_ready_made("Tie", 1, 800)]
        totals = compute_totals(items)
        assert totals.subtotal == Decimal("1800")
        assert totals.discount_amount == Decimal("180")
        assert totals.total_amount == Decimal("1620")

    def test_empty(self):
        totals = compute_totals([])
        assert (totals.subtotal, totals.discount_amount, totals.total_amount) == (0, 0, 0)

    def test_zero_rate(self):
        totals = compute_totals([add_ready_made("A", 1, 999)], 0)
        assert totals.discount_amount == 0
        assert totals.total_amount == Decimal("999")

    def test_discount_rounded_to_paisa(self):
        totals = compute_totals([add_ready_made("A", 1, "10.05")], 10)
        assert totals.discount_amount == Decimal("1.01")
        assert totals.total_amount == Decimal("9.04")

    @pytest.mark.parametrize("rate", [-1, 101, "x"])
    def test_bad_rate(self, rate):
        with pytest.raises(ValidationFailed):
            compute_totals([], rate)


class TestInvariantsAcrossEdits:
    def test_totals_track_every_edit(self):
        rate = Decimal("10")
        items = []

        def check():
            totals = compute_totals(items, rate)
            assert totals.subtotal == sum((i.total_price for i in items), Decimal("0"))
            assert totals.discount_amount == (totals.subtotal * rate / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            assert totals.total_amount == totals.subtotal - totals.discount_amount
            for i in items:
                assert i.total_price == i.quantity * i.unit_price

        items.append(add_ready_made("A", 2, "123.45"))
        check()
        items.append(add_ready_made("B", 1, 77))
        check()
        items[0] = set_quantity(items[0], 7)
        check()
        items = remove(items, items[1].id)
        check()
        items = remove(items, "not-there")
        check()
