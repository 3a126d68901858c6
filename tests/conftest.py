"""Shared fixtures: a customer, a fixed clock and an in-memory order store."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from domain.errors import InvoiceNumberCollision, PersistenceRejected
from domain.models import Customer

# 2025-10-19 10:30:15.123 UTC -> epoch millis 1760869815123
FIXED_NOW = datetime(2025, 10, 19, 10, 30, 15, 123000, tzinfo=timezone.utc)


class FakeOrderStore:
    """In-memory OrderStore with switches for the failure cases."""

    def __init__(self, taken_numbers=(), reject_header=None, fail_item_inserts=0, fail_measurements=False):
        self.taken_numbers = set(taken_numbers)
        self.reject_header = reject_header
        self.fail_item_inserts = fail_item_inserts
        self.fail_measurements = fail_measurements

        self.orders = []
        self.items = {}
        self.measurements = {}
        self.header_calls = 0
        self.item_calls = 0
        self.measurement_calls = 0

    def insert_order(self, header):
        self.header_calls += 1
        if self.reject_header:
            raise PersistenceRejected(self.reject_header)
        if header["order_number"] in self.taken_numbers:
            raise InvoiceNumberCollision(header["order_number"])

        row = {**header, "id": f"order-{len(self.orders) + 1}", "created_at": "2025-10-19T10:30:16+00:00"}
        self.orders.append(row)
        self.taken_numbers.add(header["order_number"])
        return row

    def insert_order_items(self, order_id, items):
        self.item_calls += 1
        if self.fail_item_inserts > 0:
            self.fail_item_inserts -= 1
            raise PersistenceRejected("order_items insert timed out")
        for row in items:
            self.items[row["id"]] = {**row, "order_id": order_id}

    def upsert_measurement(self, customer_id, clothing_type, values):
        self.measurement_calls += 1
        if self.fail_measurements:
            raise PersistenceRejected("measurements table unavailable")
        row = {
            "id": f"m-{customer_id}-{clothing_type}",
            "customer_id": customer_id,
            "clothing_type": clothing_type,
            "measurements": dict(values),
        }
        self.measurements[(customer_id, clothing_type)] = row
        return row


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def ravi() -> Customer:
    return Customer(id="cust-1", name="Ravi Kumar", mobile="9876543210")


@pytest.fixture
def make_store():
    return FakeOrderStore


@pytest.fixture
def kurta_measurements() -> dict:
    return {"chest": "40", "shoulder": "18", "kurta_length": "42"}


@pytest.fixture
def pant_measurements() -> dict:
    return {
        "length": "40",
        "waist": "32",
        "hip": "38",
        "high": "11",
        "thigh": "23",
        "knee": "17",
        "mohari": "14",
    }


@pytest.fixture
def pajama_measurements() -> dict:
    return {
        "waist": "34",
        "length": "40",
        "bottom": "16",
        "fitting_style": "Loose",
        "color": "White",
        "cutting_master": "Rafiq",
        "worker": "Sunil",
        "others": "-",
    }
