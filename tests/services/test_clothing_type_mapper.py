"""Tests for services.clothing_type_mapper: garment type -> DB clothing_type enum."""

from __future__ import annotations

import pytest

from domain.garments import list_types
from services.clothing_type_mapper import (
    STORAGE_CLOTHING_TYPES,
    to_storage_enum,
    unmapped_garment_types,
)


class TestToStorageEnum:
    @pytest.mark.parametrize(
        "garment, expected",
        [
            ("shirt", "shirt"),
            ("pant", "pant"),
            ("kurta", "kurta_pajama"),
            ("pajama", "kurta_pajama"),
            ("short_kurta", "kurta_pajama"),
            ("coat", "suit"),
            ("bandi", "suit"),
            ("westcot", "suit"),
            ("blouse", "blouse"),
            ("saree_blouse", "saree_blouse"),
        ],
    )
    def test_explicit_mappings(self, garment, expected):
        assert to_storage_enum(garment) == expected

    def test_free_form_names_are_normalized(self):
        assert to_storage_enum("Short Kurta") == "kurta_pajama"
        assert to_storage_enum("WIZAR") == "pant"

    def test_storage_values_pass_through(self):
        for value in STORAGE_CLOTHING_TYPES:
            assert to_storage_enum(value) == value

    @pytest.mark.parametrize(
        "label, expected",
        [("Suit", "suit"), ("SUIT ", "suit"), ("Kurta Pajama", "kurta_pajama"), ("Saree-Blouse", "saree_blouse")],
    )
    def test_storage_values_in_any_case(self, label, expected):
        assert to_storage_enum(label) == expected

    @pytest.mark.parametrize("raw", ["lehenga", "", "   ", "🧵", None, 42])
    def test_total_with_shirt_fallback(self, raw):
        assert to_storage_enum(raw) == "shirt"


class TestRegistryCoverage:
    def test_every_registry_type_has_explicit_mapping(self):
        """A type without an entry would be stored as shirt while printing as itself."""
        assert unmapped_garment_types() == []

    def test_every_result_is_in_closed_set(self):
        for garment in list_types():
            assert to_storage_enum(garment) in STORAGE_CLOTHING_TYPES
