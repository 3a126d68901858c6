"""
Garment measurement schemas.

Each garment type maps to the ordered sections of measurement fields the
cutting master fills in for it. The table is plain data: adding a garment
type means adding an entry here (and one in
``services.clothing_type_mapper``), nothing else.

Usage
-----
::

    from domain.garments import schema_for, all_fields

    for f in all_fields(schema_for("Kurta")):
        print(f.name, f.label)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Union

from domain.errors import UnknownGarmentType
from domain.models import GarmentTypeSchema, MeasurementField, MeasurementSection

logger = logging.getLogger(__name__)

DEFAULT_GARMENT_TYPE = "shirt"


def _inch(name: str, label: str) -> MeasurementField:
    return MeasurementField(name=name, label=label, unit="inches")


def _text(name: str, label: str) -> MeasurementField:
    return MeasurementField(name=name, label=label, unit="text")


def _schema(garment_type: str, *sections: MeasurementSection) -> GarmentTypeSchema:
    seen = set()
    for section in sections:
        for f in section.fields:
            if f.name in seen:
                raise ValueError(f"Duplicate field {f.name!r} in {garment_type} schema")
            seen.add(f.name)
    return GarmentTypeSchema(garment_type=garment_type, sections=tuple(sections))


def _body(*fields: MeasurementField) -> MeasurementSection:
    return MeasurementSection(title="Body Measurements", fields=tuple(fields))


def _style(*fields: MeasurementField) -> MeasurementSection:
    return MeasurementSection(title="Style & Details", fields=tuple(fields))


def _production() -> MeasurementSection:
    """Who cuts and who stitches; recorded with the measurements."""
    return MeasurementSection(
        title="Production Details",
        fields=(
            _text("cutting_master", "CUTTING MASTER"),
            _text("worker", "WORKER"),
            _text("others", "OTHERS"),
        ),
    )


GARMENT_SCHEMAS: Mapping[str, GarmentTypeSchema] = MappingProxyType({
    "shirt": _schema(
        "shirt",
        _body(
            _inch("chest", "CHEST"),
            _inch("length", "LENGTH"),
            _inch("shoulder", "SHOULDER"),
            _inch("sleeve", "SLEEVE"),
            _inch("collar", "COLLAR"),
            _inch("waist", "WAIST"),
        ),
        _style(
            _text("fitting_style", "FITTING STYLE"),
            _text("pocket", "POCKET"),
            _text("color", "COLOR"),
        ),
        _production(),
    ),
    "pant": _schema(
        "pant",
        _body(
            _inch("length", "PANT LENGTH"),
            _inch("waist", "WAIST"),
            _inch("hip", "HIP"),
            _inch("high", "HIGH"),
            _inch("thigh", "THIGH"),
            _inch("knee", "KNEE"),
            _inch("mohari", "MOHARI"),
        ),
    ),
    "kurta": _schema(
        "kurta",
        _body(
            _inch("chest", "CHEST"),
            _inch("shoulder", "SHOULDER"),
            _inch("kurta_length", "KURTA LENGTH"),
        ),
    ),
    "short_kurta": _schema(
        "short_kurta",
        _body(
            _inch("chest", "CHEST"),
            _inch("shoulder", "SHOULDER"),
            _inch("kurta_length", "SHORT KURTA LENGTH"),
            _inch("sleeve", "SLEEVE"),
        ),
    ),
    "pajama": _schema(
        "pajama",
        _body(
            _inch("waist", "WAIST"),
            _inch("length", "PAJAMA LENGTH"),
            _inch("bottom", "BOTTOM"),
        ),
        _style(
            _text("fitting_style", "FITTING STYLE"),
            _text("color", "COLOR"),
        ),
        _production(),
    ),
    "coat": _schema(
        "coat",
        _body(
            _inch("chest", "CHEST"),
            _inch("waist", "WAIST"),
            _inch("hip", "HIP"),
            _inch("length", "COAT LENGTH"),
            _inch("shoulder", "SHOULDER"),
            _inch("sleeve", "SLEEVE"),
        ),
        _style(
            _text("fitting_style", "FITTING STYLE"),
            _text("pocket", "POCKET"),
            _text("color", "COLOR"),
        ),
        _production(),
    ),
    "bandi": _schema(
        "bandi",
        _body(
            _inch("chest", "CHEST"),
            _inch("length", "BANDI LENGTH"),
            _inch("shoulder", "SHOULDER"),
        ),
        _style(
            _text("fitting_style", "FITTING STYLE"),
            _text("color", "COLOR"),
        ),
        _production(),
    ),
    "westcot": _schema(
        "westcot",
        _body(
            _inch("chest", "CHEST"),
            _inch("waist", "WAIST"),
            _inch("length", "LENGTH"),
        ),
        _style(
            _text("fitting_style", "FITTING STYLE"),
            _text("color", "COLOR"),
        ),
        _production(),
    ),
    "blouse": _schema(
        "blouse",
        _body(
            _inch("bust", "BUST"),
            _inch("waist", "WAIST"),
            _inch("shoulder", "SHOULDER"),
            _inch("blouse_length", "BLOUSE LENGTH"),
            _inch("sleeve", "SLEEVE"),
            _inch("armhole", "ARMHOLE"),
        ),
        _style(
            _text("neck_style", "NECK STYLE"),
        ),
    ),
    "saree_blouse": _schema(
        "saree_blouse",
        _body(
            _inch("bust", "BUST"),
            _inch("waist", "WAIST"),
            _inch("shoulder", "SHOULDER"),
            _inch("blouse_length", "BLOUSE LENGTH"),
            _inch("sleeve", "SLEEVE"),
            _inch("front_neck", "FRONT NECK"),
            _inch("back_neck", "BACK NECK"),
        ),
    ),
})


class GarmentType(str, Enum):
    SHIRT = "shirt"
    PANT = "pant"
    KURTA = "kurta"
    SHORT_KURTA = "short_kurta"
    PAJAMA = "pajama"
    COAT = "coat"
    BANDI = "bandi"
    WESTCOT = "westcot"
    BLOUSE = "blouse"
    SAREE_BLOUSE = "saree_blouse"


@dataclass(frozen=True)
class UnknownGarment:
    raw_label: str


# Substring rules for free-form names, checked in order: "neharu shirt" must
# hit kurta before shirt, "waistcoat" must hit westcot before coat.
_NAME_RULES = (
    ("saree_blouse", ("saree blouse", "sari blouse")),
    ("short_kurta", ("short kurta",)),
    ("kurta", ("neharu", "kurta")),
    ("pajama", ("pajama", "pyjama")),
    ("pant", ("pant", "wizar", "trouser")),
    ("westcot", ("westcot", "waistcoat")),
    ("coat", ("coat",)),
    ("bandi", ("bandi",)),
    ("blouse", ("blouse",)),
    ("shirt", ("shirt",)),
)


def canonical_key(name: str) -> str:
    """'Saree-Blouse ' -> 'saree_blouse'."""
    return re.sub(r"[\s\-]+", "_", name.strip().lower())


def normalize_garment_name(name: Optional[str]) -> Optional[str]:
    """
    Map a free-form garment name ("Short Kurta", "Neharu", "wizar") onto a
    declared garment type key, or None when nothing matches.
    """
    if not name or not name.strip():
        return None

    key = canonical_key(name)
    if key in GARMENT_SCHEMAS:
        return key

    spaced = key.replace("_", " ")
    for garment_type, needles in _NAME_RULES:
        if any(needle in spaced for needle in needles):
            return garment_type
    return None


def resolve_garment_type(label: Optional[str]) -> Union[GarmentType, UnknownGarment]:
    garment_type = normalize_garment_name(label)
    if garment_type is None:
        return UnknownGarment(raw_label=label or "")
    return GarmentType(garment_type)


def require_garment_type(label: Optional[str]) -> GarmentType:
    """Like resolve_garment_type() but raises UnknownGarmentType instead of returning it."""
    resolved = resolve_garment_type(label)
    if isinstance(resolved, UnknownGarment):
        raise UnknownGarmentType(resolved.raw_label)
    return resolved


def schema_for(garment_type: Optional[str]) -> GarmentTypeSchema:
    """
    Case-insensitive lookup. Unknown types get the shirt schema so a form
    never blocks on an odd label; use require_garment_type() where a typo
    must be caught.
    """
    key = canonical_key(garment_type or "")
    schema = GARMENT_SCHEMAS.get(key)
    if schema is None:
        logger.warning("Unknown garment type %r, using %s schema", garment_type, DEFAULT_GARMENT_TYPE)
        return GARMENT_SCHEMAS[DEFAULT_GARMENT_TYPE]
    return schema


def all_fields(schema: GarmentTypeSchema) -> List[MeasurementField]:
    return [f for section in schema.sections for f in section.fields]


def list_types() -> List[str]:
    """Return a sorted list of all declared garment type keys."""
    return sorted(GARMENT_SCHEMAS.keys())
