# tailor_bill/services/measurement_service.py

import logging
from typing import Any, Dict, List, Mapping, Optional

from domain.errors import ValidationFailed
from domain.garments import all_fields, schema_for
from services.clothing_type_mapper import to_storage_enum

logger = logging.getLogger(__name__)


def _has_value(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def missing_required_fields(garment_type: str, values: Optional[Mapping[str, Any]]) -> List[str]:
    """
    Labels of every declared field of `garment_type` without a non-empty value,
    in schema order. Empty list means the set is complete.
    """
    values = values or {}
    return [
        f.label
        for f in all_fields(schema_for(garment_type))
        if not _has_value(values.get(f.name))
    ]


def prepare_measurements(garment_type: str, values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Shape a measurement set for storage:
      - inches fields -> float (0.0 when it does not parse)
      - text fields   -> stripped string
    Only declared fields are kept.
    """
    payload: Dict[str, Any] = {}
    for f in all_fields(schema_for(garment_type)):
        raw = values.get(f.name)
        if raw is None:
            continue
        text = str(raw).strip()
        if f.unit == "inches" and text:
            try:
                payload[f.name] = float(text)
            except ValueError:
                payload[f.name] = 0.0
        else:
            payload[f.name] = text
    return payload


def build_measurement_payload(sets: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Storage payload for one measurements row.

    `sets` maps garment type -> values, all sharing one storage clothing_type.
    A single garment is stored flat with its "garment_type"; several garments
    (kurta + pajama on one kurta_pajama row) are nested under their type keys
    and listed in "garment_types".
    """
    prepared = {}
    for garment_type, values in sets.items():
        payload = prepare_measurements(garment_type, values)
        payload["garment_type"] = garment_type
        prepared[garment_type] = payload

    if len(prepared) == 1:
        return next(iter(prepared.values()))
    return {"garment_types": sorted(prepared), **prepared}


def garment_sets(payload: Optional[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Read a stored payload back as garment type -> values, for either shape."""
    if not payload:
        return {}
    if "garment_types" in payload:
        return {
            g: {k: v for k, v in payload.get(g, {}).items() if k != "garment_type"}
            for g in payload["garment_types"]
        }
    garment_type = payload.get("garment_type")
    if not garment_type:
        return {}
    return {garment_type: {k: v for k, v in payload.items() if k != "garment_type"}}


def save_measurement_sets(
        store,
        customer_id: str,
        sets: Mapping[str, Mapping[str, Any]],
) -> Dict[str, Dict[str, Any]]:
    """
    Upsert measurement sets for several garment types at once.

    Garment types sharing a storage clothing_type are written as one merged
    row, so none of them overwrites another. Returns garment type -> stored row.
    `store` raises PersistenceRejected on failure.
    """
    if not customer_id:
        raise ValidationFailed("Customer ID is required to save measurements", field="customer_id")

    groups: Dict[str, Dict[str, Mapping[str, Any]]] = {}
    for garment_type, values in sets.items():
        key = schema_for(garment_type).garment_type
        groups.setdefault(to_storage_enum(key), {})[key] = values or {}

    rows: Dict[str, Dict[str, Any]] = {}
    for clothing_type, group in groups.items():
        row = store.upsert_measurement(customer_id, clothing_type, build_measurement_payload(group))
        logger.info("Saved %s measurements (%s) for customer %s", clothing_type, ", ".join(group), customer_id)
        for garment_type in group:
            rows[garment_type] = row
    return rows


def save_measurements(store, customer_id: str, garment_type: str, values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Upsert a customer's measurements for one garment type.

    The row is keyed on (customer_id, storage clothing_type), so a later save
    for the same customer and type overwrites the earlier one. The open
    garment type is kept inside the payload under "garment_type".

    Returns the stored row. `store` raises PersistenceRejected on failure.
    """
    rows = save_measurement_sets(store, customer_id, {garment_type: values})
    return rows[schema_for(garment_type).garment_type]
