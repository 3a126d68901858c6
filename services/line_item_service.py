# tailor_bill/services/line_item_service.py

import dataclasses
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional

from domain.errors import MeasurementsIncomplete, ValidationFailed
from domain.garments import all_fields, require_garment_type, schema_for
from domain.models import ItemKind, LineItem, as_money
from services.measurement_service import missing_required_fields


def _new_item_id() -> str:
    return str(uuid.uuid4())


def _check_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationFailed("Quantity must be a whole number", field="quantity")
    if quantity < 1:
        raise ValidationFailed("Quantity must be at least 1", field="quantity")
    return quantity


def _check_unit_price(unit_price: Any) -> Decimal:
    try:
        price = as_money(unit_price)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailed(f"Invalid unit price: {unit_price!r}", field="unit_price")
    if not price.is_finite() or price <= 0:
        raise ValidationFailed("Unit price must be greater than zero", field="unit_price")
    return price


def _check_basic(description: Optional[str], quantity: Any, unit_price: Any):
    if not description or not description.strip():
        raise ValidationFailed("Description is required", field="description")
    return description.strip(), _check_quantity(quantity), _check_unit_price(unit_price)


def add_ready_made(
        description: str,
        quantity: int,
        unit_price,
        hsn_code: Optional[str] = None,
        *,
        item_id: Optional[str] = None,
) -> LineItem:
    """
    Build a ready-made (off the shelf / fabric) line item.
    Raises ValidationFailed on empty description, qty < 1 or price <= 0.
    """
    description, quantity, price = _check_basic(description, quantity, unit_price)
    return LineItem(
        id=item_id or _new_item_id(),
        kind=ItemKind.READY_MADE,
        description=description,
        quantity=quantity,
        unit_price=price,
        hsn_code=hsn_code or None,
    )


def add_stitching(
        description: str,
        quantity: int,
        unit_price,
        clothing_type: str,
        measurements: Optional[Mapping[str, Any]],
        hsn_code: Optional[str] = None,
        *,
        item_id: Optional[str] = None,
) -> LineItem:
    """
    Build a custom-stitching line item.

    Checks run in order:
      1. the same field checks as add_ready_made()  -> ValidationFailed
      2. clothing_type is a declared garment type   -> UnknownGarmentType
      3. every declared measurement has a value     -> MeasurementsIncomplete

    The stored measurement set keeps the declared fields only, stripped and in
    schema order.
    """
    description, quantity, price = _check_basic(description, quantity, unit_price)
    garment_type = require_garment_type(clothing_type).value

    missing = missing_required_fields(garment_type, measurements)
    if missing:
        raise MeasurementsIncomplete(missing)

    values = {
        f.name: str(measurements[f.name]).strip()
        for f in all_fields(schema_for(garment_type))
    }

    return LineItem(
        id=item_id or _new_item_id(),
        kind=ItemKind.STITCHING,
        description=description,
        quantity=quantity,
        unit_price=price,
        hsn_code=hsn_code or None,
        clothing_type=garment_type,
        measurements=values,
    )


def set_quantity(item: LineItem, new_quantity: int) -> LineItem:
    return dataclasses.replace(item, quantity=_check_quantity(new_quantity))


def set_unit_price(item: LineItem, new_unit_price) -> LineItem:
    return dataclasses.replace(item, unit_price=_check_unit_price(new_unit_price))


def remove(items: Iterable[LineItem], item_id: str) -> List[LineItem]:
    """Drop the item with `item_id`; unknown ids leave the list as it was."""
    return [item for item in items if item.id != item_id]
