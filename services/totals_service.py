# tailor_bill/services/totals_service.py

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from domain.errors import ValidationFailed
from domain.models import LineItem, OrderTotals, as_money

# Shop-wide discount in percent. Pass an explicit rate to compute_totals()
# for anything else (e.g. 0 for no-discount bills).
DEFAULT_DISCOUNT_RATE = Decimal("10")

MINOR_UNIT = Decimal("0.01")


def check_discount_rate(rate) -> Decimal:
    try:
        rate = as_money(rate)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailed(f"Invalid discount rate: {rate!r}", field="discount_rate")
    if not rate.is_finite() or rate < 0 or rate > 100:
        raise ValidationFailed("Discount rate must be between 0 and 100", field="discount_rate")
    return rate


def compute_totals(items: Iterable[LineItem], discount_rate_percent=DEFAULT_DISCOUNT_RATE) -> OrderTotals:
    """
    Recompute subtotal, discount and grand total from the items.

    Nothing is cached: callers run this after every change to the item list.
    The discount is rounded to the paisa (half up); subtotal and total stay exact.
    """
    rate = check_discount_rate(discount_rate_percent)

    subtotal = sum((item.total_price for item in items), Decimal("0"))
    discount_amount = (subtotal * rate / 100).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)

    return OrderTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        total_amount=subtotal - discount_amount,
    )
