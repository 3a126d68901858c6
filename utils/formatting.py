# tailor_bill/utils/formatting.py

from decimal import Decimal


def format_money(amount, currency_symbol: str = "₹") -> str:
    """
    Two decimals with ',' as thousands separator.
    Example: Decimal("1620") -> "₹1,620.00"
    """
    return f"{currency_symbol}{Decimal(str(amount)):,.2f}"


def format_rate(rate) -> str:
    """Percent without trailing zeros: Decimal("10.00") -> "10", 12.5 -> "12.5"."""
    text = f"{Decimal(str(rate)):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
