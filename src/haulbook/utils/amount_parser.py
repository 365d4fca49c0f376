"""Amount parsing and rounding utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

TWOPLACES = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce a number, string or None to a Decimal rounded to paise."""
    if value is None or value == "":
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a non-negative Decimal.

    Handles formats such as "1234.5", "₹1,234.50", "Rs. 1,23,456" and
    "INR 500". Negative amounts are rejected: the direction of a movement is
    carried by its type, never by its sign.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount rounded to two places

    Raises:
        ValueError: If amount string cannot be parsed or is negative
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = amount_str.strip()
    cleaned = re.sub(r"^(INR|Rs\.?)\s*", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"[₹$,\s]", "", cleaned)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e!r}")

    if amount < 0:
        raise ValueError(f"Amount '{amount_str}' must not be negative")
    return to_money(amount)
