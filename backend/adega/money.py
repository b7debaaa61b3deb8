from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

# Maximum price: 9,999,999.99 (999,999,999 cents)
MAX_AMOUNT_CENTS = 999_999_999


def format_cents(cents: int) -> str:
    """Render integer cents as a two-decimal string (3000 -> '30.00')."""
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}{cents // 100}.{cents % 100:02d}"


def parse_cents(value) -> int:
    """
    Convert a decimal amount ("10.5", 10.5, Decimal) to integer cents.

    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError("amount must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("amount must be a number")
    if not amount.is_finite():
        raise ValueError("amount must be a number")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
