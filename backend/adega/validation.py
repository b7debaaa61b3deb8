from __future__ import annotations

from typing import Any

from .money import MAX_AMOUNT_CENTS
from .services.errors import ValidationError


def coerce_int(name: str, value: Any, *, minimum: int | None = None, maximum: int | None = None) -> int:
    """
    Strict integer coercion for request input.

    Accepts ints and plain digit strings; rejects bools, floats, decimals and
    scientific notation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{name} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{name} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{name} must be an integer (no decimals)")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{name} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{name} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{name} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{name} must be >= {minimum}")
    if maximum is not None and result > maximum:
        raise ValidationError(f"{name} must be <= {maximum}")
    return result


def coerce_cents(name: str, value: Any, *, minimum: int = 0) -> int:
    return coerce_int(name, value, minimum=minimum, maximum=MAX_AMOUNT_CENTS)


def coerce_str(name: str, value: Any, *, required: bool = False, max_length: int | None = None) -> str | None:
    if value is None:
        if required:
            raise ValidationError(f"{name} is required")
        return None
    s = str(value).strip()
    if not s:
        if required:
            raise ValidationError(f"{name} is required")
        return None
    if max_length is not None and len(s) > max_length:
        raise ValidationError(f"{name} must be at most {max_length} characters")
    return s
