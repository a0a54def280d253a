"""
Numeric parsing helpers for quantities and amounts coming from callers.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def parse_decimal(value: Any, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """
    Convert a caller-supplied number to Decimal.

    ``None`` and blank strings yield ``default``. Floats go through ``str``
    so 0.1 stays 0.1.

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        if not value.strip():
            return default
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {value!r}") from e
    else:
        raise ValueError(f"Not a number: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())
