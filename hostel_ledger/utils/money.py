"""Helpers for money values read back from the database."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Coerce a numeric column value (or SUM result) to a 2dp Decimal; None is zero."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return to_decimal(value)
