"""
Decimal helpers for monetary amounts and scores.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Convert a number-like value to a Decimal rounded to cents."""
    if isinstance(value, Decimal):
        amount = value
    else:
        amount = Decimal(str(value))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a loosely-typed value into a Decimal.

    Returns None for missing, boolean, non-numeric or non-finite input
    instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not amount.is_finite():
        return None
    return amount


def clamp_score(value: float | Decimal, low: int = 0, high: int = 100) -> int:
    """Round a score half-up to an integer and clamp it into [low, high]."""
    rounded = int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(low, min(high, rounded))
