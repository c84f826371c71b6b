# core/money.py

"""
MONEY HELPERS

Hard rules:
- Money is Decimal, never float.
- Rounding is ROUND_HALF_UP to 2dp, applied at line-item / record boundaries only.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(v) -> Decimal:
    """Exact conversion (no rounding). Empty values become 0."""
    if v is None or v == "":
        return Decimal("0")
    if isinstance(v, bool):
        raise ValueError("boolean is not a money value")
    try:
        d = Decimal(str(v))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Invalid money value: {v!r}") from exc
    if not d.is_finite():
        raise ValueError(f"Invalid money value: {v!r}")
    return d


def money(v) -> Decimal:
    return to_decimal(v).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def percent_of(amount, percent) -> Decimal:
    """amount x percent / 100, unrounded."""
    return to_decimal(amount) * to_decimal(percent) / HUNDRED


def round_whole(v) -> Decimal:
    """Round half-up to a whole currency unit."""
    return to_decimal(v).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def floor_int(v) -> int:
    return int(to_decimal(v).to_integral_value(rounding=ROUND_DOWN))
