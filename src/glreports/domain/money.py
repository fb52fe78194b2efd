"""Decimal helpers shared by the aggregation services."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")

# Balances below this absolute amount are treated as zero for display.
MATERIALITY = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_money(value: Number) -> Decimal:
    """Round to two decimal places, half away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def is_material(value: Number, tolerance: Decimal = MATERIALITY) -> bool:
    """Return True if the absolute amount reaches the materiality threshold."""
    return abs(to_decimal(value)) >= tolerance


def within_tolerance(left: Number, right: Number, tolerance: Decimal = MATERIALITY) -> bool:
    """Return True if two amounts differ by less than the tolerance."""
    return abs(to_decimal(left) - to_decimal(right)) < tolerance
