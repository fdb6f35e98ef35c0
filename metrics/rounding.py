"""
Decimal helpers for report arithmetic.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int]


def round_decimal(value: Decimal, places: int = 2) -> Decimal:
    """Round Decimal to specified decimal places."""
    return value.quantize(Decimal(f"0.{'0' * places}"), rounding=ROUND_HALF_UP)


def round_to_unit(value: Decimal) -> Decimal:
    """Round half-up to a whole currency unit."""
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def safe_divide(numerator: Number, denominator: Number) -> Decimal:
    """Division that yields 0 instead of raising on a zero denominator."""
    if not denominator:
        return Decimal("0")
    return Decimal(numerator) / Decimal(denominator)


def percentage(actual: Number, goal: Number) -> Decimal:
    """actual / goal * 100, 0 when there is no goal."""
    return round_decimal(safe_divide(actual, goal) * 100)
