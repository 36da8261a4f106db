"""Fixed-point amount helpers.

Ledger amounts are non-negative integers in base units with 18 decimal places.
Raw amounts stay integers; only derived averages and ratios move to a Decimal
unit scale (and ratios to float, once they no longer carry money).
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

DECIMALS = 18
BASE_UNITS_PER_UNIT = 10**DECIMALS


def to_units(amount: int) -> Decimal:
    """Convert a base-unit integer to a Decimal unit value"""
    return Decimal(amount) / BASE_UNITS_PER_UNIT


def from_units(units: int | str | Decimal) -> int:
    """Convert a whole or decimal unit value to base units"""
    return int(Decimal(units) * BASE_UNITS_PER_UNIT)


def mean_units(amounts: Iterable[int]) -> Decimal:
    """Mean of base-unit amounts on the unit scale (0 for no amounts)"""
    values = list(amounts)
    if not values:
        return Decimal(0)
    return to_units(sum(values)) / len(values)


def amount_ratio(amount: int, baseline_units: Decimal) -> float:
    """How many times the baseline an amount is; 0.0 when the baseline is zero"""
    if baseline_units <= 0:
        return 0.0
    return float(to_units(amount) / baseline_units)


def format_units(amount: int, places: int = 2) -> str:
    """Human-readable unit string for presentation, e.g. 1500000000000000000 -> '1.50'"""
    quantum = Decimal(1).scaleb(-places)
    return str(to_units(amount).quantize(quantum, rounding=ROUND_HALF_UP))
