"""
Yen rounding rules used by the premium engines.

All helpers take and return ``Decimal`` and quantize to whole yen.

* ``round_half_down`` -- the payroll deduction rule for the employee side:
  a fraction of 50 sen or less is dropped, more than 50 sen rounds up.
* ``round_half_up`` -- ordinary rounding (child-support levy, remuneration
  rounding to the nearest thousand).
* ``floor_yen`` / ``ceil_yen`` -- truncation used by the bonus path and by
  the opposite-direction rounding of the employer total.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
_YEN = Decimal("1")


def round_half_down(amount: Decimal) -> Decimal:
    """Round to whole yen; exactly 0.50 rounds down."""
    return amount.quantize(_YEN, rounding=ROUND_HALF_DOWN)


def round_half_up(amount: Decimal) -> Decimal:
    return amount.quantize(_YEN, rounding=ROUND_HALF_UP)


def floor_yen(amount: Decimal) -> Decimal:
    return amount.quantize(_YEN, rounding=ROUND_FLOOR)


def ceil_yen(amount: Decimal) -> Decimal:
    return amount.quantize(_YEN, rounding=ROUND_CEILING)


def floor_to_unit(amount: Decimal, unit: Decimal) -> Decimal:
    """Truncate to a multiple of ``unit`` (e.g. 1,000 yen for bonuses)."""
    return floor_yen(amount / unit) * unit


def round_to_unit(amount: Decimal, unit: Decimal) -> Decimal:
    """Round half-up to a multiple of ``unit``."""
    return round_half_up(amount / unit) * unit


def split_employee_employer(total: Decimal) -> tuple[Decimal, Decimal]:
    """Split a whole-yen premium in half; the odd yen goes to the employer."""
    employee = floor_yen(total / 2)
    return employee, total - employee
