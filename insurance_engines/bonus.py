"""
Bonus premium arithmetic.

Standard bonus amount:
    The bonus truncated to the nearest 1,000 yen.

Caps:
    - Pension: the standard bonus amount is capped per payment
      (1,500,000 yen).
    - Health and nursing: capped by the fiscal-year cumulative total
      (5,730,000 yen).  Once the prior total reaches the cap the base is 0;
      otherwise it is the smaller of the standard amount and the remaining
      headroom.

Splitting:
    Each premium is ``floor(base * rate)``; the employee pays
    ``floor(total / 2)`` and the employer the remainder, so an odd yen
    always lands on the employer side.  The child-support levy is
    ``floor(health_base * levy_rate)`` and is employer-only.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from insurance_config.schema import BonusRate, StatutoryConstants
from insurance_kernel.domain.rounding import ZERO, floor_to_unit, floor_yen, split_employee_employer


@dataclass(frozen=True)
class BonusInsuranceResult:
    """Premiums on one bonus payment."""

    standard_bonus_amount: Decimal
    health_base: Decimal
    pension_base: Decimal
    fiscal_year: int
    health_insurance_employee: Decimal = ZERO
    health_insurance_employer: Decimal = ZERO
    nursing_insurance_employee: Decimal = ZERO
    nursing_insurance_employer: Decimal = ZERO
    pension_insurance_employee: Decimal = ZERO
    pension_insurance_employer: Decimal = ZERO
    child_support_levy: Decimal = ZERO

    @property
    def employee_total(self) -> Decimal:
        return (
            self.health_insurance_employee
            + self.nursing_insurance_employee
            + self.pension_insurance_employee
        )

    @property
    def employer_total(self) -> Decimal:
        return (
            self.health_insurance_employer
            + self.nursing_insurance_employer
            + self.pension_insurance_employer
        )

    def restricted_to(self, health: bool, nursing: bool, pension: bool) -> BonusInsuranceResult:
        """Keep only the premiums of the insurances the employee is covered by."""
        changes: dict[str, Decimal] = {}
        if not health:
            changes.update(
                health_insurance_employee=ZERO,
                health_insurance_employer=ZERO,
                child_support_levy=ZERO,
            )
        if not (health and nursing):
            changes.update(nursing_insurance_employee=ZERO, nursing_insurance_employer=ZERO)
        if not pension:
            changes.update(pension_insurance_employee=ZERO, pension_insurance_employer=ZERO)
        return replace(self, **changes)

    def zeroed(self) -> BonusInsuranceResult:
        """Same payment with every premium removed (exempt month)."""
        return self.restricted_to(health=False, nursing=False, pension=False)


def standard_bonus_amount(bonus_amount: Decimal, unit: Decimal = Decimal("1000")) -> Decimal:
    return floor_to_unit(bonus_amount, unit)


def capped_health_base(
    standard_amount: Decimal,
    prior_cumulative: Decimal,
    annual_cap: Decimal,
) -> Decimal:
    """Health/nursing base left under the fiscal-year cap."""
    if prior_cumulative >= annual_cap:
        return ZERO
    return max(min(standard_amount, annual_cap - prior_cumulative), ZERO)


def capped_pension_base(standard_amount: Decimal, per_payment_cap: Decimal) -> Decimal:
    return min(standard_amount, per_payment_cap)


def compute_bonus_premium(
    bonus_amount: Decimal,
    rate: BonusRate,
    statutory: StatutoryConstants,
    *,
    nursing_applies: bool,
    annual_health_bonus_total: Decimal = ZERO,
) -> BonusInsuranceResult:
    standard = standard_bonus_amount(bonus_amount, statutory.standard_bonus_unit)
    health_base = capped_health_base(
        standard, annual_health_bonus_total, statutory.health_bonus_cap_per_fiscal_year
    )
    pension_base = capped_pension_base(standard, statutory.pension_bonus_cap_per_payment)

    health_ee, health_er = split_employee_employer(
        floor_yen(health_base * rate.health_insurance_rate)
    )
    nursing_ee = nursing_er = ZERO
    if nursing_applies:
        nursing_ee, nursing_er = split_employee_employer(
            floor_yen(health_base * statutory.nursing_rate)
        )
    pension_ee, pension_er = split_employee_employer(
        floor_yen(pension_base * statutory.pension_rate)
    )

    return BonusInsuranceResult(
        standard_bonus_amount=standard,
        health_base=health_base,
        pension_base=pension_base,
        fiscal_year=rate.fiscal_year,
        health_insurance_employee=health_ee,
        health_insurance_employer=health_er,
        nursing_insurance_employee=nursing_ee,
        nursing_insurance_employer=nursing_er,
        pension_insurance_employee=pension_ee,
        pension_insurance_employer=pension_er,
        child_support_levy=floor_yen(health_base * statutory.child_support_levy_rate),
    )
