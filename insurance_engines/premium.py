"""
PremiumCalculator -- monthly and bonus premiums in whole yen.

Responsibility:
    Convert a (prefecture, grade, age) triple into the employee/employer
    split of health, nursing-care and pension premiums plus the
    employer-only child-support levy, using the injected rate tables.
    The bonus path is delegated to ``insurance_engines.bonus``.

Architecture position:
    Engine layer.  Reads a ``RateTableProvider``; never reads files.

Monthly arithmetic:
    - Health: the table's employee share; employer = total - employee share.
    - Nursing (age 40 to 64): employee = half-down rounding of the combined
      employee share minus the health employee share; employer = combined
      total - health total - employee nursing.
    - Pension: the pension grade paired with the health grade, split 50/50.
    - Levy: half-up rounding of standard monthly wage x levy rate.
    - Totals: the employee total is the half-down rounding of the employee
      sum.  The combined total is rounded in the opposite direction (down
      when the employee total went up, otherwise up) and the employer total
      is the difference, so the two totals never drift from the notice.

Failure modes:
    - Unset grade (None / 0) or a grade no boundary declares -> ``None``.
    - Unknown prefecture -> ``PrefectureNotFoundError``.
    - Declared grade missing from a table -> ``GradeNotFoundError``.
    - Bonus rates missing for the fiscal year -> ``BonusRateNotFoundError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from insurance_config.provider import RateTableProvider
from insurance_engines.bonus import BonusInsuranceResult, compute_bonus_premium
from insurance_engines.grades import pension_grade_for
from insurance_engines.tracer import traced_engine
from insurance_kernel.domain.rounding import ZERO, ceil_yen, floor_yen, round_half_down, round_half_up
from insurance_kernel.logging_config import get_logger

logger = get_logger("engines.premium")


@dataclass(frozen=True)
class PremiumBreakdown:
    """Monthly premium amounts for one grade."""

    prefecture: str
    grade: int
    pension_grade: int
    standard_monthly_wage: Decimal
    health_insurance_employee: Decimal
    health_insurance_employer: Decimal
    nursing_insurance_employee: Decimal
    nursing_insurance_employer: Decimal
    pension_insurance_employee: Decimal
    pension_insurance_employer: Decimal
    child_support_levy: Decimal
    employee_total: Decimal
    employer_total: Decimal

    @property
    def employer_burden(self) -> Decimal:
        """Employer total including the child-support levy."""
        return self.employer_total + self.child_support_levy

    @property
    def combined_total(self) -> Decimal:
        return self.employee_total + self.employer_total

    def restricted_to(
        self,
        health: bool,
        nursing: bool,
        pension: bool,
    ) -> PremiumBreakdown:
        """Keep only the insurances the employee is covered by."""
        return _assemble(
            prefecture=self.prefecture,
            grade=self.grade,
            pension_grade=self.pension_grade,
            standard_monthly_wage=self.standard_monthly_wage,
            health=(
                (self.health_insurance_employee, self.health_insurance_employer)
                if health else (ZERO, ZERO)
            ),
            nursing=(
                (self.nursing_insurance_employee, self.nursing_insurance_employer)
                if nursing and health else (ZERO, ZERO)
            ),
            pension=(
                (self.pension_insurance_employee, self.pension_insurance_employer)
                if pension else (ZERO, ZERO)
            ),
            child_support_levy=self.child_support_levy if health else ZERO,
        )

    def zeroed(self) -> PremiumBreakdown:
        """Every premium removed; grade and wage kept for display."""
        return self.restricted_to(health=False, nursing=False, pension=False)


def _assemble(
    *,
    prefecture: str,
    grade: int,
    pension_grade: int,
    standard_monthly_wage: Decimal,
    health: tuple[Decimal, Decimal],
    nursing: tuple[Decimal, Decimal],
    pension: tuple[Decimal, Decimal],
    child_support_levy: Decimal,
) -> PremiumBreakdown:
    employee_raw = health[0] + nursing[0] + pension[0]
    combined_raw = sum(health + nursing + pension, ZERO)

    employee_total = round_half_down(employee_raw)
    if employee_total > employee_raw:
        combined_total = floor_yen(combined_raw)
    else:
        combined_total = ceil_yen(combined_raw)

    return PremiumBreakdown(
        prefecture=prefecture,
        grade=grade,
        pension_grade=pension_grade,
        standard_monthly_wage=standard_monthly_wage,
        health_insurance_employee=health[0],
        health_insurance_employer=health[1],
        nursing_insurance_employee=nursing[0],
        nursing_insurance_employer=nursing[1],
        pension_insurance_employee=pension[0],
        pension_insurance_employer=pension[1],
        child_support_levy=child_support_levy,
        employee_total=employee_total,
        employer_total=combined_total - employee_total,
    )


class PremiumCalculator:
    """Monthly and bonus premium calculation over injected rate tables."""

    def __init__(self, provider: RateTableProvider) -> None:
        self._provider = provider

    @property
    def provider(self) -> RateTableProvider:
        return self._provider

    def available_prefectures(self) -> tuple[str, ...]:
        return self._provider.prefectures()

    def nursing_applies(self, age: int | None) -> bool:
        if age is None:
            return False
        thresholds = self._provider.statutory.eligibility
        return thresholds.nursing_start_age <= age < thresholds.nursing_end_age

    @traced_engine(
        "premium_monthly",
        "1.0",
        fingerprint_fields=("prefecture", "grade", "age", "has_children"),
    )
    def calculate(
        self,
        prefecture: str,
        grade: int | None,
        age: int | None,
        has_children: bool = False,
    ) -> PremiumBreakdown | None:
        """Monthly premiums for ``grade`` in ``prefecture``.

        ``has_children`` is accepted for form compatibility; the levy is
        charged regardless of it.

        Returns:
            ``None`` when the grade is unset or not a declared grade.
        """
        if not grade:
            logger.debug("premium_calculation_skipped", extra={
                "prefecture": prefecture,
                "reason": "grade_unset",
            })
            return None
        pension_grade = pension_grade_for(grade)
        if not self._provider.is_declared_grade(grade) or pension_grade is None:
            logger.warning("premium_calculation_skipped", extra={
                "prefecture": prefecture,
                "grade": grade,
                "reason": "grade_undeclared",
            })
            return None

        entry = self._provider.grade_entry(prefecture, grade)
        pension_entry = self._provider.pension_entry(pension_grade)
        statutory = self._provider.statutory

        health_ee = entry.health_insurance_employee_share
        health = (health_ee, entry.health_insurance_total - health_ee)

        nursing = (ZERO, ZERO)
        if self.nursing_applies(age):
            nursing_ee = round_half_down(entry.nursing_insurance_employee_share - health_ee)
            nursing_er = entry.nursing_insurance_total - entry.health_insurance_total - nursing_ee
            nursing = (nursing_ee, nursing_er)

        pension = (
            pension_entry.pension_insurance_employee_share,
            pension_entry.pension_insurance_employer_share,
        )

        breakdown = _assemble(
            prefecture=prefecture,
            grade=grade,
            pension_grade=pension_grade,
            standard_monthly_wage=entry.standard_monthly_wage,
            health=health,
            nursing=nursing,
            pension=pension,
            child_support_levy=round_half_up(
                entry.standard_monthly_wage * statutory.child_support_levy_rate
            ),
        )

        logger.info("premium_calculation_completed", extra={
            "prefecture": prefecture,
            "grade": grade,
            "pension_grade": pension_grade,
            "nursing_applied": nursing != (ZERO, ZERO),
            "employee_total": str(breakdown.employee_total),
            "employer_total": str(breakdown.employer_total),
        })
        return breakdown

    @traced_engine(
        "premium_bonus",
        "1.0",
        fingerprint_fields=(
            "bonus_amount", "prefecture", "age", "bonus_count",
            "annual_health_bonus_total", "fiscal_year",
        ),
    )
    def calculate_bonus(
        self,
        bonus_amount: Decimal | None,
        prefecture: str | None,
        age: int | None,
        bonus_count: int,
        annual_health_bonus_total: Decimal = ZERO,
        fiscal_year: int | None = None,
    ) -> BonusInsuranceResult | None:
        """Premiums on one bonus payment.

        Returns ``None`` when the amount or prefecture is missing, or the
        amount is zero or negative.

        Args:
            bonus_count: Bonus payments per year.  Above the statutory
                maximum the payment is ordinary remuneration and ``None`` is
                returned.
            annual_health_bonus_total: Standard bonus amounts already paid
                in the fiscal year, excluding this payment.
            fiscal_year: Fiscal year of the payment; defaults to the latest
                year with loaded bonus rates.
        """
        statutory = self._provider.statutory
        if bonus_count > statutory.max_bonus_payments_per_year:
            logger.info("bonus_premium_skipped", extra={
                "reason": "treated_as_remuneration",
                "bonus_count": bonus_count,
            })
            return None
        if bonus_amount is None or not prefecture:
            logger.debug("bonus_premium_skipped", extra={"reason": "input_missing"})
            return None
        if bonus_amount <= 0:
            logger.debug("bonus_premium_skipped", extra={
                "reason": "non_positive_amount",
                "bonus_amount": str(bonus_amount),
            })
            return None

        year = fiscal_year if fiscal_year is not None else self._provider.latest_fiscal_year()
        rate = self._provider.bonus_rate(year, prefecture)

        result = compute_bonus_premium(
            Decimal(bonus_amount),
            rate,
            statutory,
            nursing_applies=self.nursing_applies(age),
            annual_health_bonus_total=Decimal(annual_health_bonus_total or 0),
        )
        logger.info("bonus_premium_calculated", extra={
            "prefecture": prefecture,
            "fiscal_year": year,
            "standard_bonus_amount": str(result.standard_bonus_amount),
            "health_base": str(result.health_base),
            "pension_base": str(result.pension_base),
        })
        return result
