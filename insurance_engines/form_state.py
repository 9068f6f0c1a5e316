"""
Derived insurance form fields as a pure reducer.

The insurance edit form recomputes several read-only fields whenever an
input changes: remuneration total, suggested grade, the standard wage of
the chosen grade, the pension grade that must accompany it, the age in the
target month, whether nursing premiums apply and whether the prefecture
has a rate table for the grade.  ``derive_derived_fields``
computes all of them from one immutable input snapshot; the caller invokes
it after every change instead of wiring field listeners together.

Bonus routing:
    With more payments per year than the statutory bonus maximum, a bonus
    paid in the target month is ordinary remuneration: it is added to the
    monthly remuneration and the standard bonus amount is zero.  Otherwise
    the bonus goes to the bonus-premium path.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from insurance_config.provider import RateTableProvider
from insurance_engines.bonus import standard_bonus_amount
from insurance_engines.grades import GradeResolver, check_combination, monthly_remuneration, pension_grade_for
from insurance_kernel.domain.dates import YearMonth, age_in_month
from insurance_kernel.domain.rounding import ZERO


@dataclass(frozen=True)
class InsuranceFormInput:
    """Snapshot of the editable insurance fields."""

    target_year: int
    target_month: int
    prefecture: str | None = None
    birth_date: date | None = None
    base_salary: Decimal = ZERO
    allowances: Decimal = ZERO
    commuting_allowance: Decimal = ZERO
    selected_grade: int | None = None
    selected_pension_grade: int | None = None
    bonus_amount: Decimal = ZERO
    bonus_payments_per_year: int = 0
    is_bonus_month: bool = False


@dataclass(frozen=True)
class DerivedInsuranceFields:
    monthly_remuneration: Decimal
    suggested_grade: int | None
    suggested_standard_monthly_wage: Decimal | None
    selected_standard_monthly_wage: Decimal | None
    expected_pension_grade: int | None
    combination_valid: bool | None
    age: int | None
    nursing_applicable: bool
    standard_bonus_amount: Decimal
    bonus_as_remuneration: bool
    rates_available: bool | None = None


def derive_derived_fields(
    form: InsuranceFormInput,
    provider: RateTableProvider,
) -> DerivedInsuranceFields:
    statutory = provider.statutory
    thresholds = statutory.eligibility
    resolver = GradeResolver(provider.boundaries, statutory.remuneration_rounding_unit)

    remuneration = monthly_remuneration(
        form.base_salary, form.allowances, form.commuting_allowance
    )
    bonus_as_remuneration = (
        form.bonus_payments_per_year > statutory.max_bonus_payments_per_year
        and form.is_bonus_month
        and form.bonus_amount > 0
    )
    if bonus_as_remuneration:
        remuneration += form.bonus_amount
        standard_bonus = ZERO
    elif form.bonus_amount > 0:
        standard_bonus = standard_bonus_amount(form.bonus_amount, statutory.standard_bonus_unit)
    else:
        standard_bonus = ZERO

    suggested_grade = suggested_wage = None
    if remuneration > 0:
        suggested_grade, suggested_wage = resolver.resolve_remuneration(remuneration)

    selected_wage = None
    if form.selected_grade:
        boundary = resolver.boundary_for(form.selected_grade)
        selected_wage = boundary.standard_monthly_wage if boundary else None

    health_grade = form.selected_grade or suggested_grade
    combination_valid = None
    if form.selected_grade and form.selected_pension_grade:
        combination_valid = check_combination(form.selected_grade, form.selected_pension_grade)

    # None until both a prefecture and a grade are known
    rates_available = None
    if form.prefecture and health_grade:
        rates_available = (
            form.prefecture in provider.prefectures()
            and provider.is_declared_grade(health_grade)
        )

    age = None
    if form.birth_date is not None:
        age = age_in_month(form.birth_date, YearMonth(form.target_year, form.target_month))

    return DerivedInsuranceFields(
        monthly_remuneration=remuneration,
        suggested_grade=suggested_grade,
        suggested_standard_monthly_wage=suggested_wage,
        selected_standard_monthly_wage=selected_wage,
        expected_pension_grade=pension_grade_for(health_grade) if health_grade else None,
        combination_valid=combination_valid,
        age=age,
        nursing_applicable=(
            age is not None
            and thresholds.nursing_start_age <= age < thresholds.nursing_end_age
        ),
        standard_bonus_amount=standard_bonus,
        bonus_as_remuneration=bonus_as_remuneration,
        rates_available=rates_available,
    )
