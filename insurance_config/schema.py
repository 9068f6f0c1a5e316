"""
Rate-table schema.

Frozen dataclasses for the government-published data the engines read.
YAML fragments are parsed into these types by the loader, checked by the
validator, and wrapped by ``RateTableProvider`` for lookups.

All yen amounts and rates are ``Decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

# ---------------------------------------------------------------------------
# Grade tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GradeBoundary:
    """Remuneration range of one health-insurance grade.

    ``lower_bound`` is inclusive, ``upper_bound`` exclusive; ``None`` means
    open-ended (top grade only).
    """

    grade: int
    lower_bound: Decimal
    upper_bound: Decimal | None
    standard_monthly_wage: Decimal

    def contains(self, wage: Decimal) -> bool:
        if wage < self.lower_bound:
            return False
        return self.upper_bound is None or wage < self.upper_bound


@dataclass(frozen=True)
class GradeTableEntry:
    """One grade of a prefecture's health/nursing premium table.

    ``nursing_insurance_total`` and ``nursing_insurance_employee_share`` are
    the combined health+nursing figures, as published.
    """

    grade: int
    standard_monthly_wage: Decimal
    health_insurance_total: Decimal
    health_insurance_employee_share: Decimal
    nursing_insurance_total: Decimal
    nursing_insurance_employee_share: Decimal


@dataclass(frozen=True)
class PensionGradeEntry:
    """One pension grade. The employer share equals the employee share."""

    grade: int
    standard_monthly_wage: Decimal
    pension_insurance_employee_share: Decimal

    @property
    def pension_insurance_employer_share(self) -> Decimal:
        return self.pension_insurance_employee_share

    @property
    def pension_insurance_total(self) -> Decimal:
        return self.pension_insurance_employee_share * 2


@dataclass(frozen=True)
class PrefectureTable:
    """All grades of one prefecture."""

    prefecture: str
    entries: tuple[GradeTableEntry, ...]


# ---------------------------------------------------------------------------
# Bonus rates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BonusRate:
    """Bonus premium rates for one fiscal year and prefecture."""

    fiscal_year: int
    prefecture: str
    health_insurance_rate: Decimal
    special_insurance_rate: Decimal


# ---------------------------------------------------------------------------
# Statutory constants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EligibilityThresholds:
    """Headcount, hours, wage and age thresholds of the eligibility rules."""

    small_employer_headcount: int = 5
    specified_employer_headcount: int = 51
    full_time_weekly_hours: Decimal = Decimal("30")
    full_time_monthly_days: int = 15
    short_time_weekly_hours: Decimal = Decimal("20")
    short_time_monthly_wage: Decimal = Decimal("88000")
    short_contract_max_months: int = 2
    nursing_start_age: int = 40
    nursing_end_age: int = 65
    pension_end_age: int = 70
    elderly_care_age: int = 75
    fourteen_day_rule_days: int = 14
    bonus_exemption_min_leave_days: int = 31


@dataclass(frozen=True)
class StatutoryConstants:
    """Nationwide rates and caps."""

    effective_from: date
    pension_rate: Decimal
    nursing_rate: Decimal
    child_support_levy_rate: Decimal
    pension_bonus_cap_per_payment: Decimal
    health_bonus_cap_per_fiscal_year: Decimal
    standard_bonus_unit: Decimal = Decimal("1000")
    remuneration_rounding_unit: Decimal = Decimal("1000")
    max_bonus_payments_per_year: int = 3
    eligibility: EligibilityThresholds = field(default_factory=EligibilityThresholds)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RateTables:
    """Everything loaded from one data directory."""

    statutory: StatutoryConstants
    boundaries: tuple[GradeBoundary, ...]
    pension_grades: tuple[PensionGradeEntry, ...]
    prefectures: tuple[PrefectureTable, ...]
    bonus_rates: tuple[BonusRate, ...]
    checksum: str = ""
