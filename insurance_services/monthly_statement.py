"""
insurance_services.monthly_statement -- company-wide premium statement for one month.

Responsibility:
    Compose ``EligibilityEngine`` and ``PremiumCalculator`` over a roster of
    employees for one prefecture and one month, and total the result the
    way the monthly payment notice is checked.

Architecture position:
    Services -- orchestration over the pure engines.  Holds no state between
    calls; the rate-table provider is injected at construction.

Per-row flow:
    1. Skip employees not employed in the month.
    2. Evaluate eligibility; skip employees insured for neither health nor
       pension.
    3. Calculate the monthly premium for the entry's grade.  No grade ->
       status INCOMPLETE with no monthly amounts.
    4. Keep only the insurances whose flags are true.  A premium-exempt
       month (leave window or 14-day month) zeroes everything, status EXEMPT.
    5. For a bonus entry, calculate bonus premiums with the rate row of the
       payment's fiscal year and the prior fiscal-year cumulative total;
       zero them in a bonus-exemption or premium-exempt month.

Concurrency:
    Rows are independent.  ``max_workers > 1`` evaluates them in a thread
    pool; results are collected in input order.

Failure modes:
    - ``PrefectureNotFoundError`` / ``GradeNotFoundError`` /
      ``BonusRateNotFoundError`` propagate: a statement is never produced
      from incomplete rate tables.

Usage:
    provider = load_rate_table_provider()
    service = MonthlyStatementService(provider, "東京都", employer_headcount=120)
    statement = service.build_statement(entries, 2025, 6)
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from insurance_config.provider import RateTableProvider
from insurance_engines.bonus import BonusInsuranceResult
from insurance_engines.eligibility import EligibilityEngine, EligibilityResult
from insurance_engines.premium import PremiumBreakdown, PremiumCalculator
from insurance_kernel.domain.dates import YearMonth, age_in_month, fiscal_year_of
from insurance_kernel.domain.employee import EmployeeRecord, LeaveType
from insurance_kernel.domain.rounding import ZERO
from insurance_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.monthly_statement")

_LEAVE_NOTES = {
    LeaveType.CHILDCARE: "Premiums exempt: childcare leave",
    LeaveType.MATERNITY: "Premiums exempt: maternity leave",
}


class RowStatus(str, Enum):
    CALCULATED = "calculated"
    EXEMPT = "exempt"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class StatementEntry:
    """One roster line: the employee plus the month's payroll facts."""

    employee: EmployeeRecord
    grade: int | None = None
    bonus_amount: Decimal | None = None
    bonus_paid_on: date | None = None
    bonus_payments_per_year: int = 0
    prior_fiscal_year_bonus_total: Decimal = ZERO


@dataclass(frozen=True)
class StatementRow:
    employee_id: str
    status: RowStatus
    eligibility: EligibilityResult
    age: int | None = None
    premium: PremiumBreakdown | None = None
    bonus: BonusInsuranceResult | None = None
    note: str = ""


@dataclass(frozen=True)
class StatementSummary:
    """Company totals per insurance and side."""

    row_count: int = 0
    health_insurance_employee: Decimal = ZERO
    health_insurance_employer: Decimal = ZERO
    nursing_insurance_employee: Decimal = ZERO
    nursing_insurance_employer: Decimal = ZERO
    pension_insurance_employee: Decimal = ZERO
    pension_insurance_employer: Decimal = ZERO
    employee_total: Decimal = ZERO
    employer_total: Decimal = ZERO
    child_support_levy: Decimal = ZERO
    bonus_employee_total: Decimal = ZERO
    bonus_employer_total: Decimal = ZERO
    bonus_child_support_levy: Decimal = ZERO

    @property
    def grand_total(self) -> Decimal:
        """Everything the employer remits for the month."""
        return (
            self.employee_total
            + self.employer_total
            + self.child_support_levy
            + self.bonus_employee_total
            + self.bonus_employer_total
            + self.bonus_child_support_levy
        )

    @classmethod
    def from_rows(cls, rows: Sequence[StatementRow]) -> StatementSummary:
        totals: dict[str, Decimal] = {
            name: ZERO
            for name in (
                "health_insurance_employee", "health_insurance_employer",
                "nursing_insurance_employee", "nursing_insurance_employer",
                "pension_insurance_employee", "pension_insurance_employer",
                "employee_total", "employer_total", "child_support_levy",
            )
        }
        bonus_employee = bonus_employer = bonus_levy = ZERO
        for row in rows:
            if row.premium is not None:
                for name in totals:
                    totals[name] += getattr(row.premium, name)
            if row.bonus is not None:
                bonus_employee += row.bonus.employee_total
                bonus_employer += row.bonus.employer_total
                bonus_levy += row.bonus.child_support_levy
        return cls(
            row_count=len(rows),
            bonus_employee_total=bonus_employee,
            bonus_employer_total=bonus_employer,
            bonus_child_support_levy=bonus_levy,
            **totals,
        )


@dataclass(frozen=True)
class MonthlyStatement:
    prefecture: str
    target_month: str
    rows: tuple[StatementRow, ...]
    summary: StatementSummary
    skipped_employee_ids: tuple[str, ...] = ()


def is_employed_in(employee: EmployeeRecord, month: YearMonth) -> bool:
    """True when the employment period overlaps the month."""
    if employee.start_date is not None and employee.start_date > month.last_day:
        return False
    if employee.end_date is not None and employee.end_date < month.first_day:
        return False
    return True


class MonthlyStatementService:
    """Builds monthly statements for one prefecture and employer."""

    def __init__(
        self,
        provider: RateTableProvider,
        prefecture: str,
        employer_headcount: int,
    ) -> None:
        self._provider = provider
        self._prefecture = prefecture
        self._headcount = employer_headcount
        self._eligibility = EligibilityEngine(provider.statutory.eligibility)
        self._calculator = PremiumCalculator(provider)

    def build_statement(
        self,
        entries: Sequence[StatementEntry],
        year: int,
        month: int,
        max_workers: int = 1,
    ) -> MonthlyStatement:
        target = YearMonth(year, month)
        batch_id = str(uuid.uuid4())

        with LogContext.bind(batch_id=batch_id, target_month=target.iso()):
            logger.info("monthly_statement_started", extra={
                "prefecture": self._prefecture,
                "entry_count": len(entries),
                "max_workers": max_workers,
                "config_checksum": self._provider.checksum,
            })

            if max_workers > 1:
                with ThreadPoolExecutor(max_workers=max_workers) as executor:
                    futures = [
                        executor.submit(
                            contextvars.copy_context().run, self._build_row, entry, target
                        )
                        for entry in entries
                    ]
                    results = [f.result() for f in futures]
            else:
                results = [self._build_row(entry, target) for entry in entries]

            rows = tuple(row for row in results if row is not None)
            skipped = tuple(
                entry.employee.employee_id
                for entry, row in zip(entries, results)
                if row is None
            )
            summary = StatementSummary.from_rows(rows)

            logger.info("monthly_statement_completed", extra={
                "prefecture": self._prefecture,
                "row_count": len(rows),
                "skipped_count": len(skipped),
                "incomplete_count": sum(1 for r in rows if r.status is RowStatus.INCOMPLETE),
                "employee_total": str(summary.employee_total),
                "employer_total": str(summary.employer_total),
            })

        return MonthlyStatement(
            prefecture=self._prefecture,
            target_month=target.iso(),
            rows=rows,
            summary=summary,
            skipped_employee_ids=skipped,
        )

    def _build_row(self, entry: StatementEntry, target: YearMonth) -> StatementRow | None:
        employee = entry.employee
        with LogContext.bind(employee_id=employee.employee_id):
            if not is_employed_in(employee, target):
                logger.debug("statement_row_skipped", extra={"reason": "not_employed"})
                return None

            eligibility = self._eligibility.evaluate(
                employee,
                target_year=target.year,
                target_month=target.month,
                employer_headcount=self._headcount,
            )
            if not eligibility.is_insured:
                logger.debug("statement_row_skipped", extra={
                    "reason": "not_insured",
                    "rule": eligibility.rule.value,
                })
                return None

            age = None
            if employee.birth_date is not None:
                age = age_in_month(employee.birth_date, target)

            status = RowStatus.CALCULATED
            note = ""
            premium = self._calculator.calculate(self._prefecture, entry.grade, age)
            if premium is None:
                status = RowStatus.INCOMPLETE
                note = "Standard monthly wage grade not set"
            else:
                premium = premium.restricted_to(
                    health=eligibility.health_insurance,
                    nursing=eligibility.nursing_insurance,
                    pension=eligibility.pension_insurance,
                )

            if eligibility.premium_exempt:
                status = RowStatus.EXEMPT
                note = _LEAVE_NOTES.get(employee.leave_type, "Premiums exempt: leave")
                if premium is not None:
                    premium = premium.zeroed()

            bonus = self._bonus_for(entry, target, age, eligibility)

        return StatementRow(
            employee_id=employee.employee_id,
            status=status,
            eligibility=eligibility,
            age=age,
            premium=premium,
            bonus=bonus,
            note=note,
        )

    def _bonus_for(
        self,
        entry: StatementEntry,
        target: YearMonth,
        age: int | None,
        eligibility: EligibilityResult,
    ) -> BonusInsuranceResult | None:
        if not entry.bonus_amount:
            return None
        paid_on = entry.bonus_paid_on or target.first_day
        paid_month = YearMonth.of(paid_on)
        if paid_month != target:
            # Exemptions and age gates follow the month the bonus was paid
            eligibility = self._eligibility.evaluate(
                entry.employee,
                target_year=paid_month.year,
                target_month=paid_month.month,
                employer_headcount=self._headcount,
            )
            age = None
            if entry.employee.birth_date is not None:
                age = age_in_month(entry.employee.birth_date, paid_month)
        bonus = self._calculator.calculate_bonus(
            entry.bonus_amount,
            self._prefecture,
            age,
            entry.bonus_payments_per_year,
            entry.prior_fiscal_year_bonus_total,
            fiscal_year=fiscal_year_of(paid_on),
        )
        if bonus is None:
            return None
        if eligibility.premium_exempt or eligibility.is_bonus_exempt(paid_month):
            return bonus.zeroed()
        return bonus.restricted_to(
            health=eligibility.health_insurance,
            nursing=eligibility.nursing_insurance,
            pension=eligibility.pension_insurance,
        )
