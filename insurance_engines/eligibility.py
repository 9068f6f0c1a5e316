"""
EligibilityEngine -- health, nursing-care and pension coverage for one month.

Responsibility:
    Pure decision list over (employee, target month, employer headcount).
    The first matching rule wins; its flags are then gated by the age
    windows, so nursing is only ever true from the month the employee
    reaches 40 to the month before they reach 65, and pension only until
    the month before they reach 70.

Rule order:
     1. ELDERLY_CARE_TRANSFER     age >= 75 in the target month
     2. SMALL_EMPLOYER            headcount below the small-employer limit
     3. QUALIFICATION_LOST        target on/after the qualification-loss month
     4. NOT_YET_ENROLLED          target before the employment start month
     5. CHILDCARE_MATERNITY_LEAVE covered, premiums exempt for the window
     6. CARE_LEAVE                covered, premiums still payable
     7. SHORT_TERM_CONTRACT       contract of 1 or 2 months
     8. STUDENT_ELIGIBLE / STUDENT_EXCLUDED
     9. FULL_TIME / THREE_QUARTERS
    10. SHORT_TIME_WORKER         five-factor test
    11. NOT_ELIGIBLE

Invariants enforced:
    - Never raises for business edge cases; malformed input was already
      degraded to ``None`` by ``EmployeeRecord.from_mapping``.
    - No clock reads: ages are computed at the target month.
    - The result is a closed, frozen structure; callers never extend it.

Missing birth date:
    Age-based rules cannot be evaluated.  Rule 1 is skipped, nursing is
    reported false, pension true, and ``birth_date_missing`` is set so the
    caller can surface the gap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import NamedTuple

from insurance_config.schema import EligibilityThresholds
from insurance_engines.leave import LeaveExemption, compute_leave_exemption, is_on_leave
from insurance_engines.tracer import traced_engine
from insurance_kernel.domain.dates import YearMonth, add_months, age_in_month, reached_age_month
from insurance_kernel.domain.employee import (
    PART_TIME_STUDENT_TYPES,
    PREMIUM_EXEMPT_LEAVE_TYPES,
    EmployeeRecord,
    EmploymentType,
    LeaveType,
)
from insurance_kernel.logging_config import get_logger

logger = get_logger("engines.eligibility")


class EligibilityRule(str, Enum):
    """The rule that decided an evaluation."""

    ELDERLY_CARE_TRANSFER = "elderly_care_transfer"
    SMALL_EMPLOYER = "small_employer"
    QUALIFICATION_LOST = "qualification_lost"
    NOT_YET_ENROLLED = "not_yet_enrolled"
    CHILDCARE_MATERNITY_LEAVE = "childcare_maternity_leave"
    CARE_LEAVE = "care_leave"
    SHORT_TERM_CONTRACT = "short_term_contract"
    STUDENT_ELIGIBLE = "student_eligible"
    STUDENT_EXCLUDED = "student_excluded"
    FULL_TIME = "full_time"
    THREE_QUARTERS = "three_quarters"
    SHORT_TIME_WORKER = "short_time_worker"
    NOT_ELIGIBLE = "not_eligible"


_REASONS: dict[EligibilityRule, str] = {
    EligibilityRule.ELDERLY_CARE_TRANSFER: (
        "Aged 75 or over: moved to the late-stage elderly medical care system"
    ),
    EligibilityRule.SMALL_EMPLOYER: (
        "Employer has fewer than 5 employees: not a mandatorily covered workplace"
    ),
    EligibilityRule.QUALIFICATION_LOST: "Insured status lost by retirement or contract expiry",
    EligibilityRule.NOT_YET_ENROLLED: "Employment has not started in the target month",
    EligibilityRule.CHILDCARE_MATERNITY_LEAVE: (
        "On childcare or maternity leave: insured status continues, premiums exempt"
    ),
    EligibilityRule.CARE_LEAVE: (
        "On care leave: insured status continues, premiums remain payable"
    ),
    EligibilityRule.SHORT_TERM_CONTRACT: (
        "Employment contract of two months or less: excluded from coverage"
    ),
    EligibilityRule.STUDENT_ELIGIBLE: "Student meeting the working-hours and wage thresholds",
    EligibilityRule.STUDENT_EXCLUDED: "Students are excluded from coverage in principle",
    EligibilityRule.FULL_TIME: "Full-time employee",
    EligibilityRule.THREE_QUARTERS: (
        "Works at least three quarters of full-time hours and days"
    ),
    EligibilityRule.SHORT_TIME_WORKER: (
        "Short-time worker meeting all five requirements"
    ),
    EligibilityRule.NOT_ELIGIBLE: (
        "Below the three-quarters threshold and does not meet the five requirements"
    ),
}


@dataclass(frozen=True)
class EligibilityResult:
    """Coverage decision for one employee and one month.

    Month fields are ISO ``YYYY-MM`` strings; ``None`` when not applicable.
    The ``*_end_month`` fields name the last covered month;
    ``health_loss_month`` is the first month without health coverage (the
    month the employee reaches 75 and moves to elderly care).
    """

    health_insurance: bool
    nursing_insurance: bool
    pension_insurance: bool
    reason: str
    rule: EligibilityRule
    target_month: str
    nursing_start_month: str | None = None
    nursing_end_month: str | None = None
    pension_start_month: str | None = None
    pension_end_month: str | None = None
    health_loss_month: str | None = None
    qualification_loss_date: date | None = None
    leave_exemption_start_month: str | None = None
    leave_exemption_end_month: str | None = None
    fourteen_day_rule_months: tuple[str, ...] = ()
    bonus_exemption_months: tuple[str, ...] = ()
    premium_exempt: bool = False
    birth_date_missing: bool = False

    @property
    def is_insured(self) -> bool:
        return self.health_insurance or self.pension_insurance

    def is_bonus_exempt(self, month: YearMonth) -> bool:
        return month.iso() in self.bonus_exemption_months


@dataclass(frozen=True)
class _AgeWindows:
    nursing_start: YearMonth | None
    nursing_end: YearMonth | None
    pension_end: YearMonth | None
    health_loss: YearMonth | None


class _Decision(NamedTuple):
    rule: EligibilityRule
    covered: bool
    leave: LeaveExemption = LeaveExemption()


def _iso(month: YearMonth | None) -> str | None:
    return month.iso() if month is not None else None


def qualification_loss_date(employee: EmployeeRecord) -> date | None:
    """Earliest day insured status ends.

    Candidates are the day after the employment end date and the day after
    the contract expiry implied by ``start_date + expected_employment_months``.
    """
    candidates: list[date] = []
    if employee.end_date is not None:
        candidates.append(employee.end_date + timedelta(days=1))
    if employee.expected_employment_months > 0 and employee.start_date is not None:
        contract_end = add_months(
            employee.start_date, employee.expected_employment_months
        ) - timedelta(days=1)
        candidates.append(contract_end + timedelta(days=1))
    return min(candidates) if candidates else None


class EligibilityEngine:
    """Stateless evaluator; one instance may be shared across threads."""

    def __init__(self, thresholds: EligibilityThresholds | None = None) -> None:
        self._thresholds = thresholds or EligibilityThresholds()

    @property
    def thresholds(self) -> EligibilityThresholds:
        return self._thresholds

    def age_windows(self, birth_date: date | None) -> _AgeWindows:
        if birth_date is None:
            return _AgeWindows(None, None, None, None)
        t = self._thresholds
        return _AgeWindows(
            nursing_start=reached_age_month(birth_date, t.nursing_start_age),
            nursing_end=reached_age_month(birth_date, t.nursing_end_age).shift(-1),
            pension_end=reached_age_month(birth_date, t.pension_end_age).shift(-1),
            health_loss=reached_age_month(birth_date, t.elderly_care_age),
        )

    @traced_engine(
        "eligibility",
        "1.0",
        fingerprint_fields=("employee", "target_year", "target_month", "employer_headcount"),
    )
    def evaluate(
        self,
        employee: EmployeeRecord,
        target_year: int,
        target_month: int,
        employer_headcount: int,
    ) -> EligibilityResult:
        """Evaluate coverage for ``employee`` in ``target_year``/``target_month``."""
        target = YearMonth(target_year, target_month)
        windows = self.age_windows(employee.birth_date)
        loss_date = qualification_loss_date(employee)

        def result(decision: _Decision) -> EligibilityResult:
            rule, covered, leave = decision
            nursing = covered and self._nursing_applies(windows, target)
            pension = covered and self._pension_applies(windows, target)
            return EligibilityResult(
                health_insurance=covered,
                nursing_insurance=nursing,
                pension_insurance=pension,
                reason=_REASONS[rule],
                rule=rule,
                target_month=target.iso(),
                nursing_start_month=_iso(windows.nursing_start),
                nursing_end_month=_iso(windows.nursing_end),
                pension_start_month=(
                    YearMonth.of(employee.start_date).iso()
                    if employee.start_date is not None else None
                ),
                pension_end_month=_iso(windows.pension_end),
                health_loss_month=_iso(windows.health_loss),
                qualification_loss_date=loss_date,
                leave_exemption_start_month=_iso(leave.window_start),
                leave_exemption_end_month=_iso(leave.window_end),
                fourteen_day_rule_months=tuple(m.iso() for m in leave.fourteen_day_months),
                bonus_exemption_months=tuple(m.iso() for m in leave.bonus_exemption_months),
                premium_exempt=(
                    rule is EligibilityRule.CHILDCARE_MATERNITY_LEAVE
                    and leave.is_premium_exempt(target)
                ),
                birth_date_missing=employee.birth_date is None,
            )

        evaluated = result(self._decide(employee, target, employer_headcount, loss_date))

        logger.info("eligibility_evaluated", extra={
            "employee_id": employee.employee_id,
            "target_month": evaluated.target_month,
            "rule": evaluated.rule.value,
            "health_insurance": evaluated.health_insurance,
            "nursing_insurance": evaluated.nursing_insurance,
            "pension_insurance": evaluated.pension_insurance,
            "premium_exempt": evaluated.premium_exempt,
        })
        if evaluated.birth_date_missing:
            logger.warning("eligibility_birth_date_missing", extra={
                "employee_id": employee.employee_id,
                "target_month": evaluated.target_month,
            })
        return evaluated

    # ------------------------------------------------------------------
    # Rule cascade
    # ------------------------------------------------------------------

    def _decide(
        self,
        employee: EmployeeRecord,
        target: YearMonth,
        employer_headcount: int,
        loss_date: date | None,
    ) -> _Decision:
        t = self._thresholds

        if (
            employee.birth_date is not None
            and age_in_month(employee.birth_date, target) >= t.elderly_care_age
        ):
            return _by_rule(EligibilityRule.ELDERLY_CARE_TRANSFER)

        if employer_headcount < t.small_employer_headcount:
            return _by_rule(EligibilityRule.SMALL_EMPLOYER)

        if loss_date is not None and target >= YearMonth.of(loss_date):
            return _by_rule(EligibilityRule.QUALIFICATION_LOST)

        if employee.start_date is not None and target < YearMonth.of(employee.start_date):
            return _by_rule(EligibilityRule.NOT_YET_ENROLLED)

        if is_on_leave(employee, target):
            if employee.leave_type in PREMIUM_EXEMPT_LEAVE_TYPES:
                leave = compute_leave_exemption(employee, target, t)
                return _Decision(EligibilityRule.CHILDCARE_MATERNITY_LEAVE, True, leave)
            if employee.leave_type is LeaveType.CARE:
                return _by_rule(EligibilityRule.CARE_LEAVE)

        if 0 < employee.expected_employment_months <= t.short_contract_max_months:
            return _by_rule(EligibilityRule.SHORT_TERM_CONTRACT)

        if employee.is_student_worker:
            if self._student_eligible(employee):
                return _by_rule(EligibilityRule.STUDENT_ELIGIBLE)
            return _by_rule(EligibilityRule.STUDENT_EXCLUDED)

        if employee.employment_type is EmploymentType.FULL_TIME:
            return _by_rule(EligibilityRule.FULL_TIME)
        if self._meets_three_quarters(employee):
            return _by_rule(EligibilityRule.THREE_QUARTERS)

        if self._meets_five_factors(employee, employer_headcount):
            return _by_rule(EligibilityRule.SHORT_TIME_WORKER)

        return _by_rule(EligibilityRule.NOT_ELIGIBLE)

    def _meets_three_quarters(self, employee: EmployeeRecord) -> bool:
        t = self._thresholds
        return (
            employee.weekly_hours >= t.full_time_weekly_hours
            and employee.monthly_work_days >= t.full_time_monthly_days
        )

    def _meets_short_time_floor(self, employee: EmployeeRecord) -> bool:
        t = self._thresholds
        return (
            employee.weekly_hours >= t.short_time_weekly_hours
            and employee.monthly_wage >= t.short_time_monthly_wage
        )

    def _student_eligible(self, employee: EmployeeRecord) -> bool:
        if employee.effective_student_type in PART_TIME_STUDENT_TYPES:
            return self._meets_short_time_floor(employee)
        return self._meets_three_quarters(employee)

    def _meets_five_factors(self, employee: EmployeeRecord, employer_headcount: int) -> bool:
        t = self._thresholds
        months = employee.expected_employment_months
        return (
            self._meets_short_time_floor(employee)
            and (months == 0 or months > t.short_contract_max_months)
            and employer_headcount >= t.specified_employer_headcount
        )

    # ------------------------------------------------------------------
    # Age gates
    # ------------------------------------------------------------------

    @staticmethod
    def _nursing_applies(windows: _AgeWindows, target: YearMonth) -> bool:
        if windows.nursing_start is None or windows.nursing_end is None:
            return False
        return windows.nursing_start <= target <= windows.nursing_end

    @staticmethod
    def _pension_applies(windows: _AgeWindows, target: YearMonth) -> bool:
        if windows.pension_end is None:
            return True
        return target <= windows.pension_end


_COVERED_RULES = frozenset({
    EligibilityRule.CARE_LEAVE,
    EligibilityRule.STUDENT_ELIGIBLE,
    EligibilityRule.FULL_TIME,
    EligibilityRule.THREE_QUARTERS,
    EligibilityRule.SHORT_TIME_WORKER,
})


def _by_rule(rule: EligibilityRule) -> _Decision:
    return _Decision(rule, rule in _COVERED_RULES)
