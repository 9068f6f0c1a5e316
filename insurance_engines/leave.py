"""
Leave-exemption windows for childcare and maternity leave.

Responsibility:
    Given an employee on statutory leave and a target month, compute

    * the premium-exemption window: from the month the leave starts to the
      month before the month containing the day after the leave ends
      (open-ended leave has no end month yet);
    * the 14-day-rule months: every calendar month the leave span covers
      for at least ``fourteen_day_rule_days`` days, scanned across the whole
      span (through the target month when the leave is open-ended);
    * the bonus-exemption months: months of bonus payments whose month-end
      falls inside a continuous leave of at least
      ``bonus_exemption_min_leave_days`` days (open-ended leave qualifies).

Architecture position:
    Engine helper.  Called by ``EligibilityEngine`` only; pure, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from insurance_config.schema import EligibilityThresholds
from insurance_kernel.domain.dates import YearMonth, months_between, overlap_days
from insurance_kernel.domain.employee import EmployeeRecord


@dataclass(frozen=True)
class LeaveExemption:
    """Exemption metadata for one leave span."""

    window_start: YearMonth | None = None
    window_end: YearMonth | None = None
    open_ended: bool = False
    fourteen_day_months: tuple[YearMonth, ...] = ()
    bonus_exemption_months: tuple[YearMonth, ...] = ()

    def in_window(self, month: YearMonth) -> bool:
        if self.window_start is None or month < self.window_start:
            return False
        return self.open_ended or (self.window_end is not None and month <= self.window_end)

    def is_premium_exempt(self, month: YearMonth) -> bool:
        return self.in_window(month) or month in self.fourteen_day_months


def is_on_leave(employee: EmployeeRecord, target: YearMonth) -> bool:
    """True when the target month falls between the leave start and end months."""
    if employee.leave_start_date is None:
        return False
    if target < YearMonth.of(employee.leave_start_date):
        return False
    if employee.leave_end_date is None:
        return True
    return target <= YearMonth.of(employee.leave_end_date)


def leave_length_days(start: date, end: date | None) -> int | None:
    """Inclusive length of the leave; None while it is open-ended."""
    if end is None:
        return None
    return (end - start).days + 1


def exemption_window(start: date, end: date | None) -> tuple[YearMonth | None, YearMonth | None]:
    """First and last exempt month of a leave span.

    The last month is the month before the one containing the day after the
    leave ends.  A leave ending before the end of its first month yields no
    window.
    """
    first = YearMonth.of(start)
    if end is None:
        return first, None
    last = YearMonth.of(end + timedelta(days=1)).shift(-1)
    if last < first:
        return None, None
    return first, last


def fourteen_day_months(
    start: date,
    end: date,
    min_days: int,
) -> tuple[YearMonth, ...]:
    months = months_between(YearMonth.of(start), YearMonth.of(end))
    return tuple(m for m in months if overlap_days(start, end, m) >= min_days)


def bonus_exemption_months(
    start: date,
    end: date | None,
    bonus_dates: tuple[date, ...],
    min_leave_days: int,
) -> tuple[YearMonth, ...]:
    length = leave_length_days(start, end)
    if length is not None and length < min_leave_days:
        return ()
    months: set[YearMonth] = set()
    for paid_on in bonus_dates:
        month_end = YearMonth.of(paid_on).last_day
        if month_end < start:
            continue
        if end is not None and month_end > end:
            continue
        months.add(YearMonth.of(paid_on))
    return tuple(sorted(months))


def compute_leave_exemption(
    employee: EmployeeRecord,
    target: YearMonth,
    thresholds: EligibilityThresholds,
) -> LeaveExemption:
    """Exemption metadata for the employee's current leave span."""
    start = employee.leave_start_date
    if start is None:
        return LeaveExemption()
    end = employee.leave_end_date

    window_start, window_end = exemption_window(start, end)
    scan_end = end if end is not None else target.last_day
    fourteen = ()
    if scan_end >= start:
        fourteen = fourteen_day_months(start, scan_end, thresholds.fourteen_day_rule_days)

    return LeaveExemption(
        window_start=window_start,
        window_end=window_end,
        open_ended=end is None and window_start is not None,
        fourteen_day_months=fourteen,
        bonus_exemption_months=bonus_exemption_months(
            start,
            end,
            employee.bonus_payment_dates,
            thresholds.bonus_exemption_min_leave_days,
        ),
    )
