"""
Calendar-month arithmetic for statutory insurance rules.

Responsibility
--------------
``YearMonth`` value object plus the date helpers every eligibility rule is
built from: month shifting with day clamping, leave/month overlap in days,
fiscal-year bucketing, and the statutory "reaches age N" month.

Age thresholds
--------------
By statute a person reaches age N on the day *before* their Nth birthday.
The month in which they reach N is therefore the month containing that
eve.  For anyone born on the 1st, the eve is the last day of the previous
month, so every threshold month moves back by one month compared to a
birthday on any other day.  ``reached_age_month`` is the only place this
rule is implemented.

Invariants enforced
-------------------
* No ``date.today()`` calls; every function takes its reference dates as
  parameters.
* ``YearMonth`` ordering is chronological, so plain comparison operators
  express "on or after the loss month" style rules.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True, order=True)
class YearMonth:
    """A calendar month. Immutable and ordered chronologically."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be 1-12, got {self.month}")

    @classmethod
    def of(cls, d: date) -> YearMonth:
        return cls(d.year, d.month)

    @classmethod
    def parse(cls, value: str) -> YearMonth:
        """Parse an ISO ``YYYY-MM`` string."""
        try:
            year_text, month_text = value.split("-")
            return cls(int(year_text), int(month_text))
        except ValueError as exc:
            raise ValueError(f"Invalid year-month: {value!r}") from exc

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.day_count)

    @property
    def day_count(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def shift(self, months: int) -> YearMonth:
        """Return the month ``months`` later (negative for earlier)."""
        index = self.year * 12 + (self.month - 1) + months
        return YearMonth(index // 12, index % 12 + 1)

    def contains(self, d: date) -> bool:
        return d.year == self.year and d.month == self.month

    def iso(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __str__(self) -> str:
        return self.iso()


def add_months(d: date, months: int) -> date:
    """Shift a date by whole months, clamping to the target month's last day."""
    target = YearMonth.of(d).shift(months)
    return date(target.year, target.month, min(d.day, target.day_count))


def months_between(start: YearMonth, end: YearMonth) -> list[YearMonth]:
    """All months from ``start`` to ``end`` inclusive (empty when end < start)."""
    months: list[YearMonth] = []
    current = start
    while current <= end:
        months.append(current)
        current = current.shift(1)
    return months


def overlap_days(start: date, end: date, month: YearMonth) -> int:
    """Number of days of the inclusive span ``start..end`` inside ``month``."""
    first = max(start, month.first_day)
    last = min(end, month.last_day)
    if last < first:
        return 0
    return (last - first).days + 1


def fiscal_year_of(d: date) -> int:
    """Japanese fiscal year (April to March) containing ``d``."""
    return d.year if d.month >= 4 else d.year - 1


def nth_birthday(birth_date: date, n: int) -> date:
    """The Nth birthday; a 29 February birth falls on 1 March in common years."""
    try:
        return birth_date.replace(year=birth_date.year + n)
    except ValueError:
        return date(birth_date.year + n, 3, 1)


def reached_age_month(birth_date: date, age: int) -> YearMonth:
    """Month in which the person reaches ``age`` (month of the birthday eve)."""
    eve = nth_birthday(birth_date, age) - timedelta(days=1)
    return YearMonth.of(eve)


def age_in_month(birth_date: date, month: YearMonth) -> int:
    """Statutory age during ``month``: the highest age reached by its end.

    Consistent with ``reached_age_month``: ``age_in_month(b, m) >= n`` holds
    exactly when ``m >= reached_age_month(b, n)``.
    """
    age = month.year - birth_date.year + 1
    while age > 0 and reached_age_month(birth_date, age) > month:
        age -= 1
    return max(age, 0)
