"""Immutable domain values: calendar months, yen rounding, employee records."""

from insurance_kernel.domain.dates import (
    YearMonth,
    add_months,
    age_in_month,
    fiscal_year_of,
    months_between,
    overlap_days,
    reached_age_month,
)
from insurance_kernel.domain.employee import (
    EmployeeRecord,
    EmploymentType,
    LeaveType,
    StudentType,
)

__all__ = [
    "EmployeeRecord",
    "EmploymentType",
    "LeaveType",
    "StudentType",
    "YearMonth",
    "add_months",
    "age_in_month",
    "fiscal_year_of",
    "months_between",
    "overlap_days",
    "reached_age_month",
]
