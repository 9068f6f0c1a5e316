"""
Typed Exception Hierarchy for the Insurance Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the engines (forms, batch statement generators) must be able to
tell "the rate tables are broken" apart from "the operator has not picked a
grade yet".  The second case is NOT an exception at all -- the engines return
``None`` -- so anything raised from this module means the environment is
misconfigured or the input record itself is contradictory.

Every exception:
  1. Has a TYPED class (catch by type, not by message)
  2. Has a ``code`` class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (survives logging and serialization)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InsuranceKernelError (base)
    |
    +-- ConfigurationError
    |   +-- PrefectureNotFoundError
    |   +-- GradeNotFoundError
    |   +-- BonusRateNotFoundError
    |   +-- RateTableIntegrityError
    |
    +-- EmployeeRecordError
    |   +-- InvalidEmploymentPeriodError
    |
    +-- GradeCombinationError
        +-- InvalidGradeCombinationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | PREFECTURE_NOT_FOUND        | No grade table loaded for the prefecture
                | GRADE_NOT_FOUND             | Declared grade missing from a table
                | BONUS_RATE_NOT_FOUND        | No bonus rate row for fiscal year/prefecture
                | RATE_TABLE_INTEGRITY        | Loaded tables violate structural invariants
----------------|-----------------------------|-----------------------------------------
Employee        | INVALID_EMPLOYMENT_PERIOD   | endDate earlier than startDate
----------------|-----------------------------|-----------------------------------------
Grades          | INVALID_GRADE_COMBINATION   | Health/pension grade pair is not official
"""

from __future__ import annotations


class InsuranceKernelError(Exception):
    """
    Base exception for all insurance kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INSURANCE_KERNEL_ERROR"


# Configuration exceptions


class ConfigurationError(InsuranceKernelError):
    """Base exception for missing or malformed rate-table configuration."""

    code: str = "CONFIGURATION_ERROR"


class PrefectureNotFoundError(ConfigurationError):
    """No grade table is loaded for the requested prefecture."""

    code: str = "PREFECTURE_NOT_FOUND"

    def __init__(self, prefecture: str, available: tuple[str, ...] = ()):
        self.prefecture = prefecture
        self.available = available
        super().__init__(f"No rate table loaded for prefecture: {prefecture}")


class GradeNotFoundError(ConfigurationError):
    """A grade declared by the boundaries has no entry in a rate table."""

    code: str = "GRADE_NOT_FOUND"

    def __init__(self, table: str, grade: int):
        self.table = table
        self.grade = grade
        super().__init__(f"Grade {grade} not found in {table} table")


class BonusRateNotFoundError(ConfigurationError):
    """No bonus premium rate row exists for the fiscal year and prefecture."""

    code: str = "BONUS_RATE_NOT_FOUND"

    def __init__(self, fiscal_year: int, prefecture: str):
        self.fiscal_year = fiscal_year
        self.prefecture = prefecture
        super().__init__(
            f"No bonus rate for fiscal year {fiscal_year}, prefecture {prefecture}"
        )


class RateTableIntegrityError(ConfigurationError):
    """Loaded rate tables violate one or more structural invariants."""

    code: str = "RATE_TABLE_INTEGRITY"

    def __init__(self, errors: tuple[str, ...]):
        self.errors = errors
        summary = "; ".join(errors[:5])
        more = f" (+{len(errors) - 5} more)" if len(errors) > 5 else ""
        super().__init__(f"Rate tables failed validation: {summary}{more}")


# Employee record exceptions


class EmployeeRecordError(InsuranceKernelError):
    """Base exception for contradictory employee records."""

    code: str = "EMPLOYEE_RECORD_ERROR"


class InvalidEmploymentPeriodError(EmployeeRecordError):
    """Employment end date precedes the start date."""

    code: str = "INVALID_EMPLOYMENT_PERIOD"

    def __init__(self, employee_id: str, start_date: str, end_date: str):
        self.employee_id = employee_id
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Employee {employee_id}: end date {end_date} "
            f"is before start date {start_date}"
        )


# Grade combination exceptions


class GradeCombinationError(InsuranceKernelError):
    """Base exception for health/pension grade pairing problems."""

    code: str = "GRADE_COMBINATION_ERROR"


class InvalidGradeCombinationError(GradeCombinationError):
    """The health and pension grades do not form an official pair."""

    code: str = "INVALID_GRADE_COMBINATION"

    def __init__(
        self,
        health_grade: int,
        pension_grade: int,
        expected_pension_grade: int | None,
    ):
        self.health_grade = health_grade
        self.pension_grade = pension_grade
        self.expected_pension_grade = expected_pension_grade
        super().__init__(
            f"Health grade {health_grade} cannot be paired with pension grade "
            f"{pension_grade} (expected {expected_pension_grade})"
        )
