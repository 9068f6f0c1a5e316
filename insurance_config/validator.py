"""
Structural validation of loaded rate tables.

``validate_rate_tables`` collects every violation instead of stopping at the
first, so a bad data drop is reported in one pass.  ``ensure_valid`` raises
``RateTableIntegrityError`` carrying the full list.
"""

from __future__ import annotations

from insurance_config.schema import RateTables
from insurance_kernel.exceptions import RateTableIntegrityError


def validate_boundaries(tables: RateTables) -> list[str]:
    errors: list[str] = []
    boundaries = tables.boundaries
    if not boundaries:
        return ["grade boundaries are empty"]

    for previous, current in zip(boundaries, boundaries[1:]):
        if current.grade != previous.grade + 1:
            errors.append(
                f"grade {current.grade} follows grade {previous.grade}; "
                f"grades must increase by one"
            )
        if previous.upper_bound is None:
            errors.append(f"grade {previous.grade} has an open upper bound but is not last")
        elif previous.upper_bound != current.lower_bound:
            errors.append(
                f"gap or overlap between grade {previous.grade} "
                f"(upper {previous.upper_bound}) and grade {current.grade} "
                f"(lower {current.lower_bound})"
            )

    for boundary in boundaries:
        if boundary.upper_bound is not None and boundary.upper_bound <= boundary.lower_bound:
            errors.append(f"grade {boundary.grade} has an empty range")
    return errors


def validate_prefecture_tables(tables: RateTables) -> list[str]:
    errors: list[str] = []
    declared = {b.grade for b in tables.boundaries}
    for table in tables.prefectures:
        grades = {e.grade for e in table.entries}
        missing = sorted(declared - grades)
        if missing:
            errors.append(f"{table.prefecture}: missing grades {missing}")
        for entry in table.entries:
            where = f"{table.prefecture} grade {entry.grade}"
            if entry.health_insurance_employee_share > entry.health_insurance_total:
                errors.append(f"{where}: health employee share exceeds total")
            if entry.nursing_insurance_employee_share > entry.nursing_insurance_total:
                errors.append(f"{where}: nursing employee share exceeds total")
            if entry.nursing_insurance_total < entry.health_insurance_total:
                errors.append(f"{where}: combined nursing total below health total")
    return errors


def validate_pension_grades(tables: RateTables) -> list[str]:
    errors: list[str] = []
    grades = [p.grade for p in tables.pension_grades]
    if grades != list(range(1, len(grades) + 1)):
        errors.append("pension grades must run 1..N without gaps")
    for entry in tables.pension_grades:
        if entry.pension_insurance_employee_share < 0:
            errors.append(f"pension grade {entry.grade}: negative share")
    return errors


def validate_bonus_rates(tables: RateTables) -> list[str]:
    if not tables.bonus_rates:
        return ["bonus rates are empty"]
    loaded = {t.prefecture for t in tables.prefectures}
    errors: list[str] = []
    for rate in tables.bonus_rates:
        if rate.prefecture not in loaded:
            errors.append(
                f"bonus rate for {rate.fiscal_year}/{rate.prefecture} has no prefecture table"
            )
    return errors


def validate_rate_tables(tables: RateTables) -> list[str]:
    """Return every structural violation found (empty when valid)."""
    return (
        validate_boundaries(tables)
        + validate_prefecture_tables(tables)
        + validate_pension_grades(tables)
        + validate_bonus_rates(tables)
    )


def ensure_valid(tables: RateTables) -> None:
    errors = validate_rate_tables(tables)
    if errors:
        raise RateTableIntegrityError(tuple(errors))
