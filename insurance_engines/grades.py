"""
Grade resolution and health/pension grade pairing.

``GradeResolver`` maps a remuneration figure to a health-insurance grade by
scanning the ordered boundary list.  The pairing table maps each of the 50
health grades to the single pension grade it may be combined with:

    health 1-4   -> pension 1
    health 5-34  -> pension health-3 (5->2, 6->3, ... 34->31)
    health 35-50 -> pension 32

Pure functions, no I/O.
"""

from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType
from typing import Sequence

from insurance_config.schema import GradeBoundary
from insurance_kernel.domain.rounding import round_to_unit
from insurance_kernel.exceptions import InvalidGradeCombinationError
from insurance_kernel.logging_config import get_logger

logger = get_logger("engines.grades")

HEALTH_TO_PENSION_GRADE: MappingProxyType[int, int] = MappingProxyType({
    **{grade: 1 for grade in range(1, 5)},
    **{grade: grade - 3 for grade in range(5, 35)},
    **{grade: 32 for grade in range(35, 51)},
})

GRADE_COMBINATIONS: frozenset[tuple[int, int]] = frozenset(HEALTH_TO_PENSION_GRADE.items())


def pension_grade_for(health_grade: int) -> int | None:
    """Pension grade paired with ``health_grade``; None for unknown grades."""
    return HEALTH_TO_PENSION_GRADE.get(health_grade)


def check_combination(health_grade: int, pension_grade: int) -> bool:
    """True when the two grades form an official pair."""
    return (health_grade, pension_grade) in GRADE_COMBINATIONS


def validate_grade_pair(health_grade: int | None, pension_grade: int | None) -> None:
    """Reject a save when both grades are set but do not pair.

    Raises:
        InvalidGradeCombinationError: If both grades are set and invalid.
    """
    if not health_grade or not pension_grade:
        return
    if not check_combination(health_grade, pension_grade):
        raise InvalidGradeCombinationError(
            health_grade, pension_grade, pension_grade_for(health_grade)
        )


def monthly_remuneration(
    base_salary: Decimal,
    allowances: Decimal,
    commuting_allowance: Decimal,
) -> Decimal:
    """Total monthly remuneration used for grade determination."""
    return base_salary + allowances + commuting_allowance


class GradeResolver:
    """Resolve remuneration to a grade over ordered, contiguous boundaries."""

    def __init__(
        self,
        boundaries: Sequence[GradeBoundary],
        rounding_unit: Decimal = Decimal("1000"),
    ) -> None:
        if not boundaries:
            raise ValueError("GradeResolver requires at least one boundary")
        self._boundaries = tuple(sorted(boundaries, key=lambda b: b.grade))
        self._rounding_unit = rounding_unit

    @property
    def highest_grade(self) -> int:
        return self._boundaries[-1].grade

    @property
    def lowest_grade(self) -> int:
        return self._boundaries[0].grade

    def resolve_grade(self, standard_monthly_wage: Decimal) -> int:
        """First grade whose range contains the wage.

        Wages above every range resolve to the highest grade, wages below
        every range to the lowest.
        """
        for boundary in self._boundaries:
            if boundary.contains(standard_monthly_wage):
                return boundary.grade
        if standard_monthly_wage < self._boundaries[0].lower_bound:
            return self.lowest_grade
        return self.highest_grade

    def boundary_for(self, grade: int) -> GradeBoundary | None:
        for boundary in self._boundaries:
            if boundary.grade == grade:
                return boundary
        return None

    def resolve_remuneration(self, remuneration: Decimal) -> tuple[int, Decimal]:
        """Round remuneration to the nearest unit, then resolve grade and wage."""
        rounded = round_to_unit(remuneration, self._rounding_unit)
        grade = self.resolve_grade(rounded)
        boundary = self.boundary_for(grade)
        logger.debug("remuneration_resolved", extra={
            "remuneration": str(remuneration),
            "rounded": str(rounded),
            "grade": grade,
        })
        return grade, boundary.standard_monthly_wage
