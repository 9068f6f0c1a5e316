"""
RateTableProvider -- read-only lookups over loaded rate tables.

Responsibility:
    Wraps a validated ``RateTables`` aggregate in indexed, read-only maps and
    exposes the lookups the engines need.  A provider is built once per
    process (see ``insurance_config.load_rate_table_provider``) and passed
    explicitly to every engine; there is no module-level instance.

Invariants enforced:
    - Immutability: internal maps are ``MappingProxyType`` views over dicts
      built in ``__init__`` and never touched again, so concurrent readers
      need no locking.
    - Every failed lookup raises a ``ConfigurationError`` subclass with the
      missing key attached.
"""

from __future__ import annotations

from types import MappingProxyType

from insurance_config.schema import (
    BonusRate,
    GradeBoundary,
    GradeTableEntry,
    PensionGradeEntry,
    RateTables,
    StatutoryConstants,
)
from insurance_kernel.exceptions import (
    BonusRateNotFoundError,
    GradeNotFoundError,
    PrefectureNotFoundError,
)


class RateTableProvider:
    """Indexed, immutable view of the rate tables."""

    def __init__(self, tables: RateTables) -> None:
        self._tables = tables
        self._grade_tables = MappingProxyType({
            table.prefecture: MappingProxyType({e.grade: e for e in table.entries})
            for table in tables.prefectures
        })
        self._pension = MappingProxyType({p.grade: p for p in tables.pension_grades})
        self._bonus_rates = MappingProxyType({
            (r.fiscal_year, r.prefecture): r for r in tables.bonus_rates
        })
        self._declared_grades = frozenset(b.grade for b in tables.boundaries)

    @property
    def statutory(self) -> StatutoryConstants:
        return self._tables.statutory

    @property
    def boundaries(self) -> tuple[GradeBoundary, ...]:
        return self._tables.boundaries

    @property
    def checksum(self) -> str:
        return self._tables.checksum

    def prefectures(self) -> tuple[str, ...]:
        return tuple(self._grade_tables)

    def fiscal_years(self) -> tuple[int, ...]:
        return tuple(sorted({year for year, _ in self._bonus_rates}))

    def latest_fiscal_year(self) -> int | None:
        years = self.fiscal_years()
        return years[-1] if years else None

    def is_declared_grade(self, grade: int) -> bool:
        """True when ``grade`` is one of the grades the boundaries define."""
        return grade in self._declared_grades

    def grade_entry(self, prefecture: str, grade: int) -> GradeTableEntry:
        table = self._grade_tables.get(prefecture)
        if table is None:
            raise PrefectureNotFoundError(prefecture, self.prefectures())
        entry = table.get(grade)
        if entry is None:
            raise GradeNotFoundError(prefecture, grade)
        return entry

    def pension_entry(self, pension_grade: int) -> PensionGradeEntry:
        entry = self._pension.get(pension_grade)
        if entry is None:
            raise GradeNotFoundError("pension", pension_grade)
        return entry

    def bonus_rate(self, fiscal_year: int, prefecture: str) -> BonusRate:
        rate = self._bonus_rates.get((fiscal_year, prefecture))
        if rate is None:
            raise BonusRateNotFoundError(fiscal_year, prefecture)
        return rate
