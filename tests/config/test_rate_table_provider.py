"""Tests for RateTableProvider lookups and the structural validator."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from insurance_config import DEFAULT_DATA_DIR
from insurance_config.loader import load_rate_tables
from insurance_config.provider import RateTableProvider
from insurance_config.schema import GradeBoundary, PrefectureTable
from insurance_config.validator import ensure_valid, validate_rate_tables
from insurance_kernel.exceptions import (
    BonusRateNotFoundError,
    GradeNotFoundError,
    PrefectureNotFoundError,
    RateTableIntegrityError,
)


class TestLookups:
    def test_grade_entry(self, provider):
        entry = provider.grade_entry("東京都", 20)
        assert entry.standard_monthly_wage == Decimal("260000")
        assert entry.health_insurance_total == Decimal("25766")
        assert entry.nursing_insurance_total == Decimal("29900")

    def test_unknown_prefecture(self, provider):
        with pytest.raises(PrefectureNotFoundError) as exc_info:
            provider.grade_entry("沖縄県", 20)
        assert exc_info.value.prefecture == "沖縄県"
        assert "東京都" in exc_info.value.available

    def test_unknown_grade(self, provider):
        with pytest.raises(GradeNotFoundError):
            provider.grade_entry("東京都", 51)

    def test_pension_entry_split_is_even(self, provider):
        entry = provider.pension_entry(17)
        assert entry.pension_insurance_employee_share == Decimal("23790")
        assert entry.pension_insurance_employer_share == Decimal("23790")
        assert entry.pension_insurance_total == Decimal("47580")

    def test_unknown_pension_grade(self, provider):
        with pytest.raises(GradeNotFoundError) as exc_info:
            provider.pension_entry(33)
        assert exc_info.value.table == "pension"

    def test_bonus_rate(self, provider):
        rate = provider.bonus_rate(2025, "東京都")
        assert rate.health_insurance_rate == Decimal("0.0991")

    def test_missing_bonus_rate(self, provider):
        with pytest.raises(BonusRateNotFoundError) as exc_info:
            provider.bonus_rate(2019, "東京都")
        assert exc_info.value.code == "BONUS_RATE_NOT_FOUND"

    def test_fiscal_years(self, provider):
        assert provider.fiscal_years() == (2025,)
        assert provider.latest_fiscal_year() == 2025

    def test_declared_grades(self, provider):
        assert provider.is_declared_grade(1)
        assert provider.is_declared_grade(50)
        assert not provider.is_declared_grade(51)


class TestValidator:
    def setup_method(self):
        self.tables = load_rate_tables(DEFAULT_DATA_DIR)

    def test_packaged_tables_are_valid(self):
        assert validate_rate_tables(self.tables) == []

    def test_open_bound_before_last_grade(self):
        boundaries = list(self.tables.boundaries)
        boundaries[10] = replace(boundaries[10], upper_bound=None)
        broken = replace(self.tables, boundaries=tuple(boundaries))
        errors = validate_rate_tables(broken)
        assert any("open upper bound" in e for e in errors)

    def test_grades_must_increase_by_one(self):
        boundaries = list(self.tables.boundaries)
        boundaries[5] = GradeBoundary(
            grade=99,
            lower_bound=boundaries[5].lower_bound,
            upper_bound=boundaries[5].upper_bound,
            standard_monthly_wage=boundaries[5].standard_monthly_wage,
        )
        broken = replace(self.tables, boundaries=tuple(boundaries))
        assert any("must increase by one" in e for e in validate_rate_tables(broken))

    def test_employee_share_above_total(self):
        tokyo = self.tables.prefectures[1]
        entries = list(tokyo.entries)
        entries[0] = replace(entries[0], health_insurance_employee_share=Decimal("999999"))
        prefectures = list(self.tables.prefectures)
        prefectures[1] = PrefectureTable(tokyo.prefecture, tuple(entries))
        broken = replace(self.tables, prefectures=tuple(prefectures))

        with pytest.raises(RateTableIntegrityError) as exc_info:
            ensure_valid(broken)
        assert any("health employee share exceeds total" in e for e in exc_info.value.errors)

    def test_empty_bonus_rates(self):
        broken = replace(self.tables, bonus_rates=())
        assert "bonus rates are empty" in validate_rate_tables(broken)

    def test_provider_built_from_custom_tables(self):
        custom = replace(
            self.tables,
            statutory=replace(self.tables.statutory, effective_from=date(2026, 3, 1)),
        )
        provider = RateTableProvider(custom)
        assert provider.statutory.effective_from == date(2026, 3, 1)
