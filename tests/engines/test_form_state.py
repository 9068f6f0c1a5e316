"""Tests for the derived insurance form fields reducer."""

from datetime import date
from decimal import Decimal

from insurance_engines.form_state import InsuranceFormInput, derive_derived_fields


def _form(**overrides):
    fields = {
        "target_year": 2025,
        "target_month": 6,
        "prefecture": "東京都",
        "birth_date": date(1980, 5, 5),
        "base_salary": Decimal("240000"),
        "allowances": Decimal("10000"),
        "commuting_allowance": Decimal("5000"),
    }
    fields.update(overrides)
    return InsuranceFormInput(**fields)


class TestDerivedFields:
    def test_suggests_grade_from_remuneration(self, provider):
        derived = derive_derived_fields(_form(), provider)
        assert derived.monthly_remuneration == Decimal("255000")
        assert derived.suggested_grade == 20
        assert derived.suggested_standard_monthly_wage == Decimal("260000")
        assert derived.expected_pension_grade == 17

    def test_age_and_nursing(self, provider):
        derived = derive_derived_fields(_form(), provider)
        assert derived.age == 45
        assert derived.nursing_applicable

        young = derive_derived_fields(_form(birth_date=date(1995, 1, 1)), provider)
        assert not young.nursing_applicable

    def test_missing_birth_date(self, provider):
        derived = derive_derived_fields(_form(birth_date=None), provider)
        assert derived.age is None
        assert not derived.nursing_applicable

    def test_selected_grade_drives_pension_grade(self, provider):
        derived = derive_derived_fields(
            _form(selected_grade=3, selected_pension_grade=1), provider
        )
        assert derived.selected_standard_monthly_wage == Decimal("78000")
        assert derived.expected_pension_grade == 1
        assert derived.combination_valid is True

    def test_invalid_selected_pair(self, provider):
        derived = derive_derived_fields(
            _form(selected_grade=20, selected_pension_grade=18), provider
        )
        assert derived.combination_valid is False

    def test_combination_unknown_until_both_selected(self, provider):
        derived = derive_derived_fields(_form(selected_grade=20), provider)
        assert derived.combination_valid is None

    def test_no_remuneration_no_suggestion(self, provider):
        derived = derive_derived_fields(
            _form(
                base_salary=Decimal("0"),
                allowances=Decimal("0"),
                commuting_allowance=Decimal("0"),
            ),
            provider,
        )
        assert derived.suggested_grade is None
        assert derived.expected_pension_grade is None


class TestBonusRouting:
    def test_three_bonuses_go_to_bonus_path(self, provider):
        derived = derive_derived_fields(
            _form(
                bonus_amount=Decimal("300500"),
                bonus_payments_per_year=3,
                is_bonus_month=True,
            ),
            provider,
        )
        assert not derived.bonus_as_remuneration
        assert derived.standard_bonus_amount == Decimal("300000")
        assert derived.monthly_remuneration == Decimal("255000")

    def test_four_bonuses_become_remuneration(self, provider):
        derived = derive_derived_fields(
            _form(
                bonus_amount=Decimal("100000"),
                bonus_payments_per_year=4,
                is_bonus_month=True,
            ),
            provider,
        )
        assert derived.bonus_as_remuneration
        assert derived.standard_bonus_amount == Decimal("0")
        assert derived.monthly_remuneration == Decimal("355000")
        assert derived.suggested_grade == 25

    def test_four_bonuses_outside_bonus_month(self, provider):
        derived = derive_derived_fields(
            _form(
                bonus_amount=Decimal("100000"),
                bonus_payments_per_year=4,
                is_bonus_month=False,
            ),
            provider,
        )
        assert not derived.bonus_as_remuneration
        assert derived.monthly_remuneration == Decimal("255000")


class TestRatesAvailable:
    def test_loaded_prefecture(self, provider):
        assert derive_derived_fields(_form(), provider).rates_available is True

    def test_prefecture_without_table(self, provider):
        derived = derive_derived_fields(_form(prefecture="沖縄県"), provider)
        assert derived.rates_available is False

    def test_undeclared_selected_grade(self, provider):
        derived = derive_derived_fields(_form(selected_grade=51), provider)
        assert derived.rates_available is False

    def test_unknown_until_prefecture_chosen(self, provider):
        assert derive_derived_fields(_form(prefecture=None), provider).rates_available is None
