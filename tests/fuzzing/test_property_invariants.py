"""
Hypothesis-based property tests for the eligibility and premium engines.

Properties checked here:
- Age 75 and over: no insurance at all, whatever the employment shape
- Employers below 5 employees: no insurance at all
- Birthday on the 1st: every age threshold moves one month earlier
- Health/pension grade pairing: exactly one pension grade per health grade
- Monthly premiums: shares add up to the published totals and the
  rounded totals stay within a yen of the raw sums
- Bonus premiums: both caps hold and the employee never pays the odd yen
"""

from datetime import date
from decimal import Decimal

from hypothesis import HealthCheck, assume, given, settings
from hypothesis import strategies as st

from insurance_engines.bonus import compute_bonus_premium
from insurance_engines.eligibility import EligibilityEngine
from insurance_engines.grades import check_combination, pension_grade_for
from insurance_kernel.domain.dates import YearMonth, age_in_month
from insurance_kernel.domain.employee import EmployeeRecord, EmploymentType

ENGINE = EligibilityEngine()

birth_dates = st.dates(min_value=date(1900, 1, 1), max_value=date(2005, 12, 31))
target_months = st.builds(
    YearMonth,
    year=st.integers(min_value=2020, max_value=2035),
    month=st.integers(min_value=1, max_value=12),
)
employment_types = st.sampled_from(list(EmploymentType))
yen = st.decimals(min_value=0, max_value=10_000_000, places=0)


def _employee(birth_date, employment_type, weekly_hours, wage):
    return EmployeeRecord(
        employee_id="FUZZ",
        birth_date=birth_date,
        employment_type=employment_type,
        weekly_hours=weekly_hours,
        base_salary=wage,
        start_date=date(2019, 4, 1),
    )


class TestEligibilityProperties:
    @given(
        birth_date=birth_dates,
        target=target_months,
        employment_type=employment_types,
        weekly_hours=st.decimals(min_value=0, max_value=60, places=1),
        wage=yen,
        headcount=st.integers(min_value=0, max_value=1000),
    )
    @settings(max_examples=200)
    def test_elderly_care_transfer_removes_all_insurance(
        self, birth_date, target, employment_type, weekly_hours, wage, headcount
    ):
        assume(age_in_month(birth_date, target) >= 75)
        result = ENGINE.evaluate(
            _employee(birth_date, employment_type, weekly_hours, wage),
            target.year,
            target.month,
            headcount,
        )
        assert not result.health_insurance
        assert not result.nursing_insurance
        assert not result.pension_insurance

    @given(
        birth_date=st.dates(min_value=date(1960, 1, 1), max_value=date(2005, 12, 31)),
        target=target_months,
        employment_type=employment_types,
        headcount=st.integers(min_value=0, max_value=4),
    )
    @settings(max_examples=200)
    def test_small_employer_removes_all_insurance(
        self, birth_date, target, employment_type, headcount
    ):
        result = ENGINE.evaluate(
            _employee(birth_date, employment_type, Decimal("40"), Decimal("300000")),
            target.year,
            target.month,
            headcount,
        )
        assert not result.is_insured
        assert not result.nursing_insurance
        assert not result.pension_insurance

    @given(
        year=st.integers(min_value=1930, max_value=2000),
        month=st.integers(min_value=1, max_value=12),
    )
    def test_first_of_month_birthday_shifts_thresholds(self, year, month):
        first = ENGINE.age_windows(date(year, month, 1))
        second = ENGINE.age_windows(date(year, month, 2))
        assert first.nursing_start == second.nursing_start.shift(-1)
        assert first.nursing_end == second.nursing_end.shift(-1)
        assert first.pension_end == second.pension_end.shift(-1)
        assert first.health_loss == second.health_loss.shift(-1)

    @given(birth_date=birth_dates, target=target_months)
    @settings(max_examples=200)
    def test_nursing_implies_health(self, birth_date, target):
        result = ENGINE.evaluate(
            _employee(birth_date, EmploymentType.FULL_TIME, Decimal("40"), Decimal("300000")),
            target.year,
            target.month,
            100,
        )
        if result.nursing_insurance:
            assert result.health_insurance
            assert 40 <= age_in_month(birth_date, target) < 65


class TestGradeCombinationProperties:
    @given(health=st.integers(min_value=1, max_value=50))
    def test_exactly_one_pension_grade(self, health):
        expected = pension_grade_for(health)
        assert 1 <= expected <= 32
        assert [p for p in range(1, 33) if check_combination(health, p)] == [expected]

    @given(
        lower=st.integers(min_value=1, max_value=50),
        upper=st.integers(min_value=1, max_value=50),
    )
    def test_pension_grade_monotone(self, lower, upper):
        assume(lower <= upper)
        assert pension_grade_for(lower) <= pension_grade_for(upper)


class TestMonthlyPremiumProperties:
    @given(
        grade=st.integers(min_value=1, max_value=50),
        age=st.integers(min_value=18, max_value=74),
        data=st.data(),
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_shares_match_published_totals(self, calculator, provider, grade, age, data):
        prefecture = data.draw(st.sampled_from(calculator.available_prefectures()))
        breakdown = calculator.calculate(prefecture, grade, age)
        entry = provider.grade_entry(prefecture, grade)

        health = breakdown.health_insurance_employee + breakdown.health_insurance_employer
        assert health == entry.health_insurance_total
        if calculator.nursing_applies(age):
            nursing = (
                breakdown.nursing_insurance_employee + breakdown.nursing_insurance_employer
            )
            assert health + nursing == entry.nursing_insurance_total
        else:
            assert breakdown.nursing_insurance_employee == Decimal("0")
            assert breakdown.nursing_insurance_employer == Decimal("0")

    @given(
        grade=st.integers(min_value=1, max_value=50),
        age=st.integers(min_value=18, max_value=74),
        data=st.data(),
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_rounded_totals_stay_within_a_yen(self, calculator, grade, age, data):
        prefecture = data.draw(st.sampled_from(calculator.available_prefectures()))
        b = calculator.calculate(prefecture, grade, age)

        employee_raw = (
            b.health_insurance_employee
            + b.nursing_insurance_employee
            + b.pension_insurance_employee
        )
        combined_raw = employee_raw + (
            b.health_insurance_employer
            + b.nursing_insurance_employer
            + b.pension_insurance_employer
        )
        assert abs(b.employee_total - employee_raw) <= Decimal("0.5")
        assert abs(b.combined_total - combined_raw) < Decimal("1")
        assert b.employee_total == b.employee_total.to_integral_value()
        assert b.employer_total == b.employer_total.to_integral_value()


class TestBonusPremiumProperties:
    @given(
        amount=st.decimals(min_value=1, max_value=20_000_000, places=0),
        prior=st.decimals(min_value=0, max_value=8_000_000, places=0),
        nursing=st.booleans(),
    )
    @settings(max_examples=300)
    def test_caps_and_split(self, provider, amount, prior, nursing):
        statutory = provider.statutory
        rate = provider.bonus_rate(2025, "東京都")
        result = compute_bonus_premium(
            amount, rate, statutory, nursing_applies=nursing, annual_health_bonus_total=prior
        )

        headroom = max(statutory.health_bonus_cap_per_fiscal_year - prior, Decimal("0"))
        assert result.standard_bonus_amount <= amount
        assert result.standard_bonus_amount % 1000 == 0
        assert result.health_base <= headroom
        assert result.pension_base <= statutory.pension_bonus_cap_per_payment
        assert result.pension_base <= result.standard_bonus_amount

        for employee_share, employer_share in (
            (result.health_insurance_employee, result.health_insurance_employer),
            (result.nursing_insurance_employee, result.nursing_insurance_employer),
            (result.pension_insurance_employee, result.pension_insurance_employer),
        ):
            assert 0 <= employer_share - employee_share <= 1
