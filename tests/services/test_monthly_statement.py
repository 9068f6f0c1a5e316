"""
Tests for MonthlyStatementService.

Covers:
- Skipping employees not employed or not insured
- INCOMPLETE rows without a grade
- EXEMPT rows during childcare leave
- Bonus premiums, cumulative cap and bonus exemption
- Bonus exemption taken from the payment month, not the statement month
- Company totals and thread-pool ordering
"""

from datetime import date
from decimal import Decimal

import pytest

from insurance_kernel.domain.employee import EmploymentType, LeaveType
from insurance_services.monthly_statement import (
    MonthlyStatementService,
    RowStatus,
    StatementEntry,
    StatementSummary,
    is_employed_in,
)
from insurance_kernel.domain.dates import YearMonth

TOKYO = "東京都"


@pytest.fixture
def service(provider):
    return MonthlyStatementService(provider, TOKYO, employer_headcount=100)


class TestRows:
    def test_full_time_row(self, service, employee):
        statement = service.build_statement(
            [StatementEntry(employee(birth_date=date(1980, 5, 5)), grade=20)], 2025, 6
        )
        assert statement.target_month == "2025-06"
        (row,) = statement.rows
        assert row.status is RowStatus.CALCULATED
        assert row.age == 45
        assert row.premium.employee_total == Decimal("38740")
        assert row.bonus is None

    def test_not_employed_is_skipped(self, service, employee):
        leaver = employee(employee_id="OLD", end_date=date(2025, 3, 31))
        joiner = employee(employee_id="NEW", start_date=date(2025, 9, 1))
        statement = service.build_statement(
            [StatementEntry(leaver, grade=20), StatementEntry(joiner, grade=20)], 2025, 6
        )
        assert statement.rows == ()
        assert statement.skipped_employee_ids == ("OLD", "NEW")

    def test_uninsured_part_timer_is_skipped(self, service, employee):
        part_timer = employee(
            employee_id="PT",
            employment_type=EmploymentType.PART_TIME,
            weekly_hours=Decimal("10"),
            monthly_work_days=8,
        )
        statement = service.build_statement([StatementEntry(part_timer, grade=5)], 2025, 6)
        assert statement.rows == ()
        assert statement.skipped_employee_ids == ("PT",)

    def test_missing_grade_is_incomplete(self, service, employee):
        statement = service.build_statement([StatementEntry(employee(), grade=None)], 2025, 6)
        (row,) = statement.rows
        assert row.status is RowStatus.INCOMPLETE
        assert row.premium is None
        assert statement.summary.employee_total == Decimal("0")

    def test_age_70_row_drops_pension(self, service, employee):
        senior = employee(birth_date=date(1954, 3, 10), start_date=date(2000, 4, 1))
        (row,) = service.build_statement([StatementEntry(senior, grade=20)], 2025, 6).rows
        assert row.premium.pension_insurance_employee == Decimal("0")
        assert row.premium.health_insurance_employee == Decimal("12883")
        assert row.premium.nursing_insurance_employee == Decimal("0")

    def test_childcare_leave_is_exempt(self, service, employee):
        on_leave = employee(
            leave_type=LeaveType.CHILDCARE,
            leave_start_date=date(2025, 5, 10),
            leave_end_date=date(2025, 8, 20),
        )
        (row,) = service.build_statement([StatementEntry(on_leave, grade=20)], 2025, 6).rows
        assert row.status is RowStatus.EXEMPT
        assert "childcare" in row.note
        assert row.premium.employee_total == Decimal("0")
        assert row.premium.grade == 20


class TestBonuses:
    def test_bonus_premium(self, service, employee):
        entry = StatementEntry(
            employee(),
            grade=20,
            bonus_amount=Decimal("1000500"),
            bonus_paid_on=date(2025, 6, 30),
            bonus_payments_per_year=2,
        )
        (row,) = service.build_statement([entry], 2025, 6).rows
        assert row.bonus.standard_bonus_amount == Decimal("1000000")
        assert row.bonus.fiscal_year == 2025
        assert row.bonus.health_insurance_employee == Decimal("49550")

    def test_prior_cumulative_total_caps_health(self, service, employee):
        entry = StatementEntry(
            employee(),
            grade=20,
            bonus_amount=Decimal("100000"),
            bonus_paid_on=date(2025, 12, 10),
            bonus_payments_per_year=2,
            prior_fiscal_year_bonus_total=Decimal("5700000"),
        )
        (row,) = service.build_statement([entry], 2025, 12).rows
        assert row.bonus.health_base == Decimal("30000")

    def test_bonus_exempt_during_leave(self, service, employee):
        on_leave = employee(
            leave_type=LeaveType.CHILDCARE,
            leave_start_date=date(2025, 5, 10),
            leave_end_date=date(2025, 8, 20),
            bonus_payment_dates=(date(2025, 6, 30),),
        )
        entry = StatementEntry(
            on_leave,
            grade=20,
            bonus_amount=Decimal("500000"),
            bonus_paid_on=date(2025, 6, 30),
            bonus_payments_per_year=2,
        )
        (row,) = service.build_statement([entry], 2025, 6).rows
        assert row.bonus.standard_bonus_amount == Decimal("500000")
        assert row.bonus.employee_total == Decimal("0")
        assert row.bonus.employer_total == Decimal("0")

    def test_bonus_paid_during_leave_stays_exempt_in_later_statement(self, service, employee):
        returned = employee(
            leave_type=LeaveType.CHILDCARE,
            leave_start_date=date(2025, 5, 10),
            leave_end_date=date(2025, 8, 20),
            bonus_payment_dates=(date(2025, 6, 30),),
        )
        entry = StatementEntry(
            returned,
            grade=20,
            bonus_amount=Decimal("500000"),
            bonus_paid_on=date(2025, 6, 30),
            bonus_payments_per_year=2,
        )
        (row,) = service.build_statement([entry], 2025, 10).rows
        assert not row.eligibility.premium_exempt
        assert row.bonus.standard_bonus_amount == Decimal("500000")
        assert row.bonus.employee_total == Decimal("0")
        assert row.bonus.employer_total == Decimal("0")

    def test_bonus_paid_before_leave_is_charged_in_leave_statement(self, service, employee):
        on_leave = employee(
            leave_type=LeaveType.CHILDCARE,
            leave_start_date=date(2025, 5, 10),
            leave_end_date=date(2025, 8, 20),
        )
        entry = StatementEntry(
            on_leave,
            grade=20,
            bonus_amount=Decimal("1000500"),
            bonus_paid_on=date(2025, 4, 30),
            bonus_payments_per_year=2,
        )
        (row,) = service.build_statement([entry], 2025, 6).rows
        assert row.status is RowStatus.EXEMPT
        assert row.bonus.health_insurance_employee == Decimal("49550")
        assert row.bonus.employee_total > Decimal("0")

    def test_four_bonuses_have_no_bonus_premium(self, service, employee):
        entry = StatementEntry(
            employee(),
            grade=20,
            bonus_amount=Decimal("100000"),
            bonus_paid_on=date(2025, 6, 30),
            bonus_payments_per_year=4,
        )
        (row,) = service.build_statement([entry], 2025, 6).rows
        assert row.bonus is None


class TestSummary:
    def _entries(self, employee):
        return [
            StatementEntry(
                employee(employee_id=f"E{i:03d}", birth_date=date(1980, 5, 5)),
                grade=20,
                bonus_amount=Decimal("1000000") if i == 0 else None,
                bonus_paid_on=date(2025, 6, 30) if i == 0 else None,
                bonus_payments_per_year=2,
            )
            for i in range(6)
        ]

    def test_totals(self, service, employee):
        statement = service.build_statement(self._entries(employee), 2025, 6)
        summary = statement.summary
        assert summary.row_count == 6
        assert summary.employee_total == Decimal("38740") * 6
        assert summary.employer_total == Decimal("38740") * 6
        assert summary.child_support_levy == Decimal("936") * 6
        assert summary.health_insurance_employee == Decimal("12883") * 6
        # 49550 health + 7950 nursing + 91500 pension
        assert summary.bonus_employee_total == Decimal("149000")
        assert summary.bonus_child_support_levy == Decimal("3600")
        assert summary.grand_total == (
            summary.employee_total
            + summary.employer_total
            + summary.child_support_levy
            + summary.bonus_employee_total
            + summary.bonus_employer_total
            + summary.bonus_child_support_levy
        )

    def test_thread_pool_preserves_order(self, service, employee):
        entries = self._entries(employee)
        sequential = service.build_statement(entries, 2025, 6)
        parallel = service.build_statement(entries, 2025, 6, max_workers=4)
        assert [r.employee_id for r in parallel.rows] == [e.employee.employee_id for e in entries]
        assert parallel.summary == sequential.summary

    def test_empty_summary(self):
        assert StatementSummary.from_rows([]).grand_total == Decimal("0")


class TestEmploymentWindow:
    def test_is_employed_in(self, employee):
        record = employee(start_date=date(2025, 6, 20), end_date=date(2025, 8, 5))
        assert not is_employed_in(record, YearMonth(2025, 5))
        assert is_employed_in(record, YearMonth(2025, 6))
        assert is_employed_in(record, YearMonth(2025, 8))
        assert not is_employed_in(record, YearMonth(2025, 9))
