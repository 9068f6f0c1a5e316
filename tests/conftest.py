"""
Pytest fixtures for the insurance engine test suite.

Provides:
- A session-scoped RateTableProvider loaded from the packaged YAML tables
- Engine instances built from that provider
- An ``employee`` factory with sensible full-time defaults
"""

from datetime import date
from decimal import Decimal

import pytest

from insurance_config import RateTableProvider, load_rate_table_provider
from insurance_engines.eligibility import EligibilityEngine
from insurance_engines.premium import PremiumCalculator
from insurance_kernel.domain.employee import EmployeeRecord
from insurance_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(scope="session")
def provider() -> RateTableProvider:
    """Rate tables shipped with insurance_config, loaded once."""
    return load_rate_table_provider()


@pytest.fixture
def eligibility_engine(provider) -> EligibilityEngine:
    return EligibilityEngine(provider.statutory.eligibility)


@pytest.fixture
def calculator(provider) -> PremiumCalculator:
    return PremiumCalculator(provider)


@pytest.fixture
def employee():
    """Factory for EmployeeRecord; keyword overrides replace the defaults."""

    def _make(**overrides) -> EmployeeRecord:
        fields = {
            "employee_id": "E001",
            "birth_date": date(1990, 6, 15),
            "base_salary": Decimal("250000"),
            "allowances": Decimal("10000"),
            "commuting_allowance": Decimal("5000"),
            "start_date": date(2020, 4, 1),
        }
        fields.update(overrides)
        return EmployeeRecord(**fields)

    return _make


@pytest.fixture(autouse=True)
def _clean_log_context():
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
