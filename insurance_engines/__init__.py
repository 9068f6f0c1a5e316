"""
insurance_engines -- pure calculation engines.

All engines are stateless and side-effect free apart from logging.  They
receive rate tables through an injected ``RateTableProvider`` (or, for the
eligibility engine, the ``EligibilityThresholds`` it carries) and never read
files or the clock.
"""

from insurance_engines.bonus import BonusInsuranceResult, compute_bonus_premium
from insurance_engines.eligibility import (
    EligibilityEngine,
    EligibilityResult,
    EligibilityRule,
    qualification_loss_date,
)
from insurance_engines.form_state import (
    DerivedInsuranceFields,
    InsuranceFormInput,
    derive_derived_fields,
)
from insurance_engines.grades import (
    GradeResolver,
    check_combination,
    monthly_remuneration,
    pension_grade_for,
    validate_grade_pair,
)
from insurance_engines.leave import LeaveExemption, compute_leave_exemption
from insurance_engines.premium import PremiumBreakdown, PremiumCalculator
from insurance_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "BonusInsuranceResult",
    "DerivedInsuranceFields",
    "EligibilityEngine",
    "EligibilityResult",
    "EligibilityRule",
    "GradeResolver",
    "InsuranceFormInput",
    "LeaveExemption",
    "PremiumBreakdown",
    "PremiumCalculator",
    "check_combination",
    "compute_bonus_premium",
    "compute_input_fingerprint",
    "compute_leave_exemption",
    "derive_derived_fields",
    "monthly_remuneration",
    "pension_grade_for",
    "qualification_loss_date",
    "traced_engine",
    "validate_grade_pair",
]
