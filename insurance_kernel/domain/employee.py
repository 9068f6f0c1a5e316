"""
Employee record consumed by the eligibility engine.

The record is supplied by the caller for every evaluation; the kernel never
fetches or persists it.  It is frozen so one record can be evaluated for
many months, from many threads, without copying.

``EmployeeRecord.from_mapping`` is the loose entry point for data coming
from forms and stored documents: labels may be the Japanese display
strings, numbers may arrive as strings, and unparseable dates degrade to
``None`` (logged) instead of failing the evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping

from insurance_kernel.exceptions import InvalidEmploymentPeriodError
from insurance_kernel.logging_config import get_logger

logger = get_logger("domain.employee")


class EmploymentType(str, Enum):
    """Employment contract category."""

    FULL_TIME = "full_time"  # 正社員
    CONTRACT = "contract"  # 契約社員
    PART_TIME = "part_time"  # パート
    HOURLY = "hourly"  # アルバイト


class StudentType(str, Enum):
    """Student category; only the last three may qualify on the short-time test."""

    NOT_STUDENT = "not_student"  # 一般（学生でない）
    DAY = "day"  # 昼間学生
    HIGH_SCHOOL = "high_school"  # 高校生
    VOCATIONAL = "vocational"  # 専門学校生
    NIGHT = "night"  # 夜間学生
    LEAVE_OF_ABSENCE = "leave_of_absence"  # 休学中
    CORRESPONDENCE = "correspondence"  # 通信制


class LeaveType(str, Enum):
    """Statutory leave category."""

    NONE = "none"
    CHILDCARE = "childcare"  # 育児休業
    MATERNITY = "maternity"  # 産前産後休業
    CARE = "care"  # 介護休業


PART_TIME_STUDENT_TYPES = frozenset({
    StudentType.NIGHT,
    StudentType.LEAVE_OF_ABSENCE,
    StudentType.CORRESPONDENCE,
})

PREMIUM_EXEMPT_LEAVE_TYPES = frozenset({LeaveType.CHILDCARE, LeaveType.MATERNITY})

_LABELS: dict[str, Enum] = {
    "正社員": EmploymentType.FULL_TIME,
    "契約社員": EmploymentType.CONTRACT,
    "パート": EmploymentType.PART_TIME,
    "アルバイト": EmploymentType.HOURLY,
    "一般（学生でない）": StudentType.NOT_STUDENT,
    "昼間学生": StudentType.DAY,
    "高校生": StudentType.HIGH_SCHOOL,
    "専門学校生": StudentType.VOCATIONAL,
    "夜間学生": StudentType.NIGHT,
    "休学中": StudentType.LEAVE_OF_ABSENCE,
    "通信制": StudentType.CORRESPONDENCE,
    "育児休業": LeaveType.CHILDCARE,
    "産前産後休業": LeaveType.MATERNITY,
    "介護休業": LeaveType.CARE,
}


@dataclass(frozen=True)
class EmployeeRecord:
    """
    One employee as seen by the eligibility engine.

    Amounts are whole yen as ``Decimal``.  ``expected_employment_months`` of
    0 means unset / indefinite.  ``employment_type`` is ``None`` when the
    source data did not say; such a record is judged on hours and wage only.
    """

    employee_id: str
    birth_date: date | None = None
    employment_type: EmploymentType | None = EmploymentType.FULL_TIME
    weekly_hours: Decimal = Decimal("40")
    monthly_work_days: int = 20
    base_salary: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")
    commuting_allowance: Decimal = Decimal("0")
    expected_employment_months: int = 0
    is_student: bool = False
    student_type: StudentType | None = None
    start_date: date | None = None
    end_date: date | None = None
    leave_type: LeaveType = LeaveType.NONE
    leave_start_date: date | None = None
    leave_end_date: date | None = None
    bonus_payment_dates: tuple[date, ...] = ()

    def __post_init__(self) -> None:
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date < self.start_date
        ):
            raise InvalidEmploymentPeriodError(
                self.employee_id,
                self.start_date.isoformat(),
                self.end_date.isoformat(),
            )

    @property
    def monthly_wage(self) -> Decimal:
        """Base salary plus allowances plus commuting allowance."""
        return self.base_salary + self.allowances + self.commuting_allowance

    @property
    def is_student_worker(self) -> bool:
        if self.student_type is not None:
            return self.student_type is not StudentType.NOT_STUDENT
        return self.is_student

    @property
    def effective_student_type(self) -> StudentType | None:
        """Student category, treating an unspecified student as a day student."""
        if not self.is_student_worker:
            return None
        return self.student_type or StudentType.DAY

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EmployeeRecord:
        """Build a record from loosely-typed form/document data.

        Accepts snake_case keys.  Enum fields accept the enum value or the
        Japanese label.  Unparseable dates become ``None``; flags accept
        booleans and "true"/"false"/"1"/"0", anything else counts as false.
        """
        employee_id = str(data.get("employee_id", ""))
        leave_type = _parse_enum(LeaveType, data.get("leave_type"))
        student_type = data.get("student_type")
        return cls(
            employee_id=employee_id,
            birth_date=_parse_date(data.get("birth_date"), "birth_date", employee_id),
            employment_type=_parse_employment_type(data.get("employment_type"), employee_id),
            weekly_hours=_parse_decimal(data.get("weekly_hours"), Decimal("0")),
            monthly_work_days=int(_parse_decimal(data.get("monthly_work_days"), Decimal("0"))),
            base_salary=_parse_decimal(data.get("base_salary"), Decimal("0")),
            allowances=_parse_decimal(data.get("allowances"), Decimal("0")),
            commuting_allowance=_parse_decimal(data.get("commuting_allowance"), Decimal("0")),
            expected_employment_months=int(
                _parse_decimal(data.get("expected_employment_months"), Decimal("0"))
            ),
            is_student=_parse_bool(data.get("is_student"), "is_student", employee_id),
            student_type=_parse_enum(StudentType, student_type) if student_type else None,
            start_date=_parse_date(data.get("start_date"), "start_date", employee_id),
            end_date=_parse_date(data.get("end_date"), "end_date", employee_id),
            leave_type=leave_type or LeaveType.NONE,
            leave_start_date=_parse_date(
                data.get("leave_start_date"), "leave_start_date", employee_id
            ),
            leave_end_date=_parse_date(
                data.get("leave_end_date"), "leave_end_date", employee_id
            ),
            bonus_payment_dates=tuple(
                d
                for d in (
                    _parse_date(v, "bonus_payment_dates", employee_id)
                    for v in data.get("bonus_payment_dates") or ()
                )
                if d is not None
            ),
        )


def _parse_enum(enum_cls: type[Enum], value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    labelled = _LABELS.get(str(value))
    if isinstance(labelled, enum_cls):
        return labelled
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("employee_record_enum_unrecognized", extra={
            "enum": enum_cls.__name__,
            "value": str(value),
        })
        return None


def _parse_employment_type(value: Any, employee_id: str) -> EmploymentType | None:
    if value is None or value == "":
        logger.warning("employee_record_employment_type_missing", extra={
            "employee_id": employee_id,
        })
        return None
    return _parse_enum(EmploymentType, value)


_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no", ""})


def _parse_bool(value: Any, field_name: str, employee_id: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text not in _FALSE_STRINGS:
        logger.warning("employee_record_flag_unparseable", extra={
            "employee_id": employee_id,
            "field": field_name,
            "value": str(value),
        })
    return False


def _parse_decimal(value: Any, default: Decimal) -> Decimal:
    if value is None or value == "":
        return default
    try:
        parsed = Decimal(str(value))
    except InvalidOperation:
        return default
    return parsed if parsed.is_finite() else default


def _parse_date(value: Any, field_name: str, employee_id: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("employee_record_date_unparseable", extra={
            "employee_id": employee_id,
            "field": field_name,
            "value": str(value),
        })
        return None
