"""
Rate-Table Loader (``insurance_config.loader``).

Responsibility
--------------
Loads the YAML fragments of a data directory and parses them into the
frozen ``insurance_config.schema`` dataclasses.  Callers should go through
``insurance_config.load_rate_table_provider()``; this module is the parsing
half of that entrypoint.

Directory layout
----------------
::

    statutory.yaml          nationwide rates, caps, eligibility thresholds
    grade_boundaries.yaml   50 health grades with remuneration ranges
    pension_grades.yaml     32 pension grades
    bonus_rates.yaml        {fiscal_year: {prefecture: rates}}
    prefectures/*.yaml      one 50-grade table per prefecture

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Non-numeric amounts  -> ``ValueError``.

``compute_checksum`` produces a deterministic SHA-256 over the parsed
content so a batch run can record exactly which tables it used.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from insurance_config.schema import (
    BonusRate,
    EligibilityThresholds,
    GradeBoundary,
    GradeTableEntry,
    PensionGradeEntry,
    PrefectureTable,
    RateTables,
    StatutoryConstants,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any) -> Decimal:
    """Parse a YAML scalar into an exact Decimal (via its string form)."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Cannot parse amount from {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Cannot parse amount from {value!r}") from exc


def parse_optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else parse_decimal(value)


def parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_thresholds(data: dict[str, Any]) -> EligibilityThresholds:
    """Parse eligibility thresholds; omitted keys keep their defaults."""
    defaults = EligibilityThresholds()
    values: dict[str, Any] = {}
    for name, default in asdict(defaults).items():
        if name not in data:
            continue
        raw = data[name]
        values[name] = parse_decimal(raw) if isinstance(default, Decimal) else int(raw)
    return EligibilityThresholds(**values)


def parse_statutory(data: dict[str, Any]) -> StatutoryConstants:
    rates = data["premium_rates"]
    caps = data["bonus_caps"]
    bonus = data.get("bonus", {})
    return StatutoryConstants(
        effective_from=parse_date(data["effective_from"]),
        pension_rate=parse_decimal(rates["pension_rate"]),
        nursing_rate=parse_decimal(rates["nursing_rate"]),
        child_support_levy_rate=parse_decimal(rates["child_support_levy_rate"]),
        pension_bonus_cap_per_payment=parse_decimal(caps["pension_per_payment"]),
        health_bonus_cap_per_fiscal_year=parse_decimal(caps["health_per_fiscal_year"]),
        standard_bonus_unit=parse_decimal(bonus.get("standard_bonus_unit", 1000)),
        remuneration_rounding_unit=parse_decimal(
            data.get("remuneration_rounding_unit", 1000)
        ),
        max_bonus_payments_per_year=int(bonus.get("max_bonus_payments_per_year", 3)),
        eligibility=parse_thresholds(data.get("eligibility", {})),
    )


def parse_boundaries(data: dict[str, Any]) -> tuple[GradeBoundary, ...]:
    return tuple(
        GradeBoundary(
            grade=int(item["grade"]),
            lower_bound=parse_decimal(item["lower_bound"]),
            upper_bound=parse_optional_decimal(item.get("upper_bound")),
            standard_monthly_wage=parse_decimal(item["standard_monthly_wage"]),
        )
        for item in data["boundaries"]
    )


def parse_pension_grades(data: dict[str, Any]) -> tuple[PensionGradeEntry, ...]:
    return tuple(
        PensionGradeEntry(
            grade=int(item["grade"]),
            standard_monthly_wage=parse_decimal(item["standard_monthly_wage"]),
            pension_insurance_employee_share=parse_decimal(item["employee_share"]),
        )
        for item in data["grades"]
    )


def parse_prefecture_table(data: dict[str, Any]) -> PrefectureTable:
    """Parse one prefecture file: ``prefecture`` plus ``grades: {n: {...}}``."""
    entries = tuple(
        GradeTableEntry(
            grade=int(grade),
            standard_monthly_wage=parse_decimal(row["standard_monthly_wage"]),
            health_insurance_total=parse_decimal(row["health_insurance_total"]),
            health_insurance_employee_share=parse_decimal(
                row["health_insurance_employee_share"]
            ),
            nursing_insurance_total=parse_decimal(row["nursing_insurance_total"]),
            nursing_insurance_employee_share=parse_decimal(
                row["nursing_insurance_employee_share"]
            ),
        )
        for grade, row in sorted(data["grades"].items(), key=lambda kv: int(kv[0]))
    )
    return PrefectureTable(prefecture=str(data["prefecture"]), entries=entries)


def parse_bonus_rates(data: dict[str, Any]) -> tuple[BonusRate, ...]:
    rates: list[BonusRate] = []
    for fiscal_year, by_prefecture in sorted(data.items(), key=lambda kv: int(kv[0])):
        for prefecture, row in by_prefecture.items():
            rates.append(
                BonusRate(
                    fiscal_year=int(fiscal_year),
                    prefecture=str(prefecture),
                    health_insurance_rate=parse_decimal(row["health_insurance_rate"]),
                    special_insurance_rate=parse_decimal(
                        row.get("special_insurance_rate", 0)
                    ),
                )
            )
    return tuple(rates)


def load_rate_tables(data_dir: Path) -> RateTables:
    """
    Load every fragment of ``data_dir`` into a ``RateTables`` aggregate.

    The returned aggregate carries the checksum of its own content.
    """
    prefecture_files = sorted((data_dir / "prefectures").glob("*.yaml"))
    tables = RateTables(
        statutory=parse_statutory(load_yaml_file(data_dir / "statutory.yaml")),
        boundaries=parse_boundaries(load_yaml_file(data_dir / "grade_boundaries.yaml")),
        pension_grades=parse_pension_grades(
            load_yaml_file(data_dir / "pension_grades.yaml")
        ),
        prefectures=tuple(
            parse_prefecture_table(load_yaml_file(path)) for path in prefecture_files
        ),
        bonus_rates=parse_bonus_rates(load_yaml_file(data_dir / "bonus_rates.yaml")),
    )
    return RateTables(
        statutory=tables.statutory,
        boundaries=tables.boundaries,
        pension_grades=tables.pension_grades,
        prefectures=tables.prefectures,
        bonus_rates=tables.bonus_rates,
        checksum=compute_checksum(tables),
    )


def compute_checksum(tables: RateTables) -> str:
    """Deterministic SHA-256 of the parsed content (checksum field excluded)."""
    content = asdict(tables)
    content.pop("checksum", None)
    canonical = json.dumps(content, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
