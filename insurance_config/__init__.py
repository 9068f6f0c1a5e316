"""
insurance_config -- single public entrypoint for rate-table configuration.

Responsibility:
    ``load_rate_table_provider()`` loads the YAML rate tables, validates
    them, and returns one immutable ``RateTableProvider``.  The caller holds
    that provider for the lifetime of the process and injects it into the
    engines; nothing in this package keeps a module-level instance.

Failure modes:
    - ``FileNotFoundError`` -- a required fragment is missing.
    - ``yaml.YAMLError`` -- a fragment is not valid YAML.
    - ``RateTableIntegrityError`` -- structural validation failed.

Audit relevance:
    Every successful load emits an ``INSURANCE_CONFIG_TRACE`` log record with
    the content checksum, so a statement run can be tied back to the exact
    tables it used.
"""

from __future__ import annotations

from pathlib import Path

from insurance_config.loader import load_rate_tables
from insurance_config.provider import RateTableProvider
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
from insurance_config.validator import ensure_valid, validate_rate_tables
from insurance_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_DATA_DIR = Path(__file__).parent / "data"


def load_rate_table_provider(data_dir: Path | None = None) -> RateTableProvider:
    """Load, validate and wrap the rate tables found in ``data_dir``.

    Args:
        data_dir: Directory holding the YAML fragments. Defaults to the
            tables packaged with ``insurance_config``.

    Returns:
        A ready-to-share ``RateTableProvider``.

    Raises:
        FileNotFoundError: If a required fragment is missing.
        RateTableIntegrityError: If validation finds any violation.
    """
    directory = data_dir or DEFAULT_DATA_DIR
    tables = load_rate_tables(directory)
    ensure_valid(tables)
    provider = RateTableProvider(tables)

    _logger.info("INSURANCE_CONFIG_TRACE", extra={
        "trace_type": "INSURANCE_CONFIG_TRACE",
        "data_dir": str(directory),
        "checksum": tables.checksum,
        "effective_from": tables.statutory.effective_from.isoformat(),
        "prefecture_count": len(tables.prefectures),
        "grade_count": len(tables.boundaries),
        "fiscal_years": list(provider.fiscal_years()),
    })
    return provider


__all__ = [
    "BonusRate",
    "DEFAULT_DATA_DIR",
    "EligibilityThresholds",
    "GradeBoundary",
    "GradeTableEntry",
    "PensionGradeEntry",
    "PrefectureTable",
    "RateTableProvider",
    "RateTables",
    "StatutoryConstants",
    "ensure_valid",
    "load_rate_table_provider",
    "validate_rate_tables",
]
