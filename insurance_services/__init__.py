"""Orchestration over the insurance engines."""

from insurance_services.monthly_statement import (
    MonthlyStatement,
    MonthlyStatementService,
    RowStatus,
    StatementEntry,
    StatementRow,
    StatementSummary,
)

__all__ = [
    "MonthlyStatement",
    "MonthlyStatementService",
    "RowStatus",
    "StatementEntry",
    "StatementRow",
    "StatementSummary",
]
