"""
Data Models Package

This package contains all Pydantic models used in the Personal Ledger core.
All data flowing through the system must conform to these schemas.
"""

from ledger.models.transaction import (
    NO_CATEGORY,
    Category,
    DashboardSummary,
    FilterSpec,
    FilterType,
    Highlights,
    IngestionResult,
    MonthlyBucket,
    RejectedRecord,
    Transaction,
    TransactionEntry,
    TransactionType,
    ValidationIssue,
)
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "NO_CATEGORY",
    "Category",
    "DashboardSummary",
    "FilterSpec",
    "FilterType",
    "Highlights",
    "IngestionResult",
    "MonthlyBucket",
    "RejectedRecord",
    "Transaction",
    "TransactionEntry",
    "TransactionType",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
