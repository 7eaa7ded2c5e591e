"""
Data Models Package

This package contains all Pydantic models used in FairSplit.
All data flowing through the system must conform to these schemas.
"""

from fairsplit.models.split import (
    AllocationResult,
    ExpenseEntry,
    FieldRole,
    IncomeEntry,
    PersistedContributions,
    PersistedInputs,
    PersistedState,
    ViewModel,
)
from fairsplit.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Split models
    "AllocationResult",
    "ExpenseEntry",
    "FieldRole",
    "IncomeEntry",
    "PersistedContributions",
    "PersistedInputs",
    "PersistedState",
    "ViewModel",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
