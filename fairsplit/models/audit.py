"""
Audit Models for FairSplit

Every step of the edit pipeline (load, edit, recompute, save) produces an
event. Events are written to the structured log only; the calculator keeps
no history of its own.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Startup
    STATE_LOADED = "state_loaded"
    STATE_LOAD_FAILED = "state_load_failed"
    DEFAULTS_APPLIED = "defaults_applied"

    # Editing
    FIELD_EDITED = "field_edited"
    INPUT_TRUNCATED = "input_truncated"
    ALLOCATION_COMPUTED = "allocation_computed"

    # Persistence
    STATE_SAVED = "state_saved"
    STATE_SAVE_FAILED = "state_save_failed"
    STATE_CLEARED = "state_cleared"
    STORAGE_FALLBACK = "storage_fallback"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Groups every event produced by one controller session
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.field_edited("partyA", "40,000", 40000, sid)
    """

    @staticmethod
    def state_loaded(
        has_inputs: bool,
        has_contributions: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            correlation_id=correlation_id,
            description="Persisted state loaded",
            details={
                "has_inputs": has_inputs,
                "has_contributions": has_contributions,
            },
        )

    @staticmethod
    def state_load_failed(
        record: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Could not read persisted record: {record}",
            details={"record": record},
            error_message=error_message,
        )

    @staticmethod
    def defaults_applied(
        party_a_salary: float,
        party_b_salary: float,
        expense: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEFAULTS_APPLIED,
            correlation_id=correlation_id,
            description="No persisted inputs, starting from defaults",
            details={
                "party_a_salary": party_a_salary,
                "party_b_salary": party_b_salary,
                "expense": expense,
            },
        )

    @staticmethod
    def field_edited(
        role: str,
        raw_text: str,
        value: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FIELD_EDITED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Field edited: {role}",
            details={
                "role": role,
                "raw_text": raw_text,
                "value": value,
            },
            is_user_action=True,
        )

    @staticmethod
    def input_truncated(
        digits: str,
        kept: str,
        previous_digits: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_TRUNCATED,
            severity=AuditSeverity.DEBUG,
            description=f"Entry cut to {len(kept)} digits",
            details={
                "digits": digits,
                "kept": kept,
                "previous_digits": previous_digits,
            },
            is_user_action=True,
        )

    @staticmethod
    def allocation_computed(
        party_a_salary: float,
        party_b_salary: float,
        expense: float,
        share_a: float,
        share_b: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALLOCATION_COMPUTED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description="Allocation recomputed",
            details={
                "party_a_salary": party_a_salary,
                "party_b_salary": party_b_salary,
                "expense": expense,
                "share_a": share_a,
                "share_b": share_b,
            },
        )

    @staticmethod
    def state_saved(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description="Inputs and contributions saved",
        )

    @staticmethod
    def state_save_failed(
        record: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVE_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Could not write persisted record: {record}",
            details={"record": record},
            error_message=error_message,
        )

    @staticmethod
    def state_cleared(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_CLEARED,
            correlation_id=correlation_id,
            description="Persisted state cleared, defaults restored",
            is_user_action=True,
        )

    @staticmethod
    def storage_fallback(
        backend: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FALLBACK,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Storage backend '{backend}' unavailable, using session memory",
            details={"backend": backend, "fallback": "memory"},
            error_message=error_message,
        )
