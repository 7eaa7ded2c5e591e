"""
Audit Logger

DESIGN DECISION: Every step of the edit pipeline is logged.
This provides:
1. Traceability of what the user typed and what was computed
2. Visibility into storage degradation, which is never shown in the UI

The audit logger:
- Is synchronous, like the rest of the pipeline
- Never raises (a logging failure must not break an edit)
- Supports correlation IDs to trace one session's events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from fairsplit.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through a stdlib handler at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured local log. There is no durable
    audit trail; the calculator only remembers its last state.
    """

    def __init__(self, correlation_id: Optional[UUID] = None):
        """
        Initialize audit logger.

        Args:
            correlation_id: Attached to every event that does not carry its
                    own. A fresh one is created if omitted.
        """
        self.correlation_id = correlation_id or create_correlation_id()
        self._logger = structlog.get_logger("fairsplit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        if event.correlation_id is None:
            event = event.model_copy(update={"correlation_id": self.correlation_id})

        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    def log_state_loaded(self, has_inputs: bool, has_contributions: bool) -> None:
        """Log a successful read of persisted state."""
        self.log(AuditEventBuilder.state_loaded(has_inputs, has_contributions))

    def log_state_load_failed(self, record: str, error_message: str) -> None:
        """Log an unreadable or unavailable record."""
        self.log(AuditEventBuilder.state_load_failed(record, error_message))

    def log_defaults_applied(
        self,
        party_a_salary: float,
        party_b_salary: float,
        expense: float,
    ) -> None:
        """Log a cold start without persisted inputs."""
        self.log(AuditEventBuilder.defaults_applied(
            party_a_salary=party_a_salary,
            party_b_salary=party_b_salary,
            expense=expense,
        ))

    def log_field_edited(self, role: str, raw_text: str, value: float) -> None:
        """Log a single field edit."""
        self.log(AuditEventBuilder.field_edited(role, raw_text, value))

    def log_input_truncated(
        self,
        digits: str,
        kept: str,
        previous_digits: str,
    ) -> None:
        """Log keystrokes dropped by the digit cap."""
        self.log(AuditEventBuilder.input_truncated(digits, kept, previous_digits))

    def log_allocation_computed(
        self,
        party_a_salary: float,
        party_b_salary: float,
        expense: float,
        share_a: float,
        share_b: float,
    ) -> None:
        """Log a recomputed allocation."""
        self.log(AuditEventBuilder.allocation_computed(
            party_a_salary=party_a_salary,
            party_b_salary=party_b_salary,
            expense=expense,
            share_a=share_a,
            share_b=share_b,
        ))

    def log_state_saved(self) -> None:
        """Log a completed write-through."""
        self.log(AuditEventBuilder.state_saved())

    def log_state_save_failed(self, record: str, error_message: str) -> None:
        """Log a write that was dropped."""
        self.log(AuditEventBuilder.state_save_failed(record, error_message))

    def log_state_cleared(self) -> None:
        """Log a reset to defaults."""
        self.log(AuditEventBuilder.state_cleared())

    def log_storage_fallback(self, backend: str, error_message: str) -> None:
        """Log a switch to session-only storage."""
        self.log(AuditEventBuilder.storage_fallback(backend, error_message))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One is created per controller, i.e. per browser session.
    """
    return uuid4()
