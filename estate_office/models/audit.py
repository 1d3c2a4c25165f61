"""
Audit Models for Estate Office

Every mutation that matters to the agency's books or pipeline is
recorded as an audit event: who moved a deal, who reversed an entry,
when ownership changed hands.

DESIGN DECISION: Audit logs are append-only. We never modify them.
Only the oldest events are rotated out once the log reaches its
configured length (StorageSettings.audit_max_events).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from estate_office.models.base import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""

    # Records
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"

    # Journal
    JOURNAL_ENTRY_POSTED = "journal_entry_posted"
    JOURNAL_ENTRY_REVERSED = "journal_entry_reversed"

    # Deals
    DEAL_STAGE_PROGRESSED = "deal_stage_progressed"
    DEAL_PAYMENT_RECORDED = "deal_payment_recorded"
    DEAL_COMPLETED = "deal_completed"
    DEAL_CANCELLED = "deal_cancelled"

    # Ownership
    OWNERSHIP_TRANSFERRED = "ownership_transferred"

    # Commission
    COMMISSION_AGENT_ADDED = "commission_agent_added"
    COMMISSION_AGENT_REMOVED = "commission_agent_removed"
    COMMISSION_PAID = "commission_paid"

    # Reports
    REPORT_GENERATED = "report_generated"
    REPORT_EXPORTED = "report_exported"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """A single entry in the audit trail."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(..., description="Type of event")
    severity: AuditSeverity = Field(default=AuditSeverity.INFO)

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'deal', 'property', 'journal_entry')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Record id of the entity this event relates to"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., everything one deal completion touched)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(default=False)
    user_id: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Flatten to the key/value pairs handed to structlog."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
            "user_id": self.user_id,
        }

    def to_storage_record(self) -> dict:
        """JSON-compatible dict appended to the audit_log key."""
        return self.model_dump(mode="json", exclude_none=True)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.deal_completed(deal_id, deal_number, price, user_id)
        event = AuditEventBuilder.journal_entry_reversed(entry_id, reversal_id, user_id)
    """

    @staticmethod
    def record_created(
        entity_type: str,
        entity_id: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type} created: {entity_id}",
            user_id=user_id,
            is_user_action=user_id is not None,
        )

    @staticmethod
    def record_updated(
        entity_type: str,
        entity_id: str,
        changed_fields: list[str],
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type} updated: {entity_id}",
            details={"changed_fields": changed_fields},
            user_id=user_id,
            is_user_action=user_id is not None,
        )

    @staticmethod
    def record_deleted(
        entity_type: str,
        entity_id: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type} deleted: {entity_id}",
            user_id=user_id,
            is_user_action=user_id is not None,
        )

    @staticmethod
    def journal_entry_posted(
        entry_id: str,
        amount: float,
        user_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.JOURNAL_ENTRY_POSTED,
            entity_type="journal_entry",
            entity_id=entry_id,
            description=f"Journal entry posted: {entry_id}",
            details={"amount": amount},
            user_id=user_id,
            is_user_action=True,
        )

    @staticmethod
    def journal_entry_reversed(
        entry_id: str,
        reversal_id: str,
        user_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.JOURNAL_ENTRY_REVERSED,
            entity_type="journal_entry",
            entity_id=entry_id,
            description=f"Journal entry {entry_id} reversed by {reversal_id}",
            details={"reversal_entry_id": reversal_id},
            user_id=user_id,
            is_user_action=True,
        )

    @staticmethod
    def deal_stage_progressed(
        deal_id: str,
        from_stage: str,
        to_stage: str,
        user_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEAL_STAGE_PROGRESSED,
            entity_type="deal",
            entity_id=deal_id,
            description=f"Deal moved from {from_stage} to {to_stage}",
            details={"from_stage": from_stage, "to_stage": to_stage},
            user_id=user_id,
            is_user_action=True,
        )

    @staticmethod
    def deal_payment_recorded(
        deal_id: str,
        payment_id: str,
        amount: float,
        receipt_number: str,
        user_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEAL_PAYMENT_RECORDED,
            entity_type="deal",
            entity_id=deal_id,
            description=f"Payment recorded: {receipt_number}",
            details={
                "payment_id": payment_id,
                "amount": amount,
                "receipt_number": receipt_number,
            },
            user_id=user_id,
            is_user_action=True,
        )

    @staticmethod
    def deal_completed(
        deal_id: str,
        deal_number: str,
        agreed_price: float,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEAL_COMPLETED,
            entity_type="deal",
            entity_id=deal_id,
            correlation_id=correlation_id,
            description=f"Deal completed: {deal_number}",
            details={"agreed_price": agreed_price},
            user_id=user_id,
            is_user_action=True,
        )

    @staticmethod
    def deal_cancelled(
        deal_id: str,
        reason: str,
        user_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEAL_CANCELLED,
            severity=AuditSeverity.WARNING,
            entity_type="deal",
            entity_id=deal_id,
            description=f"Deal cancelled: {reason}"[:500],
            details={"reason": reason},
            user_id=user_id,
            is_user_action=True,
        )

    @staticmethod
    def ownership_transferred(
        property_id: str,
        from_owner_id: Optional[str],
        to_owner_id: str,
        sale_price: Optional[float] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OWNERSHIP_TRANSFERRED,
            entity_type="property",
            entity_id=property_id,
            correlation_id=correlation_id,
            description=f"Ownership transferred to {to_owner_id}",
            details={
                "from_owner_id": from_owner_id,
                "to_owner_id": to_owner_id,
                "sale_price": sale_price,
            },
        )

    @staticmethod
    def commission_agent_changed(
        deal_id: str,
        agent_id: str,
        added: bool,
        percentage: Optional[float] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.COMMISSION_AGENT_ADDED
            if added
            else AuditEventType.COMMISSION_AGENT_REMOVED
        )
        action = "added to" if added else "removed from"
        return AuditEvent(
            event_type=event_type,
            entity_type="deal",
            entity_id=deal_id,
            description=f"Agent {agent_id} {action} commission",
            details={"agent_id": agent_id, "percentage": percentage},
            is_user_action=True,
        )

    @staticmethod
    def commission_paid(
        deal_id: str,
        agent_id: str,
        amount: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMISSION_PAID,
            entity_type="deal",
            entity_id=deal_id,
            description=f"Commission paid to {agent_id}",
            details={"agent_id": agent_id, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def report_generated(
        report_type: str,
        report_id: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            entity_type="report",
            entity_id=report_id,
            description=f"Report generated: {report_type}",
            details={"report_type": report_type},
            user_id=user_id,
        )

    @staticmethod
    def report_exported(
        report_type: str,
        report_id: str,
        size_bytes: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_EXPORTED,
            entity_type="report",
            entity_id=report_id,
            description=f"Report exported to CSV: {report_type}",
            details={"report_type": report_type, "size_bytes": size_bytes},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        entity_id: Optional[str],
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type} validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
