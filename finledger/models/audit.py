"""
Audit Models for finledger

Every engine mutation is logged for audit purposes. This gives
1. Complete traceability of what changed a budget's numbers
2. Debugging information when a save fails
3. The ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    INVESTMENT_ADDED = "investment_added"
    INVESTMENT_UPDATED = "investment_updated"
    INVESTMENT_DELETED = "investment_deleted"
    PRICES_UPDATED = "prices_updated"

    # Budgets
    BUDGET_ADDED = "budget_added"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_DELETED = "budget_deleted"
    BUDGET_TOGGLED = "budget_toggled"
    BUDGET_RENEWED = "budget_renewed"
    BUDGETS_RECOMPUTED = "budgets_recomputed"

    # Alerts
    ALERT_EMITTED = "alert_emitted"
    ALERT_READ = "alert_read"

    # Persistence
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"

    # System
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every engine mutation creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'budget', 'alert')"
    )
    entity_id: Optional[UUID] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., an expense add and the alerts it caused)"
    )

    description: str = Field(
        ...,
        max_length=500,
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_changed(AuditEventType.EXPENSE_ADDED, "expense", expense.id, ...)
        event = AuditEventBuilder.save_failed("budgets", str(error))
    """

    @staticmethod
    def record_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=description,
            details=details or {},
        )

    @staticmethod
    def budgets_recomputed(
        budget_count: int,
        expense_count: int,
        changed: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGETS_RECOMPUTED,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Recomputed {budget_count} budgets from {expense_count} expenses",
            details={
                "budget_count": budget_count,
                "expense_count": expense_count,
                "changed": changed,
            },
        )

    @staticmethod
    def alert_emitted(
        alert_id: UUID,
        budget_id: UUID,
        alert_type: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALERT_EMITTED,
            severity=AuditSeverity.WARNING if alert_type == "exceeded" else AuditSeverity.INFO,
            entity_type="alert",
            entity_id=alert_id,
            correlation_id=correlation_id,
            description=f"Alert emitted: {alert_type}",
            details={
                "budget_id": str(budget_id),
                "alert_type": alert_type,
                "message": message,
            },
        )

    @staticmethod
    def prices_updated(
        prices: dict[str, Decimal],
        updated_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PRICES_UPDATED,
            severity=AuditSeverity.DEBUG,
            entity_type="investment",
            correlation_id=correlation_id,
            description=f"Prices updated for {updated_count} holdings",
            details={
                "prices": {symbol: str(price) for symbol, price in prices.items()},
                "updated_count": updated_count,
            },
        )

    @staticmethod
    def save_failed(
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            correlation_id=correlation_id,
            description=f"Failed to save collection: {collection}",
            error_message=error_message,
            details={"collection": collection},
        )

    @staticmethod
    def load_failed(
        collection: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            description=f"Failed to load collection: {collection}",
            error_message=error_message,
            details={"collection": collection},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
