"""
Audit Logger

DESIGN DECISION: Every engine mutation is logged.
This provides:
1. Complete traceability of how derived numbers came to be
2. Debugging capability when persistence fails
3. A history the presentation layer can show

The audit logger:
- Gracefully handles failures (never breaks an engine operation)
- Supports correlation IDs to trace related events
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finledger.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from finledger.services.storage import AuditStorageInterface


def _processors(json_output: bool) -> list:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


# Configure structlog for local logging
structlog.configure(
    processors=_processors(json_output=True),
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Route structlog output through stdlib logging at `log_level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, log_level))
    logging.getLogger().setLevel(getattr(logging, log_level))
    structlog.configure(processors=_processors(json_output))


def get_logger(name: Optional[str] = None):
    return structlog.get_logger(name)


class AuditLogger:
    """
    Audit trail shared by the ledger, the budget engine and the market feed.

    Every event goes to the structured local log; events are also appended
    to an AuditStorageInterface when one is given (the JSONL file in a
    default setup).
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        self._storage = storage
        self._logger = structlog.get_logger("finledger.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Severity picks the log method. Returns False only when the audit
        store rejected or failed the write.
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_record_changed(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_changed(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_budgets_recomputed(
        self,
        budget_count: int,
        expense_count: int,
        changed: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.budgets_recomputed(
            budget_count=budget_count,
            expense_count=expense_count,
            changed=changed,
            correlation_id=correlation_id,
        ))

    def log_alert_emitted(
        self,
        alert_id: UUID,
        budget_id: UUID,
        alert_type: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.alert_emitted(
            alert_id=alert_id,
            budget_id=budget_id,
            alert_type=alert_type,
            message=message,
            correlation_id=correlation_id,
        ))

    def log_prices_updated(
        self,
        prices: dict[str, Decimal],
        updated_count: int,
    ) -> None:
        self.log(AuditEventBuilder.prices_updated(
            prices=prices,
            updated_count=updated_count,
        ))

    def log_save_failed(
        self,
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.save_failed(
            collection=collection,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_load_failed(
        self,
        collection: str,
        error_message: str,
    ) -> None:
        self.log(AuditEventBuilder.load_failed(
            collection=collection,
            error_message=error_message,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_not_found(self, entity_type: str, entity_id: UUID, operation: str) -> None:
        """Unknown ids are a normal case; they only get a debug line, no audit event."""
        self._logger.debug(
            "record_not_found",
            entity_type=entity_type,
            entity_id=str(entity_id),
            operation=operation,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of an engine mutation and pass it to every
    event the mutation causes (recompute, alerts).
    """
    return uuid4()
