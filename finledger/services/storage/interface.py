"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON file store for a real database later
2. Use in-memory storage for testing
3. Keep engine logic decoupled from the storage format

The record store is deliberately dumb: whole collections are loaded and
saved by key. The engine keeps the in-memory copy authoritative and only
uses the store for durability.
"""

from abc import ABC, abstractmethod
from typing import Sequence, TypeVar
from uuid import UUID

from pydantic import BaseModel

from finledger.models.audit import AuditEvent


# One key per entity kind
EXPENSES_KEY = "expenses"
INVESTMENTS_KEY = "investments"
BUDGETS_KEY = "budgets"
ALERTS_KEY = "budgetAlerts"

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStoreInterface(ABC):
    """
    Abstract key-value store for record collections.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load_collection(self, key: str, model: type[RecordT]) -> list[RecordT]:
        """
        Load every record stored under `key`.

        Args:
            key: Collection key (one of the *_KEY constants)
            model: Pydantic model to validate each record against

        Returns:
            The stored records, or an empty list if nothing was saved yet

        Raises:
            StorageError: If the backend cannot be read
            CorruptRecordError: If stored data does not match `model`
        """
        pass

    @abstractmethod
    def save_collection(self, key: str, records: Sequence[BaseModel]) -> None:
        """
        Replace the collection stored under `key`.

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for a specific entity, in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptRecordError(StorageError):
    """Stored data could not be decoded into records."""
    pass
