"""
In-Memory Storage Implementation

Used by tests and by embedders that do their own persistence. Records are
deep-copied on the way in and out so callers can never mutate stored
state through a shared reference.
"""

from typing import Sequence
from uuid import UUID

from pydantic import BaseModel

from finledger.models.audit import AuditEvent
from finledger.services.storage.interface import (
    AuditStorageInterface,
    RecordStoreInterface,
    RecordT,
)


class InMemoryRecordStore(RecordStoreInterface):
    """Dict-backed record store."""

    def __init__(self):
        self._collections: dict[str, list[BaseModel]] = {}
        self.save_count = 0

    def load_collection(self, key: str, model: type[RecordT]) -> list[RecordT]:
        return [
            model.model_validate(record.model_dump())
            for record in self._collections.get(key, [])
        ]

    def save_collection(self, key: str, records: Sequence[BaseModel]) -> None:
        self._collections[key] = [record.model_copy(deep=True) for record in records]
        self.save_count += 1

    def keys(self) -> list[str]:
        return list(self._collections)


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
