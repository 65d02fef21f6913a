"""
JSON File Storage Implementation

DESIGN DECISION: Local JSON files are the default storage backend because:
1. Persistence is local and synchronous, no server to run
2. Users can inspect or back up their data with ordinary tools
3. Easy to export/migrate later

TRADEOFFS:
- Every save rewrites the whole collection (fine for personal-scale data)
- No transactions (each collection file is replaced atomically instead)

One file per collection key: <data_dir>/<key>.json
The audit log is append-only JSON lines: <data_dir>/audit.jsonl
"""

import json
import os
from pathlib import Path
from typing import Sequence, Union
from uuid import UUID

from pydantic import BaseModel, TypeAdapter, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finledger.models.audit import AuditEvent
from finledger.services.storage.interface import (
    AuditStorageInterface,
    CorruptRecordError,
    RecordStoreInterface,
    RecordT,
    StorageError,
)


class JsonFileRecordStore(RecordStoreInterface):
    """
    Record store backed by one JSON document per collection.

    Writes go to a temporary file that is then renamed over the target,
    so a crash mid-write never leaves a half-written collection behind.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def load_collection(self, key: str, model: type[RecordT]) -> list[RecordT]:
        path = self.path_for(key)
        if not path.exists():
            return []

        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CorruptRecordError(f"Collection '{key}' in {path} is not UTF-8: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

        if not raw.strip():
            return []

        try:
            return TypeAdapter(list[model]).validate_json(raw)
        except ValidationError as e:
            raise CorruptRecordError(f"Collection '{key}' in {path} is corrupt: {e}")

    def save_collection(self, key: str, records: Sequence[BaseModel]) -> None:
        payload = json.dumps(
            [record.model_dump(mode="json") for record in records],
            indent=2,
        )
        try:
            self._write_atomically(self.path_for(key), payload)
        except OSError as e:
            raise StorageError(f"Failed to save collection '{key}': {e}")

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_atomically(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON object per line.

    Malformed lines are skipped on read; the log is diagnostic data and a
    single bad line must not hide the rest.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _append_line(self, line: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._append_line(event.model_dump_json())
            return True
        except OSError:
            return False

    def _read_events(self) -> list[AuditEvent]:
        if not self._path.exists():
            return []
        try:
            lines = self._path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}")

        events = []
        for line in lines:
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValidationError:
                continue
        return events

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._read_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._read_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
