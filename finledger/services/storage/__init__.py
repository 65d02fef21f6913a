"""
Storage Services Package

Provides the abstract record store interface and concrete implementations.
JSON files are the default backend; in-memory storage serves tests.
"""

from finledger.services.storage.interface import (
    ALERTS_KEY,
    BUDGETS_KEY,
    EXPENSES_KEY,
    INVESTMENTS_KEY,
    AuditStorageInterface,
    CorruptRecordError,
    RecordStoreInterface,
    StorageError,
)
from finledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRecordStore,
)
from finledger.services.storage.json_file import (
    JsonFileRecordStore,
    JsonLinesAuditStorage,
)

__all__ = [
    # Keys
    "ALERTS_KEY",
    "BUDGETS_KEY",
    "EXPENSES_KEY",
    "INVESTMENTS_KEY",
    # Interfaces
    "AuditStorageInterface",
    "RecordStoreInterface",
    # Exceptions
    "CorruptRecordError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "JsonLinesAuditStorage",
]
