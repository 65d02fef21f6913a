"""
Services Package

Storage backends and the simulated market data feed.
"""

from finledger.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    JsonFileRecordStore,
    JsonLinesAuditStorage,
    RecordStoreInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "JsonLinesAuditStorage",
    "RecordStoreInterface",
    "StorageError",
]
