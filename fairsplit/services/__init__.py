"""Services package."""

from fairsplit.services.storage import (
    CorruptRecordError,
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    PersistenceStore,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    "CorruptRecordError",
    "InMemoryBackend",
    "JsonFileBackend",
    "KeyValueBackend",
    "PersistenceStore",
    "StorageError",
    "StorageUnavailableError",
]
