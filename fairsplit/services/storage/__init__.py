"""
Storage Services Package

Provides the key-value backend interface, its implementations, and the
PersistenceStore that keeps the calculator's last state on top of them.
"""

from fairsplit.services.storage.interface import (
    CorruptRecordError,
    KeyValueBackend,
    StorageError,
    StorageUnavailableError,
)
from fairsplit.services.storage.backends import (
    InMemoryBackend,
    JsonFileBackend,
)
from fairsplit.services.storage.store import PersistenceStore

__all__ = [
    # Interfaces
    "KeyValueBackend",
    # Exceptions
    "CorruptRecordError",
    "StorageError",
    "StorageUnavailableError",
    # Implementations
    "InMemoryBackend",
    "JsonFileBackend",
    "PersistenceStore",
]
