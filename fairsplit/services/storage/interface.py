"""
Abstract Storage Interface

DESIGN DECISION: The calculator only needs a durable key-value store,
like a browser's local storage: text values under string keys.
Defining that as an interface allows us to:
1. Keep a JSON file on disk for the real app
2. Use in-memory storage for tests and session-only mode
3. Keep the persistence logic independent of the medium

The interface is intentionally tiny. Record serialization lives in
PersistenceStore, not in the backends.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueBackend(ABC):
    """
    Abstract durable key-value medium.

    Values are opaque text. Implementations raise StorageUnavailableError
    when the medium cannot be read or written.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the text stored under a key.

        Returns:
            The stored text, or None if nothing was written under the key

        Raises:
            StorageUnavailableError: If the medium cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store text under a key, replacing any previous value.

        Raises:
            StorageUnavailableError: If the medium cannot be written
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Delete a key. Removing a missing key is not an error.

        Raises:
            StorageUnavailableError: If the medium cannot be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The storage medium cannot be read or written."""
    pass


class CorruptRecordError(StorageError):
    """A stored record could not be parsed or validated."""
    pass
