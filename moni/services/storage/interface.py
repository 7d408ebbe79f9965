"""
Abstract Storage Interface

DESIGN DECISION: The whole data set lives in ONE named slot holding
its serialized text. The interface is a key-value slot, not a
repository: the data set is always read and written whole.
This allows us to:
1. Keep a local JSON file as the default backend
2. Use in-memory storage for testing
3. Swap in another key-value backend without touching the store
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageSlot(ABC):
    """
    Abstract interface for the persistent slot.

    Any storage implementation must implement these methods.
    """

    @property
    @abstractmethod
    def key(self) -> str:
        """Name of the slot (used in logs and audit events)."""
        pass

    @abstractmethod
    def read(self) -> Optional[str]:
        """
        Read the slot contents.

        Returns:
            The stored text, or None if the slot has never been written

        Raises:
            StorageReadError: If the slot exists but cannot be read
        """
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        """
        Replace the slot contents atomically.

        Readers see either the previous text or the new text,
        never a partial write.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the slot. A missing slot is not an error."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Persisted slot exists but is unreadable or corrupt."""
    pass


class StorageWriteError(StorageError):
    """Could not write the slot."""
    pass
