"""
Storage Services Package

Provides the abstract slot interface and concrete implementations.
The local JSON file is the default backend; the in-memory slot is
used by tests.
"""

from moni.services.storage.interface import (
    StorageError,
    StorageReadError,
    StorageSlot,
    StorageWriteError,
)
from moni.services.storage.local_file import LocalFileSlot
from moni.services.storage.memory import InMemorySlot

__all__ = [
    # Interface
    "StorageSlot",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemorySlot",
    "LocalFileSlot",
]
