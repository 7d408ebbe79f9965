"""Services package."""

from moni.services.storage import (
    InMemorySlot,
    LocalFileSlot,
    StorageError,
    StorageReadError,
    StorageSlot,
    StorageWriteError,
)

__all__ = [
    "InMemorySlot",
    "LocalFileSlot",
    "StorageError",
    "StorageReadError",
    "StorageSlot",
    "StorageWriteError",
]
