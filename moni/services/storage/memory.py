"""In-memory slot, for tests and embedding."""

from typing import Optional

from moni.services.storage.interface import StorageSlot, StorageWriteError


class InMemorySlot(StorageSlot):
    """
    Slot held in a Python string.

    `fail_writes` makes every write raise StorageWriteError, which is how
    tests exercise the store's save-failure path.
    """

    def __init__(
        self,
        initial: Optional[str] = None,
        key: str = "memory",
        fail_writes: bool = False,
    ):
        self._text = initial
        self._key = key
        self.fail_writes = fail_writes
        self.write_count = 0

    @property
    def key(self) -> str:
        return self._key

    def read(self) -> Optional[str]:
        return self._text

    def write(self, text: str) -> None:
        if self.fail_writes:
            raise StorageWriteError(f"Slot '{self._key}' is not writable")
        self._text = text
        self.write_count += 1

    def clear(self) -> None:
        self._text = None
