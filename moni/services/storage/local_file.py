"""
Local File Storage Implementation

The slot is a single JSON file, `<data_dir>/<storage_key>.json`.

Writes go to a temporary file in the same directory which then
replaces the slot with os.replace, so the file is always either the
old or the new version. Transient OS errors are retried.

TRADEOFFS:
- Last writer wins; there is only ever one writer
- No history; exports are the backup mechanism
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from moni.config import get_settings
from moni.services.storage.interface import (
    StorageReadError,
    StorageSlot,
    StorageWriteError,
)


class LocalFileSlot(StorageSlot):
    """
    File-backed slot.

    The data directory is created on first write.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        key: Optional[str] = None,
    ):
        """
        Initialize the slot.

        Args:
            path: File backing the slot. Defaults to the configured slot path.
            key: Slot name for logs. Defaults to the configured storage key.
        """
        settings = get_settings().storage
        self._path = Path(path) if path is not None else settings.slot_path
        self._key = key or settings.storage_key

    @property
    def key(self) -> str:
        return self._key

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Optional[str]:
        if not self._path.exists():
            return None
        try:
            return self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {self._path}: {e}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _replace(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def write(self, text: str) -> None:
        try:
            self._replace(text)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self._path}: {e}") from e

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {self._path}: {e}") from e
