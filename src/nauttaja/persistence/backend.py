from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from ..errors import StoreIOError

logger = logging.getLogger(__name__)


class StoreBackend(ABC):
    """Where the encoded store document lives."""

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the current document text, or None if nothing was persisted yet."""

    @abstractmethod
    def write(self, text: str) -> None:
        """Replace the current document. Must be all-or-nothing."""


class FileBackend(StoreBackend):
    """Store document kept in a single JSON file.

    Writes go to a temporary file in the same directory which is flushed,
    fsynced and then renamed over the document with ``os.replace``.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def read(self) -> Optional[str]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read store %s: %s", self.path, exc)
            raise StoreIOError(f"Failed to read {self.path}: {exc}") from exc

    def write(self, text: str) -> None:
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            logger.debug("Writing store to temporary file: %s", tmp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
            logger.debug("Replaced %s", self.path)
        except OSError as exc:
            logger.error("Failed to write store %s: %s", self.path, exc)
            raise StoreIOError(f"Failed to write {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)


class InMemoryBackend(StoreBackend):
    """Test backend that holds the document text in memory only."""

    def __init__(self, text: Optional[str] = None) -> None:
        self.text = text
        self.writes = 0

    def read(self) -> Optional[str]:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
        self.writes += 1
