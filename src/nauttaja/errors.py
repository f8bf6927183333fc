from __future__ import annotations

from pathlib import Path
from typing import Optional


class NauttajaError(Exception):
    """Base error for Nauttaja domain exceptions."""


class NotConfiguredError(NauttajaError):
    """Raised when the external game directory has not been set yet."""

    def __init__(self) -> None:
        super().__init__(
            "Game directory is not configured. Run: nauttaja set-external-dir <path to Noita's root directory>"
        )


class InvalidNameError(NauttajaError):
    """Raised when a save name is empty or whitespace only."""


# Store


class StoreError(NauttajaError):
    """Base error for reading or writing the save record store."""


class StoreIOError(StoreError):
    """Raised when the store document cannot be read or written."""


class CorruptStoreError(StoreError):
    """Raised when the persisted store document cannot be parsed or validated."""


# Directory operations


class FileOpError(NauttajaError):
    """Base error for directory copy/removal failures."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class SourceMissingError(FileOpError):
    """Raised when the directory to copy does not exist."""


class CopyError(FileOpError):
    """Raised when copying a directory tree fails partway."""


class TreeRemovalError(FileOpError):
    """Raised when a directory tree cannot be removed."""


# Load


class LoadError(NauttajaError):
    """Base error for failures while replacing the live state."""


class LoadAbortedError(LoadError):
    """Raised when load fails before the live state was touched."""


class LoadInterruptedError(LoadError):
    """Raised when load fails after the live state was (partially) removed.

    The backup slot holds the last known good live state.
    """

    def __init__(self, message: str, backup_dir: Path) -> None:
        super().__init__(message)
        self.backup_dir = Path(backup_dir)


class LiveStateRemovalError(LoadInterruptedError):
    """Raised when deleting the live state directory itself fails."""


class ExplorerError(NauttajaError):
    """Raised when a file explorer window cannot be opened."""
