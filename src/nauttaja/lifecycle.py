from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from .errors import (
    FileOpError,
    InvalidNameError,
    LiveStateRemovalError,
    LoadAbortedError,
    LoadInterruptedError,
    StoreError,
)
from .fs import DirectoryOps
from .paths import AppPaths, live_state_dir
from .persistence import (
    ExternalConfig,
    FileBackend,
    SaveRecord,
    SaveStore,
    StoreDocument,
    sorted_newest_first,
    timestamp_now,
)

logger = logging.getLogger(__name__)

ACTIVE = "active"
TRASHED = "trashed"
SCOPES = (ACTIVE, TRASHED)


class ResultCode(str, Enum):
    OK = "OK"
    EXISTS_ACTIVE = "EXISTS_ACTIVE"
    EXISTS_TRASHED = "EXISTS_TRASHED"
    NOT_FOUND = "NOT_FOUND"
    SAVE_IS_ACTIVE = "SAVE_IS_ACTIVE"
    LEFTOVER_STORAGE = "LEFTOVER_STORAGE"


@dataclass
class OperationResult:
    success: bool
    code: ResultCode
    message: str
    record: Optional[SaveRecord] = None


class _Rejected(Exception):
    """Aborts a store transaction with a user-facing result."""

    def __init__(self, result: OperationResult) -> None:
        super().__init__(result.message)
        self.result = result


def _not_found(name: str, where: str = "") -> OperationResult:
    suffix = f" in {where}" if where else ""
    return OperationResult(False, ResultCode.NOT_FOUND, f"Failed to find save with name: {name}{suffix}")


class SaveLifecycle:
    """Create, list, load, trash, restore and delete saves.

    The store document is the source of truth for which saves exist; the
    snapshot bytes live under ``saves/<storage_id>``. Records are only
    committed after their data exists, and the live state is only destroyed
    after the backup slot holds a copy of it.
    """

    def __init__(
        self,
        store: SaveStore,
        paths: AppPaths,
        fs: Optional[DirectoryOps] = None,
        clock: Callable[[], str] = timestamp_now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self.store = store
        self.paths = paths
        self.fs = fs or DirectoryOps()
        self._clock = clock
        self._id_factory = id_factory

    @classmethod
    def from_paths(cls, paths: AppPaths, fs: Optional[DirectoryOps] = None) -> "SaveLifecycle":
        return cls(SaveStore(FileBackend(paths.store_path)), paths, fs=fs)

    # Locations

    @property
    def backup_dir(self) -> Path:
        return self.paths.backup_dir

    def storage_dir(self, storage_id: str) -> Path:
        return self.paths.saves_dir / storage_id

    def live_state_dir(self, config: Optional[ExternalConfig] = None) -> Path:
        config = config or self.store.require_config()
        return live_state_dir(config.external_root)

    # Configuration

    def configure(self, external_root: Union[str, Path]) -> OperationResult:
        """Set the game's root directory. The only operation allowed before configuration."""
        root = Path(external_root).expanduser().resolve()
        notes = []
        if not root.is_dir():
            logger.warning("Game directory does not exist (yet): %s", root)
            notes.append(f"note: {root} does not exist")
        elif not live_state_dir(root).is_dir():
            logger.warning("No live save directory under %s", root)
            notes.append(f"note: {live_state_dir(root)} does not exist")

        def apply(document: StoreDocument) -> StoreDocument:
            document.config.external_root = str(root)
            return document

        self.store.transact(apply)
        message = "\n".join([f"Game directory set to {root}", *notes])
        return OperationResult(True, ResultCode.OK, message)

    def is_configured(self) -> bool:
        return self.store.load().config.is_configured

    # Queries

    def list_saves(self, scope: str = ACTIVE) -> List[SaveRecord]:
        """Return active or trashed saves, newest first."""
        if scope not in SCOPES:
            raise ValueError(f"Unknown scope {scope!r}; expected one of {SCOPES}")
        document = self.store.load()
        self.store.require_config(document)
        records = document.active_saves if scope == ACTIVE else document.trashed_saves
        return sorted_newest_first(records)

    # Capture

    def create(self, name: str) -> OperationResult:
        """Capture the live state under ``name``."""
        document = self.store.load()
        config = self.store.require_config(document)
        return self._capture(document, name, self.live_state_dir(config))

    def import_save(
        self, source: Union[str, Path], name: str, created_at: Optional[str] = None
    ) -> OperationResult:
        """Capture an arbitrary directory under ``name``."""
        document = self.store.load()
        self.store.require_config(document)
        return self._capture(document, name, Path(source).expanduser(), created_at)

    def _capture(
        self, document: StoreDocument, name: str, source: Path, created_at: Optional[str] = None
    ) -> OperationResult:
        name = self._clean_name(name)
        conflict = self._name_conflict(document, name)
        if conflict is not None:
            return conflict

        storage_id = self._new_storage_id(document)
        target = self.storage_dir(storage_id)
        logger.info("Capturing %s as [%s] into %s", source, name, target)
        try:
            self.fs.copy_tree(source, target)
        except FileOpError:
            self._discard(target)
            raise

        record = SaveRecord(name=name, storage_id=storage_id, created_at=created_at or self._clock())

        def insert(doc: StoreDocument) -> StoreDocument:
            conflict = self._name_conflict(doc, name)
            if conflict is not None:
                raise _Rejected(conflict)
            doc.active_saves.append(record)
            return doc

        try:
            self.store.transact(insert)
        except _Rejected as rejected:
            self._discard(target)
            return rejected.result
        except StoreError:
            self._discard(target)
            raise
        return OperationResult(True, ResultCode.OK, f"Successfully saved game with name: {name}", record)

    # Trash

    def remove(self, name: str) -> OperationResult:
        """Move an active save to the trash."""
        name = self._clean_name(name)
        moved: List[SaveRecord] = []

        def move(document: StoreDocument) -> StoreDocument:
            record = document.find_active(name)
            if record is None:
                raise _Rejected(_not_found(name, "saves"))
            document.active_saves.remove(record)
            document.trashed_saves.append(record)
            moved.append(record)
            return document

        return self._transact(move, lambda: f"Moved [{name}] to trash", moved)

    def restore(self, name: str) -> OperationResult:
        """Move a trashed save back to the active saves."""
        name = self._clean_name(name)
        moved: List[SaveRecord] = []

        def move(document: StoreDocument) -> StoreDocument:
            record = document.find_trashed(name)
            if record is None:
                raise _Rejected(_not_found(name, "trash"))
            document.trashed_saves.remove(record)
            document.active_saves.append(record)
            moved.append(record)
            return document

        return self._transact(move, lambda: f"Restored [{name}] from trash", moved)

    def delete(self, name: str) -> OperationResult:
        """Permanently delete a trashed save and its stored snapshot.

        The record is removed first; a snapshot directory that then fails to
        delete is only orphaned.
        """
        name = self._clean_name(name)
        dropped: List[SaveRecord] = []

        def drop(document: StoreDocument) -> StoreDocument:
            record = document.find_trashed(name)
            if record is None:
                if document.find_active(name) is not None:
                    raise _Rejected(
                        OperationResult(
                            False,
                            ResultCode.SAVE_IS_ACTIVE,
                            f"[{name}] is not in trash. Remove it first with: nauttaja remove {name}",
                        )
                    )
                raise _Rejected(_not_found(name, "trash"))
            document.trashed_saves.remove(record)
            dropped.append(record)
            return document

        result = self._transact(drop, lambda: f"Permanently deleted [{name}]", dropped)
        if not result.success:
            return result

        storage = self.storage_dir(dropped[0].storage_id)
        try:
            self.fs.remove_tree(storage)
        except FileOpError as exc:
            logger.warning("Record for [%s] deleted but its data could not be removed: %s", name, exc)
            return OperationResult(
                True,
                ResultCode.LEFTOVER_STORAGE,
                f"Deleted [{name}], but its files could not be removed: {storage}",
                dropped[0],
            )
        return result

    # Load

    def load(self, name: str) -> OperationResult:
        """Replace the live state with the snapshot saved as ``name``.

        Order: clear the backup slot, copy the live state into it, delete the
        live state, copy the snapshot in. Nothing is destroyed before the
        backup slot holds the current live state.
        """
        document = self.store.load()
        config = self.store.require_config(document)
        name = self._clean_name(name)
        record = document.find_active(name)
        if record is None:
            return _not_found(name)
        storage = self.storage_dir(record.storage_id)
        if not storage.is_dir():
            logger.error("Save [%s] has no data at %s", name, storage)
            return _not_found(name)

        live = self.live_state_dir(config)
        backup = self.backup_dir
        logger.info("Loading [%s] from %s into %s", name, storage, live)

        try:
            self.fs.remove_tree(backup)
        except FileOpError as exc:
            raise LoadAbortedError(f"Could not clear the previous backup at {backup}: {exc}") from exc

        live_exists = live.is_dir()
        try:
            if live_exists:
                self.fs.copy_tree(live, backup)
            else:
                logger.warning("No live save at %s; nothing to back up", live)
                backup.mkdir(parents=True, exist_ok=True)
        except (FileOpError, OSError) as exc:
            raise LoadAbortedError(
                f"Could not back up the current save to {backup}; nothing was changed: {exc}"
            ) from exc

        if live_exists:
            try:
                self.fs.remove_tree(live)
            except FileOpError as exc:
                logger.critical("Failed to remove live save %s: %s", live, exc)
                raise LiveStateRemovalError(
                    f"Failed to remove the current save at {live}: {exc}", backup_dir=backup
                ) from exc

        try:
            self.fs.copy_tree(storage, live)
        except FileOpError as exc:
            logger.critical("Failed to copy [%s] into %s: %s", name, live, exc)
            raise LoadInterruptedError(f"Failed to copy [{name}] into {live}: {exc}", backup_dir=backup) from exc

        return OperationResult(True, ResultCode.OK, f"Save [{name}] successfully loaded!", record)

    # Internal utilities

    def _transact(
        self,
        update: Callable[[StoreDocument], StoreDocument],
        message: Callable[[], str],
        touched: List[SaveRecord],
    ) -> OperationResult:
        self.store.require_config()
        try:
            self.store.transact(update)
        except _Rejected as rejected:
            logger.info("%s", rejected.result.message)
            return rejected.result
        return OperationResult(True, ResultCode.OK, message(), touched[0] if touched else None)

    @staticmethod
    def _clean_name(name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidNameError("Save name must not be empty")
        return cleaned

    @staticmethod
    def _name_conflict(document: StoreDocument, name: str) -> Optional[OperationResult]:
        if document.find_active(name) is not None:
            return OperationResult(False, ResultCode.EXISTS_ACTIVE, f"[{name}] already exists")
        if document.find_trashed(name) is not None:
            return OperationResult(
                False,
                ResultCode.EXISTS_TRASHED,
                f"[{name}] already exists in trash. Restore or delete it first",
            )
        return None

    def _new_storage_id(self, document: StoreDocument) -> str:
        taken = document.storage_ids()
        while True:
            storage_id = self._id_factory()
            if storage_id not in taken and not self.storage_dir(storage_id).exists():
                return storage_id
            logger.debug("Storage id %s already in use; generating another", storage_id)

    def _discard(self, target: Path) -> None:
        """Best-effort cleanup of an unreferenced snapshot directory."""
        try:
            self.fs.remove_tree(target)
        except FileOpError as exc:
            logger.warning("Leaving unreferenced directory %s: %s", target, exc)
