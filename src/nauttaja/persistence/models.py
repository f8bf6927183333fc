from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

# Local time, lexicographically sortable
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def timestamp_now() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


@dataclass
class SaveRecord:
    """A named pointer to a stored snapshot.

    ``storage_id`` is the only key used to address the snapshot on disk, so
    ``name`` may contain characters that are unsafe in paths.
    """

    name: str
    storage_id: str
    created_at: str = field(default_factory=timestamp_now)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "directory": self.storage_id, "timestamp": self.created_at}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SaveRecord":
        return SaveRecord(
            name=data["name"],
            storage_id=data["directory"],
            created_at=data["timestamp"],
        )


@dataclass
class ExternalConfig:
    external_root: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.external_root)

    def to_dict(self) -> Dict[str, Any]:
        return {"noita_root_dir": self.external_root}

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "ExternalConfig":
        return ExternalConfig(external_root=(data or {}).get("noita_root_dir"))


@dataclass
class StoreDocument:
    """Everything Nauttaja persists: configuration plus active and trashed saves."""

    config: ExternalConfig = field(default_factory=ExternalConfig)
    active_saves: List[SaveRecord] = field(default_factory=list)
    trashed_saves: List[SaveRecord] = field(default_factory=list)

    def find_active(self, name: str) -> Optional[SaveRecord]:
        return next((s for s in self.active_saves if s.name == name), None)

    def find_trashed(self, name: str) -> Optional[SaveRecord]:
        return next((s for s in self.trashed_saves if s.name == name), None)

    def all_records(self) -> List[SaveRecord]:
        return [*self.active_saves, *self.trashed_saves]

    def storage_ids(self) -> set:
        return {s.storage_id for s in self.all_records()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "saves": [s.to_dict() for s in self.active_saves],
            "trash": [s.to_dict() for s in self.trashed_saves],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "StoreDocument":
        return StoreDocument(
            config=ExternalConfig.from_dict(data.get("config")),
            active_saves=[SaveRecord.from_dict(s) for s in data.get("saves", [])],
            trashed_saves=[SaveRecord.from_dict(s) for s in data.get("trash", [])],
        )


def sorted_newest_first(records: List[SaveRecord]) -> List[SaveRecord]:
    return sorted(records, key=lambda s: s.created_at, reverse=True)
