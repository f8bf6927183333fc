"""Import saves from the layout used before the record store existed.

Legacy layout (``~/.nauttaja``)::

    config.json              {"noita_root_dir": "..."}
    saves/<name>/timestamp.txt
    saves/<name>/save00/...

Saves are copied into managed storage; the legacy tree is never modified.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from .errors import NauttajaError
from .lifecycle import ResultCode, SaveLifecycle
from .paths import LIVE_STATE_DIRNAME, legacy_root
from .persistence.models import TIMESTAMP_FORMAT

logger = logging.getLogger(__name__)

LEGACY_CONFIG_FILE = "config.json"
LEGACY_SAVES_DIR = "saves"
LEGACY_TIMESTAMP_FILE = "timestamp.txt"


@dataclass
class MigrationReport:
    imported: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    configured: Optional[str] = None

    @property
    def migrated(self) -> bool:
        return bool(self.imported or self.configured)


def _read_timestamp(save_dir: Path) -> str:
    stamp_file = save_dir / LEGACY_TIMESTAMP_FILE
    try:
        stamp = stamp_file.read_text(encoding="utf-8").strip()
        datetime.strptime(stamp, TIMESTAMP_FORMAT)
        return stamp
    except (OSError, ValueError) as exc:
        logger.debug("No usable timestamp in %s (%s); using directory mtime", stamp_file, exc)
        return datetime.fromtimestamp(save_dir.stat().st_mtime).strftime(TIMESTAMP_FORMAT)


def _read_legacy_root_dir(root: Path) -> Optional[str]:
    config_file = root / LEGACY_CONFIG_FILE
    if not config_file.exists():
        return None
    data = json.loads(config_file.read_text(encoding="utf-8"))
    value = data.get("noita_root_dir") if isinstance(data, dict) else None
    return value or None


def migrate_legacy(lifecycle: SaveLifecycle, root: Optional[Union[str, Path]] = None) -> MigrationReport:
    """Copy legacy saves (and the game directory setting) into the store.

    Names that already exist in saves or trash are skipped.
    """
    root = Path(root).expanduser() if root is not None else legacy_root()
    report = MigrationReport()
    if not root.is_dir():
        report.errors.append(f"No legacy data found at {root}")
        return report

    if not lifecycle.is_configured():
        try:
            external_root = _read_legacy_root_dir(root)
        except (OSError, ValueError) as exc:
            report.errors.append(f"Could not read {root / LEGACY_CONFIG_FILE}: {exc}")
            external_root = None
        if external_root:
            lifecycle.configure(external_root)
            report.configured = external_root
            logger.info("Configured game directory from legacy config: %s", external_root)
        else:
            report.errors.append("Game directory is not configured. Run: nauttaja set-external-dir <path> first")
            return report

    saves_dir = root / LEGACY_SAVES_DIR
    if not saves_dir.is_dir():
        return report

    for save_dir in sorted(p for p in saves_dir.iterdir() if p.is_dir()):
        name = save_dir.name
        source = save_dir / LIVE_STATE_DIRNAME
        if not source.is_dir():
            report.errors.append(f"[{name}] has no {LIVE_STATE_DIRNAME} directory")
            continue
        try:
            result = lifecycle.import_save(source, name, created_at=_read_timestamp(save_dir))
        except NauttajaError as exc:
            logger.error("Migrating [%s] failed: %s", name, exc)
            report.errors.append(f"[{name}] {exc}")
            continue
        if result.code in (ResultCode.EXISTS_ACTIVE, ResultCode.EXISTS_TRASHED):
            report.skipped.append(name)
        else:
            report.imported.append(name)
    return report
