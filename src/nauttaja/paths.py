from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from platformdirs import PlatformDirs

logger = logging.getLogger(__name__)

APP_NAME = "nauttaja"

# Environment variable overrides (useful for tests and power users)
ENV_DATA_DIR = "NAUTTAJA_DATA_DIR"
ENV_CONFIG_DIR = "NAUTTAJA_CONFIG_DIR"
ENV_LOG_DIR = "NAUTTAJA_LOG_DIR"

SAVES_DIRNAME = "saves"
BACKUP_DIRNAME = "backup"
STORE_FILENAME = "store.json"
SETTINGS_FILENAME = "settings.yaml"

# Directory under the game's root that holds the live save
LIVE_STATE_DIRNAME = "save00"

# Layout used by releases before the record store existed
LEGACY_DIRNAME = ".nauttaja"


class AppPaths:
    """Resolve Nauttaja's per-user directories.

    Managed storage layout under ``data_dir``:
    - saves/<storage_id>/  snapshot contents
    - backup/              copy of the live state taken before the last load
    - store.json           the save record document

    An explicit ``data_dir`` wins over the environment, which wins over the
    platformdirs default.
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None, app_name: str = APP_NAME) -> None:
        self._dirs = PlatformDirs(appname=app_name, appauthor=False)
        if data_dir is not None:
            self._data_dir = Path(data_dir).expanduser().resolve()
        else:
            self._data_dir = self._compute_dir(ENV_DATA_DIR, Path(self._dirs.user_data_dir))
        self._config_dir = self._compute_dir(ENV_CONFIG_DIR, Path(self._dirs.user_config_dir))
        self._log_dir = self._compute_dir(ENV_LOG_DIR, Path(self._dirs.user_log_dir))

    @staticmethod
    def _compute_dir(env_var: str, default: Path) -> Path:
        override = os.getenv(env_var)
        if override:
            return Path(override).expanduser().resolve()
        return Path(default).expanduser().resolve()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    @property
    def saves_dir(self) -> Path:
        return self._data_dir / SAVES_DIRNAME

    @property
    def backup_dir(self) -> Path:
        return self._data_dir / BACKUP_DIRNAME

    @property
    def store_path(self) -> Path:
        return self._data_dir / STORE_FILENAME

    @property
    def settings_path(self) -> Path:
        return self._config_dir / SETTINGS_FILENAME


def legacy_root() -> Path:
    """Return the directory used by releases that kept saves under the home directory."""
    return Path.home() / LEGACY_DIRNAME


def live_state_dir(external_root: Union[str, Path]) -> Path:
    return Path(external_root) / LIVE_STATE_DIRNAME
