from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULTS_PACKAGE = "nauttaja.config"
DEFAULTS_FILE = "default_settings.yaml"


@dataclass
class LoggingSettings:
    level: str = "WARNING"
    # Also write a log file into the log directory
    file: bool = False


@dataclass
class ExplorerSettings:
    command: Optional[List[str]] = None

    def __post_init__(self) -> None:
        if isinstance(self.command, str):
            self.command = [self.command]
        self.command = list(self.command) if self.command else None


def _read_yaml(text: str, origin: str) -> Dict[str, Any]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise TypeError(f"{origin}: expected a mapping at the top level")
    return data


def _packaged_defaults() -> Dict[str, Any]:
    text = resources.files(DEFAULTS_PACKAGE).joinpath(DEFAULTS_FILE).read_text(encoding="utf-8")
    return _read_yaml(text, DEFAULTS_FILE)


@dataclass
class Settings:
    """Per-user preferences. Sections overlay key by key onto the packaged defaults."""

    logging: LoggingSettings = field(default_factory=LoggingSettings)
    explorer: ExplorerSettings = field(default_factory=ExplorerSettings)

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "Settings":
        sections = _packaged_defaults()
        if user_path is not None and user_path.exists():
            overrides = _read_yaml(user_path.read_text(encoding="utf-8"), str(user_path))
            for name, values in overrides.items():
                if isinstance(values, dict):
                    sections[name] = {**(sections.get(name) or {}), **values}
                else:
                    sections[name] = values
            logger.info("Loaded user settings from %s", user_path)
        elif user_path is not None:
            logger.debug("User settings file not found: %s", user_path)

        settings = cls(
            logging=LoggingSettings(**(sections.get("logging") or {})),
            explorer=ExplorerSettings(**(sections.get("explorer") or {})),
        )
        logger.debug("Settings: %s", settings)
        return settings
