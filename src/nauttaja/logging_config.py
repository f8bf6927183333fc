import logging
import os
import sys
from pathlib import Path
from typing import Optional

ENV_LOG_LEVEL = "NAUTTAJA_LOG_LEVEL"
LOG_FILENAME = "nauttaja.log"


def resolve_level(debug: bool = False, configured: Optional[str] = None, default: int = logging.WARNING) -> int:
    """Pick the log level: --debug, then NAUTTAJA_LOG_LEVEL, then settings."""
    if debug:
        return logging.DEBUG
    for name in (os.getenv(ENV_LOG_LEVEL), configured):
        if name:
            level = logging.getLevelName(name.strip().upper())
            if isinstance(level, int):
                return level
    return default


def configure_logging(level: int = logging.WARNING, log_file: Optional[Path] = None) -> None:
    """Log to stderr and, when ``log_file`` is given, append to that file as well."""
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    handlers: list = [logging.StreamHandler(stream=sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers to avoid duplicates in repeated test runs
    for h in list(root.handlers):
        root.removeHandler(h)
        if isinstance(h, logging.FileHandler):
            h.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
