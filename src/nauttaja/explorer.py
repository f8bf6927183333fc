from __future__ import annotations

import logging
import platform
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .errors import ExplorerError

logger = logging.getLogger(__name__)

GAME = "game"
SAVES = "saves"
BACKUP = "backup"
DATA = "data"
TARGETS = (GAME, SAVES, BACKUP, DATA)


def default_command() -> List[str]:
    system = platform.system()
    if system == "Windows":
        return ["explorer"]
    if system == "Darwin":
        return ["open"]
    # Treat everything else as Linux/Unix
    return ["xdg-open"]


def open_in_explorer(
    path: Path,
    command: Optional[Sequence[str]] = None,
    spawn: Optional[Callable[..., object]] = None,
) -> List[str]:
    """Open ``path`` in the platform's file explorer without waiting for it.

    Returns the argv that was launched.
    """
    if not Path(path).exists():
        raise ExplorerError(f"Directory does not exist: {path}")
    spawn = spawn or subprocess.Popen
    argv = [*(command or default_command()), str(path)]
    logger.debug("Launching %s", argv)
    try:
        spawn(argv)
    except OSError as exc:
        raise ExplorerError(f"Could not open explorer ({argv[0]}): {exc}") from exc
    return argv
