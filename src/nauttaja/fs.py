"""Directory tree primitives.

Copying is all-or-error from the caller's point of view: any failure means
the destination is not guaranteed complete and must not be relied upon.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Union

from .errors import CopyError, SourceMissingError, TreeRemovalError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def copy_tree(source: PathLike, destination: PathLike) -> None:
    """Recursively copy ``source`` to ``destination``.

    The destination's parent is created when missing; the destination itself
    must not exist yet.

    Raises:
        SourceMissingError: if ``source`` does not exist or is not a directory.
        CopyError: for any other I/O failure during the copy.
    """
    src = Path(source)
    dst = Path(destination)
    if not src.is_dir():
        raise SourceMissingError(f"Directory to copy does not exist: {src}", path=src)
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Copying %s -> %s", src, dst)
        shutil.copytree(src, dst)
    except (OSError, shutil.Error) as exc:
        logger.error("Copy %s -> %s failed: %s", src, dst, exc)
        raise CopyError(f"Failed to copy {src} to {dst}: {exc}", path=dst) from exc


def remove_tree(path: PathLike) -> None:
    """Recursively delete ``path``. A missing path is a no-op."""
    target = Path(path)
    if not target.exists():
        return
    try:
        logger.debug("Removing %s", target)
        shutil.rmtree(target)
    except OSError as exc:
        logger.error("Removing %s failed: %s", target, exc)
        raise TreeRemovalError(f"Failed to remove {target}: {exc}", path=target) from exc


class DirectoryOps:
    """Directory operations used by the lifecycle manager.

    Tests substitute a subclass that fails on demand.
    """

    def copy_tree(self, source: PathLike, destination: PathLike) -> None:
        copy_tree(source, destination)

    def remove_tree(self, path: PathLike) -> None:
        remove_tree(path)
