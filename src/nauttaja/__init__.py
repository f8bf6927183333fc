"""
Nauttaja: named save snapshots for Noita.

This package provides:
- A save record store persisted with write-then-rename updates
- A lifecycle manager to save, load, trash, restore, delete and import saves
- A backup-before-overwrite load that always keeps the replaced save
- A command line interface (``nauttaja``)
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
