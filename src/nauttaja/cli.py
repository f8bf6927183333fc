from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from . import __version__
from .errors import LoadInterruptedError, NauttajaError, NotConfiguredError
from .explorer import BACKUP, DATA, GAME, SAVES, TARGETS, open_in_explorer
from .lifecycle import ACTIVE, TRASHED, OperationResult, ResultCode, SaveLifecycle
from .logging_config import LOG_FILENAME, configure_logging, resolve_level
from .migration import migrate_legacy
from .paths import AppPaths
from .persistence import SaveRecord
from .settings import Settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
# argparse uses 2 for usage errors
EXIT_DATA_AT_RISK = 3

# Rejections that are reported but are not failures
_INFORMATIONAL = {ResultCode.NOT_FOUND}


@dataclass
class CliContext:
    paths: AppPaths
    settings: Settings
    lifecycle: SaveLifecycle


def _print_saves(records: Iterable[SaveRecord]) -> None:
    records = list(records)
    if not records:
        print("No saves found")
        return
    for record in records:
        print(f"{record.created_at} - {record.name}")


def _report(result: OperationResult) -> int:
    if result.success:
        print(result.message)
        return EXIT_OK
    if result.code in _INFORMATIONAL:
        print(result.message)
        return EXIT_OK
    print(result.message, file=sys.stderr)
    return EXIT_ERROR


def _cmd_open(args: argparse.Namespace, ctx: CliContext) -> int:
    config = ctx.lifecycle.store.require_config()
    target = {
        GAME: Path(config.external_root),
        SAVES: ctx.paths.saves_dir,
        BACKUP: ctx.paths.backup_dir,
        DATA: ctx.paths.data_dir,
    }[args.target]
    open_in_explorer(target, command=ctx.settings.explorer.command)
    print(f"Opened {target}")
    return EXIT_OK


def _cmd_save(args: argparse.Namespace, ctx: CliContext) -> int:
    print(f"Saving game with name: {args.name}")
    return _report(ctx.lifecycle.create(args.name))


def _cmd_load(args: argparse.Namespace, ctx: CliContext) -> int:
    if not args.name:
        print("Please specify which save to load")
        _print_saves(ctx.lifecycle.list_saves(ACTIVE))
        return EXIT_OK
    print(f"Loading game with name: {args.name}")
    return _report(ctx.lifecycle.load(args.name))


def _cmd_list(args: argparse.Namespace, ctx: CliContext) -> int:
    _print_saves(ctx.lifecycle.list_saves(TRASHED if args.scope == "removed" else ACTIVE))
    return EXIT_OK


def _cmd_remove(args: argparse.Namespace, ctx: CliContext) -> int:
    if not args.name:
        print("Please specify which save to remove")
        _print_saves(ctx.lifecycle.list_saves(ACTIVE))
        return EXIT_OK
    return _report(ctx.lifecycle.remove(args.name))


def _cmd_restore(args: argparse.Namespace, ctx: CliContext) -> int:
    if not args.name:
        print("Please specify which removed save to restore")
        _print_saves(ctx.lifecycle.list_saves(TRASHED))
        return EXIT_OK
    return _report(ctx.lifecycle.restore(args.name))


def _cmd_delete(args: argparse.Namespace, ctx: CliContext) -> int:
    if not args.name:
        print("Please specify which removed save to delete permanently")
        _print_saves(ctx.lifecycle.list_saves(TRASHED))
        return EXIT_OK
    return _report(ctx.lifecycle.delete(args.name))


def _cmd_import(args: argparse.Namespace, ctx: CliContext) -> int:
    print(f"Importing {args.path} with name: {args.name}")
    return _report(ctx.lifecycle.import_save(args.path, args.name))


def _cmd_set_external_dir(args: argparse.Namespace, ctx: CliContext) -> int:
    return _report(ctx.lifecycle.configure(args.path))


def _cmd_migrate_legacy(args: argparse.Namespace, ctx: CliContext) -> int:
    report = migrate_legacy(ctx.lifecycle, args.path)
    if report.configured:
        print(f"Game directory set to {report.configured}")
    for name in report.imported:
        print(f"Imported [{name}]")
    for name in report.skipped:
        print(f"Skipped [{name}]: a save with that name already exists")
    for error in report.errors:
        print(error, file=sys.stderr)
    if not report.migrated and not report.skipped and not report.errors:
        print("Nothing to migrate")
    return EXIT_ERROR if report.errors else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="nauttaja", description="Named save snapshots for Noita")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--data-dir", type=Path, default=None, help="Directory holding saves, backup and store.json")
    p.add_argument(
        "--settings",
        dest="settings_path",
        type=Path,
        default=None,
        help="Path to a settings YAML file to load/override defaults.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging, also written to nauttaja.log in the log directory.",
    )
    sub = p.add_subparsers(dest="cmd")

    o = sub.add_parser("open", help="Open a directory in the file explorer")
    o.add_argument("target", nargs="?", choices=TARGETS, default=GAME, help="Which directory to open (default: game)")
    o.set_defaults(func=_cmd_open)

    s = sub.add_parser("save", help="Save the current game under a name")
    s.add_argument("name", help="Name of the new save")
    s.set_defaults(func=_cmd_save)

    ld = sub.add_parser("load", help="Replace the current game with a saved one")
    ld.add_argument("name", nargs="?", help="Name of the save to load")
    ld.set_defaults(func=_cmd_load)

    ls = sub.add_parser("list", help="List saves, or removed saves with 'removed'")
    ls.add_argument("scope", nargs="?", choices=["removed"], help="List saves in trash instead")
    ls.set_defaults(func=_cmd_list)

    rm = sub.add_parser("remove", help="Move a save to trash")
    rm.add_argument("name", nargs="?", help="Name of the save to remove")
    rm.set_defaults(func=_cmd_remove)

    rs = sub.add_parser("restore", help="Restore a save from trash")
    rs.add_argument("name", nargs="?", help="Name of the removed save")
    rs.set_defaults(func=_cmd_restore)

    d = sub.add_parser("delete", help="Permanently delete a save from trash")
    d.add_argument("name", nargs="?", help="Name of the removed save")
    d.set_defaults(func=_cmd_delete)

    i = sub.add_parser("import", help="Import a directory as a save")
    i.add_argument("path", type=Path, help="Directory to import")
    i.add_argument("name", help="Name of the new save")
    i.set_defaults(func=_cmd_import)

    c = sub.add_parser("set-external-dir", help="Set path to Noita's root directory")
    c.add_argument("path", type=Path, help="Path to Noita's root directory")
    c.set_defaults(func=_cmd_set_external_dir)

    m = sub.add_parser("migrate-legacy", help="Import saves kept by older releases in ~/.nauttaja")
    m.add_argument("path", nargs="?", type=Path, default=None, help="Legacy data directory (default: ~/.nauttaja)")
    m.set_defaults(func=_cmd_migrate_legacy)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "func", None) is None:
        parser.print_help()
        return EXIT_OK

    paths = AppPaths(data_dir=args.data_dir)
    try:
        settings = Settings.load(user_path=args.settings_path or paths.settings_path)
    except (OSError, yaml.YAMLError, TypeError) as exc:
        print(f"Could not load settings: {exc}", file=sys.stderr)
        return EXIT_ERROR
    log_file = paths.log_dir / LOG_FILENAME if (args.debug or settings.logging.file) else None
    try:
        configure_logging(resolve_level(args.debug, settings.logging.level), log_file=log_file)
    except OSError as exc:
        print(f"Could not open log file {log_file}: {exc}", file=sys.stderr)
        return EXIT_ERROR
    logger.debug("Data directory: %s", paths.data_dir)

    ctx = CliContext(paths=paths, settings=settings, lifecycle=SaveLifecycle.from_paths(paths))
    try:
        return args.func(args, ctx)
    except LoadInterruptedError as exc:
        print(
            "\n".join(
                [
                    "WARNING: loading was interrupted and the current save may be missing or incomplete.",
                    f"  {exc}",
                    f"  The save as it was before loading is kept in: {exc.backup_dir}",
                    "  Copy its contents back into the game's save00 directory to recover it.",
                ]
            ),
            file=sys.stderr,
        )
        return EXIT_DATA_AT_RISK
    except NotConfiguredError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_ERROR
    except NauttajaError as exc:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
