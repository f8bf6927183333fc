from __future__ import annotations

import json
from pathlib import Path

import pytest

from nauttaja.lifecycle import SaveLifecycle
from nauttaja.migration import migrate_legacy


def _legacy_save(root: Path, name: str, stamp: str, content: str) -> None:
    save_dir = root / "saves" / name
    (save_dir / "save00").mkdir(parents=True)
    (save_dir / "timestamp.txt").write_text(stamp, encoding="utf-8")
    (save_dir / "save00" / "world.dat").write_text(content, encoding="utf-8")


@pytest.fixture()
def legacy(tmp_path: Path, game_root: Path) -> Path:
    root = tmp_path / ".nauttaja"
    root.mkdir()
    (root / "config.json").write_text(json.dumps({"noita_root_dir": str(game_root)}), encoding="utf-8")
    _legacy_save(root, "early", "2021-02-03 04:05:06", "early-world")
    _legacy_save(root, "late", "2021-06-07 08:09:10", "late-world")
    return root


def test_migrates_config_and_saves(paths, legacy: Path, game_root: Path):
    lc = SaveLifecycle.from_paths(paths)

    report = migrate_legacy(lc, legacy)

    assert report.migrated
    assert report.configured == str(game_root)
    assert sorted(report.imported) == ["early", "late"]
    assert report.errors == []
    saves = lc.list_saves()
    assert [(s.name, s.created_at) for s in saves] == [
        ("late", "2021-06-07 08:09:10"),
        ("early", "2021-02-03 04:05:06"),
    ]
    stored = lc.storage_dir(saves[1].storage_id) / "world.dat"
    assert stored.read_text(encoding="utf-8") == "early-world"
    # Legacy tree untouched
    assert (legacy / "saves" / "early" / "save00" / "world.dat").exists()


def test_existing_names_are_skipped(lifecycle: SaveLifecycle, legacy: Path):
    lifecycle.create("early")
    lifecycle.remove("early")

    report = migrate_legacy(lifecycle, legacy)

    assert report.configured is None
    assert report.skipped == ["early"]
    assert report.imported == ["late"]


def test_bad_timestamp_falls_back_to_mtime(lifecycle: SaveLifecycle, tmp_path: Path):
    root = tmp_path / "legacy"
    _legacy_save(root, "odd", "yesterday-ish", "x")

    migrate_legacy(lifecycle, root)

    record = lifecycle.list_saves()[0]
    assert record.name == "odd"
    assert len(record.created_at) == len("2021-01-01 00:00:00")


def test_save_without_live_dir_is_reported(lifecycle: SaveLifecycle, tmp_path: Path):
    root = tmp_path / "legacy"
    (root / "saves" / "empty").mkdir(parents=True)

    report = migrate_legacy(lifecycle, root)

    assert report.imported == []
    assert any("empty" in e for e in report.errors)


def test_missing_legacy_root(lifecycle: SaveLifecycle, tmp_path: Path):
    report = migrate_legacy(lifecycle, tmp_path / "nothing")
    assert not report.migrated
    assert report.errors


def test_unconfigured_without_legacy_config(paths, tmp_path: Path):
    root = tmp_path / "legacy"
    _legacy_save(root, "a", "2021-01-01 00:00:00", "x")
    lc = SaveLifecycle.from_paths(paths)

    report = migrate_legacy(lc, root)

    assert report.imported == []
    assert "not configured" in report.errors[0]
