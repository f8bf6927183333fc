from __future__ import annotations

import logging
from pathlib import Path

import pytest

from nauttaja.errors import ExplorerError
from nauttaja.explorer import default_command, open_in_explorer
from nauttaja.logging_config import configure_logging, resolve_level
from nauttaja.paths import AppPaths, live_state_dir
from nauttaja.settings import Settings


def test_default_settings():
    settings = Settings.load()
    assert settings.logging.level == "WARNING"
    assert settings.explorer.command is None


def test_user_settings_overlay(tmp_path: Path):
    user = tmp_path / "settings.yaml"
    user.write_text("logging:\n  level: DEBUG\n", encoding="utf-8")
    settings = Settings.load(user_path=user)
    assert settings.logging.level == "DEBUG"
    assert settings.explorer.command is None


def test_explorer_command_string_is_accepted(tmp_path: Path):
    user = tmp_path / "settings.yaml"
    user.write_text("explorer:\n  command: nautilus\n", encoding="utf-8")
    assert Settings.load(user_path=user).explorer.command == ["nautilus"]


def test_log_file_setting(tmp_path: Path):
    assert Settings.load().logging.file is False
    user = tmp_path / "settings.yaml"
    user.write_text("logging:\n  file: true\n", encoding="utf-8")
    settings = Settings.load(user_path=user)
    assert settings.logging.file is True
    assert settings.logging.level == "WARNING"


def test_unknown_setting_is_rejected(tmp_path: Path):
    user = tmp_path / "settings.yaml"
    user.write_text("logging:\n  colour: true\n", encoding="utf-8")
    with pytest.raises(TypeError):
        Settings.load(user_path=user)


def test_missing_user_settings_uses_defaults(tmp_path: Path):
    assert Settings.load(user_path=tmp_path / "nope.yaml") == Settings.load()


def test_environment_overrides_are_used(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NAUTTAJA_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("NAUTTAJA_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("NAUTTAJA_LOG_DIR", str(tmp_path / "logs"))

    paths = AppPaths()

    assert paths.data_dir == (tmp_path / "data").resolve()
    assert paths.config_dir == (tmp_path / "config").resolve()
    assert paths.log_dir == (tmp_path / "logs").resolve()
    assert paths.saves_dir == paths.data_dir / "saves"
    assert paths.store_path == paths.data_dir / "store.json"
    assert paths.backup_dir == paths.data_dir / "backup"
    assert paths.settings_path == paths.config_dir / "settings.yaml"


def test_explicit_data_dir_wins(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NAUTTAJA_DATA_DIR", str(tmp_path / "env"))
    paths = AppPaths(data_dir=tmp_path / "explicit")
    assert paths.data_dir == (tmp_path / "explicit").resolve()


def test_live_state_dir():
    assert live_state_dir("/games/noita") == Path("/games/noita") / "save00"


def test_resolve_level(monkeypatch):
    monkeypatch.delenv("NAUTTAJA_LOG_LEVEL", raising=False)
    assert resolve_level(debug=True, configured="ERROR") == logging.DEBUG
    assert resolve_level(configured="info") == logging.INFO
    assert resolve_level(configured="bogus") == logging.WARNING
    monkeypatch.setenv("NAUTTAJA_LOG_LEVEL", "error")
    assert resolve_level(configured="info") == logging.ERROR


def test_configure_logging_replaces_handlers():
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        configure_logging(logging.INFO)
        configure_logging(logging.DEBUG)
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])


def test_configure_logging_writes_log_file(tmp_path: Path):
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    log_file = tmp_path / "logs" / "nauttaja.log"
    try:
        configure_logging(logging.DEBUG, log_file=log_file)
        assert len(root.handlers) == 2
        logging.getLogger("nauttaja.test").debug("hello from the test")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])

    text = log_file.read_text(encoding="utf-8")
    assert "DEBUG" in text
    assert "nauttaja.test: hello from the test" in text


def test_open_in_explorer(tmp_path: Path):
    launched = []
    argv = open_in_explorer(tmp_path, command=["files"], spawn=launched.append)
    assert argv == ["files", str(tmp_path)]
    assert launched == [argv]


def test_open_in_explorer_default_command(tmp_path: Path):
    launched = []
    open_in_explorer(tmp_path, spawn=launched.append)
    assert launched[0][:-1] == default_command()


def test_open_in_explorer_errors(tmp_path: Path):
    with pytest.raises(ExplorerError):
        open_in_explorer(tmp_path / "missing", spawn=lambda argv: None)

    def missing_binary(argv):
        raise FileNotFoundError(argv[0])

    with pytest.raises(ExplorerError):
        open_in_explorer(tmp_path, command=["no-such-explorer"], spawn=missing_binary)


def test_open_in_explorer_spawns_with_popen_by_default(tmp_path: Path, monkeypatch):
    launched = []
    monkeypatch.setattr("nauttaja.explorer.subprocess.Popen", launched.append)
    argv = open_in_explorer(tmp_path, command=["files"])
    assert launched == [argv]
