import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from nauttaja.lifecycle import SaveLifecycle  # noqa: E402
from nauttaja.paths import AppPaths  # noqa: E402


@pytest.fixture()
def isolated_env(tmp_path, monkeypatch):
    """Point every Nauttaja directory at the temporary directory."""
    monkeypatch.setenv("NAUTTAJA_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("NAUTTAJA_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("NAUTTAJA_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("NAUTTAJA_LOG_LEVEL", raising=False)
    return tmp_path


@pytest.fixture()
def game_root(tmp_path) -> Path:
    """A Noita root directory with a live save holding world.dat="v1"."""
    root = tmp_path / "noita"
    live = root / "save00"
    (live / "world").mkdir(parents=True)
    (live / "world.dat").write_text("v1", encoding="utf-8")
    (live / "world" / "chunk_0.bin").write_bytes(b"\x00\x01\x02")
    return root


@pytest.fixture()
def paths(tmp_path, isolated_env) -> AppPaths:
    return AppPaths(data_dir=tmp_path / "data")


@pytest.fixture()
def lifecycle(paths, game_root) -> SaveLifecycle:
    lc = SaveLifecycle.from_paths(paths)
    lc.configure(game_root)
    return lc
