from __future__ import annotations

from pathlib import Path

import pytest

from nauttaja.errors import CopyError, SourceMissingError, TreeRemovalError
from nauttaja.fs import copy_tree, remove_tree


def _make_tree(root: Path) -> None:
    (root / "a" / "b").mkdir(parents=True)
    (root / "top.txt").write_text("top", encoding="utf-8")
    (root / "a" / "mid.bin").write_bytes(b"\x00\xff")
    (root / "a" / "b" / "deep.txt").write_text("deep", encoding="utf-8")


def test_copy_tree_preserves_structure(tmp_path: Path):
    src = tmp_path / "src"
    _make_tree(src)
    dst = tmp_path / "out" / "nested" / "dst"

    copy_tree(src, dst)

    assert (dst / "top.txt").read_text(encoding="utf-8") == "top"
    assert (dst / "a" / "mid.bin").read_bytes() == b"\x00\xff"
    assert (dst / "a" / "b" / "deep.txt").read_text(encoding="utf-8") == "deep"
    # Source untouched
    assert (src / "a" / "b" / "deep.txt").exists()


def test_copy_tree_missing_source(tmp_path: Path):
    with pytest.raises(SourceMissingError):
        copy_tree(tmp_path / "nope", tmp_path / "dst")
    assert not (tmp_path / "dst").exists()


def test_copy_tree_source_is_file(tmp_path: Path):
    f = tmp_path / "file.txt"
    f.write_text("x", encoding="utf-8")
    with pytest.raises(SourceMissingError):
        copy_tree(f, tmp_path / "dst")


def test_copy_tree_existing_destination_fails(tmp_path: Path):
    src = tmp_path / "src"
    _make_tree(src)
    dst = tmp_path / "dst"
    dst.mkdir()
    with pytest.raises(CopyError):
        copy_tree(src, dst)


def test_remove_tree(tmp_path: Path):
    root = tmp_path / "tree"
    _make_tree(root)
    remove_tree(root)
    assert not root.exists()


def test_remove_tree_missing_is_noop(tmp_path: Path):
    remove_tree(tmp_path / "missing")


def test_remove_tree_failure(tmp_path: Path, monkeypatch):
    root = tmp_path / "tree"
    _make_tree(root)

    def refuse(path, *args, **kwargs):
        raise PermissionError("in use")

    monkeypatch.setattr("nauttaja.fs.shutil.rmtree", refuse)
    with pytest.raises(TreeRemovalError) as exc:
        remove_tree(root)
    assert exc.value.path == root
