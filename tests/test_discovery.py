from __future__ import annotations

import os
from pathlib import Path

from pngshrink import batch
from pngshrink.batch import find_images


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x")
    return path


def test_finds_matching_files_recursively(tmp_path: Path) -> None:
    expected = {
        _touch(tmp_path / "a.png"),
        _touch(tmp_path / "b.png"),
        _touch(tmp_path / "c.png"),
        _touch(tmp_path / "nested" / "d.png"),
    }
    _touch(tmp_path / "notes.txt")
    _touch(tmp_path / "photo.jpg")

    assert find_images(tmp_path) == expected


def test_extension_match_is_case_sensitive(tmp_path: Path) -> None:
    lower = _touch(tmp_path / "a.png")
    _touch(tmp_path / "B.PNG")
    _touch(tmp_path / "c.Png")

    assert find_images(tmp_path) == {lower}


def test_custom_extension(tmp_path: Path) -> None:
    _touch(tmp_path / "a.png")
    apng = _touch(tmp_path / "sub" / "b.apng")

    assert find_images(tmp_path, extension="apng") == {apng}


def test_skips_directories_and_dotfiles_named_like_images(tmp_path: Path) -> None:
    (tmp_path / "folder.png").mkdir()
    _touch(tmp_path / ".png")
    inner = _touch(tmp_path / "folder.png" / "real.png")

    assert find_images(tmp_path) == {inner}


def test_missing_root_is_empty(tmp_path: Path) -> None:
    assert find_images(tmp_path / "does-not-exist") == set()


def test_unreadable_subdirectory_is_treated_as_empty(tmp_path: Path, monkeypatch) -> None:
    keep = _touch(tmp_path / "ok" / "a.png")
    _touch(tmp_path / "locked" / "b.png")
    _touch(tmp_path / "locked" / "deeper" / "c.png")

    real_scandir = os.scandir
    locked = str(tmp_path / "locked")

    def fake_scandir(path):
        if str(path) == locked:
            raise PermissionError(13, "Permission denied", locked)
        return real_scandir(path)

    monkeypatch.setattr(batch.os, "scandir", fake_scandir)

    assert find_images(tmp_path) == {keep}


def test_deep_tree_does_not_recurse(tmp_path: Path) -> None:
    d = tmp_path
    for i in range(200):
        d = d / f"d{i}"
    leaf = _touch(d / "leaf.png")

    assert find_images(tmp_path) == {leaf}
