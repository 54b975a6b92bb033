from __future__ import annotations

import os

import pytest

from conftest import read_tree
from sysroot_headers import copy_tree
from sysroot_headers.copy_tree import copy_dir_all, promote_staged, remove_tree
from sysroot_headers.errors import IntegrityError


def make_tree(root, files):
    for rel_path, contents in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(contents)


def test_copy_dir_all_preserves_structure(tmp_path):
    files = {"a.h": b"A", "sys/b.h": b"B\n", "sys/deep/c.h": b""}
    make_tree(tmp_path / "src", files)

    copied = copy_dir_all(tmp_path / "src", tmp_path / "dst")

    assert copied == 3
    assert read_tree(tmp_path / "dst") == files


def test_copy_dir_all_detects_truncated_copy(tmp_path, monkeypatch):
    make_tree(tmp_path / "src", {"a.h": b"ABCDEF"})

    def truncating_copy(src, dst):
        with open(dst, "wb") as f:
            f.write(b"ABC")

    monkeypatch.setattr(copy_tree.shutil, "copyfile", truncating_copy)
    with pytest.raises(IntegrityError):
        copy_dir_all(tmp_path / "src", tmp_path / "dst")


def test_copy_dir_all_skips_symlinks(tmp_path, capsys):
    make_tree(tmp_path / "src", {"a.h": b"A"})
    try:
        os.symlink(tmp_path / "src" / "a.h", tmp_path / "src" / "link.h")
    except OSError:
        pytest.skip("cannot create symlinks")

    copy_dir_all(tmp_path / "src", tmp_path / "dst")

    assert read_tree(tmp_path / "dst") == {"a.h": b"A"}
    assert "unexpected file kind" in capsys.readouterr().out


def test_remove_tree_tolerates_missing(tmp_path):
    remove_tree(tmp_path / "nothing")
    make_tree(tmp_path / "d", {"x/y.h": b"Y"})
    remove_tree(tmp_path / "d")
    assert not (tmp_path / "d").exists()


def test_promote_staged_replaces_and_removes(tmp_path, capsys):
    staging, dest = tmp_path / "staging", tmp_path / "dest"
    make_tree(staging, {"any-macos.11-any/a.h": b"new", "stray.txt": b"?"})
    make_tree(dest, {"any-macos.11-any/old.h": b"old", "x86_64-macos.11-none/b.h": b"old", "keep/c.h": b"C"})

    promote_staged(staging, dest, ["any-macos.11-any", "x86_64-macos.11-none"])

    assert read_tree(dest) == {"any-macos.11-any/a.h": b"new", "keep/c.h": b"C"}
    assert "not a directory: 'stray.txt'" in capsys.readouterr().out


def test_promote_staged_failure_leaves_dest_untouched(tmp_path, monkeypatch):
    staging, dest = tmp_path / "staging", tmp_path / "dest"
    make_tree(staging, {"any-macos.11-any/a.h": b"new", "x86_64-macos.11-none/b.h": b"new"})
    before = {"any-macos.11-any/a.h": b"old", "x86_64-macos.11-none/b.h": b"old"}
    make_tree(dest, before)

    real_copy = copy_tree.copy_dir_all

    def failing_copy(src, dst):
        if src.name == "x86_64-macos.11-none":
            raise IntegrityError("Copied 1 of 3 bytes")
        return real_copy(src, dst)

    monkeypatch.setattr(copy_tree, "copy_dir_all", failing_copy)
    with pytest.raises(IntegrityError):
        promote_staged(staging, dest, ["any-macos.11-any", "x86_64-macos.11-none"])

    assert read_tree(dest) == before
    assert sorted(p.name for p in dest.iterdir()) == ["any-macos.11-any", "x86_64-macos.11-none"]
