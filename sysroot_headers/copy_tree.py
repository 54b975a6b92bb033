"""
Promote staged header trees into the destination directory.

Destination directories are replaced, never merged, so files from a previous
run cannot survive.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable
from pathlib import Path

from .errors import IntegrityError


def copy_dir_all(source: Path | str, dest: Path | str) -> int:
    """
    Recursively copy ``source`` into ``dest``, verifying each file's length.

    Returns:
        Number of files copied
    """
    source = Path(source)
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    copied = 0

    for entry in os.scandir(source):
        src = Path(entry.path)
        dst = dest / entry.name
        if entry.is_dir(follow_symlinks=False):
            copied += copy_dir_all(src, dst)
        elif entry.is_file(follow_symlinks=False):
            expected = entry.stat(follow_symlinks=False).st_size
            shutil.copyfile(src, dst)
            actual = dst.stat().st_size
            if actual != expected:
                raise IntegrityError(f"Copied {actual} of {expected} bytes: {src} -> {dst}")
            copied += 1
        else:
            print(f"Warning: unexpected file kind will be ignored: {src}")

    return copied


def remove_tree(path: Path | str) -> None:
    """Delete a directory tree if it exists."""
    path = Path(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def promote_staged(staging: Path | str, dest: Path | str, replace: Iterable[str]) -> int:
    """
    Replace directories under ``dest`` with the staged ones.

    Each staged directory is first copied to a ``.<name>.partial`` sibling
    under ``dest``. Only once every copy is verified are the old directories
    removed and the partial copies renamed into place, so a failed copy
    leaves ``dest`` untouched.

    Args:
        staging: Directory whose top-level subdirectories are target trees
        dest: Destination directory
        replace: Names under ``dest`` to delete, staged or not

    Returns:
        Number of files copied
    """
    staging = Path(staging)
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)

    partials: dict[str, Path] = {}
    copied = 0
    try:
        for entry in sorted(staging.iterdir()):
            if not entry.is_dir() or entry.is_symlink():
                print(f"Warning: unexpected file format: not a directory: '{entry.name}'")
                continue
            partial = dest / f".{entry.name}.partial"
            remove_tree(partial)
            partials[entry.name] = partial
            copied += copy_dir_all(entry, partial)
    except BaseException:
        for partial in partials.values():
            remove_tree(partial)
        raise

    for name in set(replace) | set(partials):
        remove_tree(dest / name)
    for name, partial in partials.items():
        os.replace(partial, dest / name)

    return copied
