"""
Scan one target's header tree into a layer's content store and path index.

Every regular file under ``<root>/<target full name>`` is trimmed and
fingerprinted. A fingerprint seen before counts as a duplicate: the same
header at the same relative path in another target.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .content_store import ContentStore, compute_fingerprint, trim_contents
from .errors import DuplicatePathError
from .path_index import PathIndex
from .targets import Target
from .utils import format_size


@dataclass
class ScanResult:
    total_bytes: int = 0
    max_bytes_saved: int = 0
    files: int = 0

    def __add__(self, other: ScanResult) -> ScanResult:
        return ScanResult(
            total_bytes=self.total_bytes + other.total_bytes,
            max_bytes_saved=self.max_bytes_saved + other.max_bytes_saved,
            files=self.files + other.files,
        )


def find_duplicates(
    target: Target,
    root: Path | str,
    store: ContentStore,
    index: PathIndex,
    verbose: bool = False,
) -> ScanResult:
    """
    Fingerprint every header of ``target`` under ``root``.

    Args:
        target: Target whose tree is scanned
        root: Directory holding the ``target.full_name`` tree
        store: Content store shared by the whole layer
        index: Path index shared by the whole layer
        verbose: Print a line for every duplicate found

    Returns:
        Byte totals for this target. A missing target directory scans as empty.
    """
    result = ScanResult()
    target_dir = Path(root) / target.full_name
    dir_stack = [target_dir]

    while dir_stack:
        current = dir_stack.pop()
        try:
            entries = list(os.scandir(current))
        except FileNotFoundError:
            if current == target_dir:
                return result
            raise

        for entry in entries:
            full_path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                dir_stack.append(full_path)
            elif entry.is_file(follow_symlinks=False):
                _scan_file(target, target_dir, full_path, store, index, result, verbose)
            else:
                print(f"Warning: unexpected file: {full_path}")

    return result


def _scan_file(
    target: Target,
    target_dir: Path,
    full_path: Path,
    store: ContentStore,
    index: PathIndex,
    result: ScanResult,
    verbose: bool,
) -> None:
    rel_path = full_path.relative_to(target_dir).as_posix()
    raw_bytes = full_path.read_bytes()
    trimmed = trim_contents(raw_bytes)
    fingerprint = compute_fingerprint(rel_path, trimmed)

    # Re-observing the same path must not count twice.
    seen = index.lookup(rel_path, target)
    if seen is not None:
        if store[seen].fingerprint != fingerprint:
            raise DuplicatePathError(rel_path, target.full_name)
        return

    record_index, is_new = store.add(fingerprint, trimmed)
    result.total_bytes += len(raw_bytes)
    result.files += 1
    if not is_new:
        result.max_bytes_saved += len(raw_bytes)
        if verbose:
            print(f"duplicate: {target.full_name} {rel_path} ({format_size(len(raw_bytes))})")

    index.record(rel_path, target, record_index)
