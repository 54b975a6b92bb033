from __future__ import annotations

import pytest

from conftest import ARM_11, X86_11
from sysroot_headers.content_store import ContentStore, compute_fingerprint, trim_contents
from sysroot_headers.errors import DuplicatePathError, IntegrityError
from sysroot_headers.path_index import PathIndex


def test_trim_only_touches_the_ends():
    assert trim_contents(b"\r\n\t  #pragma once\n\n#define A 1 \t\r\n") == b"#pragma once\n\n#define A 1"
    assert trim_contents(b" \n\t") == b""


def test_fingerprint_includes_path():
    assert compute_fingerprint("a.h", b"X") == compute_fingerprint("a.h", b"X")
    assert compute_fingerprint("a.h", b"X") != compute_fingerprint("b.h", b"X")
    assert compute_fingerprint("a.h", b"X") != compute_fingerprint("a.h", b"Y")
    assert len(compute_fingerprint("a.h", b"X")) == 64
    assert compute_fingerprint("a.h", b"hb") != compute_fingerprint("a.hh", b"b")


def test_store_counts_hits():
    store = ContentStore()
    fp = compute_fingerprint("a.h", b"X")

    index, is_new = store.add(fp, b"X")
    assert is_new
    again, is_new = store.add(fp, b"X")
    assert not is_new
    assert again == index

    record = store[index]
    assert record.hit_count == 2
    assert record.size == 1
    assert not record.is_generic
    assert len(store) == 1


def test_mark_generic_only_once():
    store = ContentStore()
    index, _ = store.add("fp", b"X")
    assert store.mark_generic(index).is_generic
    with pytest.raises(IntegrityError):
        store.mark_generic(index)


def test_path_index_put_if_absent():
    index = PathIndex()
    index.record("a.h", X86_11, 0)
    index.record("a.h", ARM_11, 0)
    index.record("a.h", X86_11, 0)

    assert index.targets_for("a.h") == {X86_11: 0, ARM_11: 0}
    assert index.lookup("a.h", ARM_11) == 0
    assert index.lookup("b.h", ARM_11) is None
    assert "a.h" in index
    assert len(index) == 1

    with pytest.raises(DuplicatePathError):
        index.record("a.h", X86_11, 1)


def test_path_index_paths_are_sorted():
    index = PathIndex()
    for i, path in enumerate(["sys/types.h", "assert.h", "mach/mach.h"]):
        index.record(path, X86_11, i)
    assert index.paths() == ["assert.h", "mach/mach.h", "sys/types.h"]
