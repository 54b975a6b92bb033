"""
Content store for one layer resolution.

Header contents are keyed by a fingerprint of their relative path and trimmed
bytes, so the same header at the same path in two targets lands on a single
record, while identical text at different paths never does.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import dataclass

from .errors import IntegrityError

TRIM_BYTES = b" \r\n\t"


def trim_contents(raw: bytes) -> bytes:
    """Strip whitespace from both ends of a file; interior bytes are untouched."""
    return raw.strip(TRIM_BYTES)


def compute_fingerprint(rel_path: str, trimmed: bytes) -> str:
    """SHA256 over the relative path, a NUL terminator, then the trimmed contents."""
    h = hashlib.sha256()
    # Paths cannot contain NUL, so the path/content boundary is unambiguous.
    h.update(rel_path.encode("utf-8") + b"\0")
    h.update(trimmed)
    return h.hexdigest()


@dataclass
class ContentRecord:
    bytes: bytes
    fingerprint: str
    hit_count: int = 1
    is_generic: bool = False

    @property
    def size(self) -> int:
        return len(self.bytes)


class ContentStore:
    """Records for one layer, addressed by integer index."""

    def __init__(self) -> None:
        self._records: list[ContentRecord] = []
        self._by_fingerprint: dict[str, int] = {}

    def add(self, fingerprint: str, trimmed: bytes) -> tuple[int, bool]:
        """
        Count one observation of ``fingerprint``.

        Returns:
            The record index and whether the record was newly created.
        """
        index = self._by_fingerprint.get(fingerprint)
        if index is not None:
            self._records[index].hit_count += 1
            return index, False

        index = len(self._records)
        self._records.append(ContentRecord(bytes=trimmed, fingerprint=fingerprint))
        self._by_fingerprint[fingerprint] = index
        return index, True

    def mark_generic(self, index: int) -> ContentRecord:
        record = self._records[index]
        if record.is_generic:
            raise IntegrityError(f"Record {record.fingerprint} was already promoted to generic")
        record.is_generic = True
        return record

    def __getitem__(self, index: int) -> ContentRecord:
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ContentRecord]:
        return iter(self._records)
