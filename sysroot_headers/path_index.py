"""Index of which target saw which content at each relative header path."""

from __future__ import annotations

from .errors import DuplicatePathError
from .targets import Target


class PathIndex:
    def __init__(self) -> None:
        # rel_path -> target -> record index in the layer's ContentStore
        self._paths: dict[str, dict[Target, int]] = {}

    def lookup(self, rel_path: str, target: Target) -> int | None:
        entry = self._paths.get(rel_path)
        if entry is None:
            return None
        return entry.get(target)

    def record(self, rel_path: str, target: Target, index: int) -> None:
        """Put-if-absent; a target may not map one path onto two different records."""
        entry = self._paths.setdefault(rel_path, {})
        existing = entry.get(target)
        if existing is None:
            entry[target] = index
        elif existing != index:
            raise DuplicatePathError(rel_path, target.full_name)

    def targets_for(self, rel_path: str) -> dict[Target, int]:
        return dict(self._paths.get(rel_path, {}))

    def paths(self) -> list[str]:
        return sorted(self._paths)

    def __contains__(self, rel_path: object) -> bool:
        return rel_path in self._paths

    def __len__(self) -> int:
        return len(self._paths)
