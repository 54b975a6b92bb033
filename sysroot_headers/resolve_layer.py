"""
Resolve one layer of targets into a generic target plus per-target leftovers.

For each relative header path, the content shared by the most targets is
written once into the layer's generic directory (``any-macos.<ver>-any``)
when at least two targets agree on it. Every target whose content differs
keeps its own copy under its own directory.
"""

from __future__ import annotations

import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .content_store import ContentRecord, ContentStore
from .copy_tree import promote_staged
from .path_index import PathIndex
from .scan_duplicates import ScanResult, find_duplicates
from .targets import DONT_DEDUP_PATHS, LayerSpec, Target
from .utils import format_size


@dataclass
class LayerResult:
    target: Target
    scan: ScanResult = field(default_factory=ScanResult)
    generic_files: int = 0
    specific_files: int = 0
    missed_opportunity_bytes: int = 0


def pick_generic(records: list[tuple[int, ContentRecord]]) -> list[tuple[int, ContentRecord]]:
    """
    Order candidate records for one path, best first.

    Highest hit count wins; equal hit counts fall back to the smaller
    fingerprint so the choice never depends on scan order.
    """
    return sorted(records, key=lambda item: (-item[1].hit_count, item[1].fingerprint))


def _write_file(root: Path, rel_path: str, contents: bytes) -> None:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(contents)


def dedup_layer(
    layer: LayerSpec,
    sources: Mapping[Target, Path | str],
    dest_dir: Path | str,
    dont_dedup: frozenset[str] = DONT_DEDUP_PATHS,
    verbose: bool = False,
) -> LayerResult:
    """
    Deduplicate the inputs of ``layer`` into ``dest_dir``.

    Args:
        layer: Targets to compare and the generic target to produce
        sources: Root directory holding each input target's tree
        dest_dir: Destination; input and output target directories are replaced
        dont_dedup: Relative paths that always stay per-target
        verbose: Print every duplicate found while scanning

    Returns:
        Layer statistics and the generic target, to be fed into the next layer
    """
    if not layer.inputs:
        raise ValueError(f"Layer {layer.output.full_name} has no input targets")

    dest_dir = Path(dest_dir)
    store = ContentStore()
    index = PathIndex()
    result = LayerResult(target=layer.output)

    for target in layer.inputs:
        result.scan += find_duplicates(target, sources[target], store, index, verbose=verbose)

    print(
        f"summary: {format_size(result.scan.total_bytes)} could be reduced to "
        f"{format_size(result.scan.total_bytes - result.scan.max_bytes_saved)}"
    )

    common_name = layer.output.full_name

    with tempfile.TemporaryDirectory(prefix="sysroot-headers-") as tmp:
        staging = Path(tmp)

        for rel_path in index.paths():
            by_target = index.targets_for(rel_path)

            if rel_path not in dont_dedup:
                candidates = pick_generic([(i, store[i]) for i in dict.fromkeys(by_target.values())])
                best_index, best = candidates[0]
                if best.hit_count > 1:
                    _write_file(staging / common_name, rel_path, best.bytes)
                    store.mark_generic(best_index)
                    result.generic_files += 1
                    for _, contender in candidates[1:]:
                        if contender.hit_count <= 1:
                            break
                        missed = contender.hit_count * contender.size
                        result.missed_opportunity_bytes += missed
                        print(f"Missed opportunity ({format_size(missed)}): {rel_path}")

            for target, record_index in by_target.items():
                record = store[record_index]
                if record.is_generic:
                    continue
                _write_file(staging / target.full_name, rel_path, record.bytes)
                result.specific_files += 1

        replace = [t.full_name for t in layer.inputs] + [common_name]
        promote_staged(staging, dest_dir, replace)

    print(
        f"{common_name}: {result.generic_files} generic, {result.specific_files} target-specific files"
        + (f", missed {format_size(result.missed_opportunity_bytes)}" if result.missed_opportunity_bytes else "")
    )
    return result
