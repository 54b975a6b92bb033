"""
Generate the deduplicated, layered header directories.

Layers run bottom-up in the order given; each layer's generic output becomes
an input of a later layer. A failing layer aborts the whole run.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .errors import IntegrityError
from .resolve_layer import LayerResult, dedup_layer
from .targets import DONT_DEDUP_PATHS, LAYER_SPECS, SUPPORTED_TARGETS, LayerSpec, Target
from .utils import format_size, print_section

# ============================================================================
# Configuration
# ============================================================================

HEADERS_SOURCE_PREFIX = Path("headers")


def prepare_destination(dest: Path | str) -> Path:
    """Create the destination directory, refusing anything that is not a directory."""
    dest = Path(dest)
    if dest.exists() and not dest.is_dir():
        raise NotADirectoryError(f"path '{dest}' not a directory")
    dest.mkdir(parents=True, exist_ok=True)
    return dest


def generate_dedup_dirs(
    dest: Path | str,
    headers_dir: Path | str = HEADERS_SOURCE_PREFIX,
    layer_specs: Sequence[LayerSpec] = LAYER_SPECS,
    dont_dedup: frozenset[str] = DONT_DEDUP_PATHS,
    verbose: bool = False,
) -> list[LayerResult]:
    """
    Run every layer and write the result into ``dest``.

    Args:
        dest: Output directory
        headers_dir: Directory holding the fetched per-target header trees
        layer_specs: Layers in resolution order
        dont_dedup: Relative paths that are never moved into a generic directory
        verbose: Print every duplicate found
    """
    dest = prepare_destination(dest)
    headers_dir = Path(headers_dir)

    sources: dict[Target, Path] = {}
    for spec in layer_specs:
        for target in spec.inputs:
            sources.setdefault(target, headers_dir)

    results = []
    for step, spec in enumerate(layer_specs, 1):
        print_section(f"LAYER {step}/{len(layer_specs)}: {spec.output.full_name}")
        print("Inputs: " + ", ".join(t.full_name for t in spec.inputs))
        result = dedup_layer(spec, sources, dest, dont_dedup=dont_dedup, verbose=verbose)
        if result.target != spec.output:
            raise IntegrityError(f"Layer produced {result.target.full_name}, expected {spec.output.full_name}")
        sources[result.target] = dest
        results.append(result)

    if layer_specs is LAYER_SPECS and results[-1].target != SUPPORTED_TARGETS[0]:
        raise IntegrityError(f"Final layer produced {results[-1].target.full_name}, expected {SUPPORTED_TARGETS[0]}")

    print_section("SUMMARY")
    total_bytes = sum(r.scan.total_bytes for r in results)
    print(f"Layers:              {len(results)}")
    print(f"Bytes scanned:       {format_size(total_bytes)}")
    print(f"Generic files:       {sum(r.generic_files for r in results)}")
    print(f"Target-specific:     {sum(r.specific_files for r in results)}")
    print(f"Missed opportunity:  {format_size(sum(r.missed_opportunity_bytes for r in results))}")
    print(f"Output:              {dest}")

    return results
