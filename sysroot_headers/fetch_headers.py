"""
Fetch the libc headers of the running host into ``headers/<target>``.

A small C file including every wanted header is compiled with ``-MD`` so the
compiler writes a dependency file listing each header it opened. Every listed
header below ``/usr/include`` is then copied into the target's directory.
"""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path

from .errors import HeadersDirMissingError
from .generate_dedup_dirs import HEADERS_SOURCE_PREFIX
from .targets import Target
from .utils import print_section

# ============================================================================
# Configuration
# ============================================================================

DEFAULT_SOURCE = Path(__file__).parent / "data" / "headers.c"
INCLUDE_PREFIX = "/usr/include"


def run_compiler(
    source: Path | str,
    dep_file: Path | str,
    cflags: Sequence[str] = (),
    compiler: str = "cc",
) -> None:
    """Compile ``source`` so that ``dep_file`` lists every header it includes."""
    output = Path(dep_file).parent / "headers"
    cmd = [compiler, "-o", str(output), str(source), "-MD", "-MV", "-MF", str(dep_file), *cflags]
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.stderr:
        print(result.stderr)
    result.check_returncode()


def parse_dep_file(text: str, prefix: str = INCLUDE_PREFIX) -> list[tuple[Path, str]]:
    """
    Extract the headers below ``prefix`` from a make-style dependency file.

    Returns:
        (absolute header path, path relative to ``prefix``) pairs
    """
    headers = []
    for line in text.split("\n"):
        if "clang" in line:
            continue
        idx = line.rfind(prefix)
        if idx == -1:
            continue
        rel_path = line[idx + len(prefix) + 1 :].strip(" \\")
        if not rel_path:
            continue
        headers.append((Path(line.strip(" \\")), rel_path))
    return headers


def fetch_headers(
    cflags: Sequence[str] = (),
    headers_dir: Path | str = HEADERS_SOURCE_PREFIX,
    target: Target | None = None,
    source: Path | str = DEFAULT_SOURCE,
    compiler: str = "cc",
) -> Path:
    """
    Populate ``<headers_dir>/<target full name>`` with the host's headers.

    Args:
        cflags: Extra compiler flags, e.g. ``-isysroot`` for another SDK
        headers_dir: Existing directory holding one tree per target
        target: Target to store the headers under; detected from the host by default
        source: C file including every wanted header
        compiler: C compiler driver

    Returns:
        The populated target directory
    """
    headers_dir = Path(headers_dir)
    if not headers_dir.is_dir():
        raise HeadersDirMissingError(
            f"path '{headers_dir}' not found or not a directory. Did you accidentally delete it?"
        )

    if target is None:
        target = Target.from_host()

    print_section(f"FETCHING HEADERS FOR {target.full_name}")

    with tempfile.TemporaryDirectory() as tmpdir:
        dep_file = Path(tmpdir) / "headers.o.d"
        run_compiler(source, dep_file, cflags, compiler=compiler)
        headers = parse_dep_file(dep_file.read_text())

    dest = headers_dir / target.full_name
    if dest.exists():
        shutil.rmtree(dest)
    dest.mkdir(parents=True)

    for src, rel_path in headers:
        dst = dest / rel_path
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)

    print(f"Copied {len(headers)} headers to: {dest}")
    return dest
