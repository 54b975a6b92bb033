from __future__ import annotations

from pathlib import Path

import pytest

from sysroot_headers.targets import Abi, Arch, LayerSpec, OsVer, Target

X86_11 = Target(arch=Arch.X86_64, os_ver=OsVer.BIG_SUR)
ARM_11 = Target(arch=Arch.AARCH64, os_ver=OsVer.BIG_SUR)
X86_12 = Target(arch=Arch.X86_64, os_ver=OsVer.MONTEREY)
ARM_12 = Target(arch=Arch.AARCH64, os_ver=OsVer.MONTEREY)
GENERIC_11 = Target(arch=Arch.ANY, os_ver=OsVer.BIG_SUR, abi=Abi.ANY)


def write_tree(root: Path, target: Target, files: dict[str, str | bytes]) -> Path:
    """Write ``files`` (relative path -> contents) under ``root/<target full name>``."""
    target_dir = root / target.full_name
    for rel_path, contents in files.items():
        path = target_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(contents, str):
            contents = contents.encode()
        path.write_bytes(contents)
    return target_dir


def read_tree(root: Path) -> dict[str, bytes]:
    """Map every file below ``root`` (as a POSIX relative path) to its bytes."""
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


@pytest.fixture
def headers_dir(tmp_path: Path) -> Path:
    path = tmp_path / "headers"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def layer_11() -> LayerSpec:
    return LayerSpec(output=GENERIC_11, inputs=(X86_11, ARM_11))
