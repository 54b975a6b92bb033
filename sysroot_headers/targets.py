"""
Supported header targets and the layering scheme built from them.

A target is one (architecture, OS, OS version, ABI) variant of the libc
headers. Targets are laid out on disk by their full name, e.g.
``x86_64-macos.11-none`` or ``any-macos-any``.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from enum import Enum

from .errors import UnsupportedHostError


class Arch(Enum):
    ANY = "any"
    AARCH64 = "aarch64"
    X86_64 = "x86_64"

    @classmethod
    def from_machine(cls, machine: str) -> Arch:
        """Map a ``platform.machine()`` string onto a supported architecture."""
        machine = machine.lower()
        if machine in ("arm64", "aarch64"):
            return cls.AARCH64
        if machine in ("x86_64", "amd64"):
            return cls.X86_64
        raise UnsupportedHostError(f"Unsupported CPU architecture: {machine}")


class Abi(Enum):
    ANY = "any"
    NONE = "none"


class OsVer(Enum):
    ANY = 0
    CATALINA = 10
    BIG_SUR = 11
    MONTEREY = 12

    @classmethod
    def from_major(cls, major: int) -> OsVer:
        for ver in cls:
            if ver is not cls.ANY and ver.value == major:
                return ver
        raise UnsupportedHostError(f"Unsupported macOS version: {major}")


@dataclass(frozen=True)
class Target:
    arch: Arch
    os_ver: OsVer
    os: str = "macos"
    abi: Abi = Abi.NONE

    @property
    def name(self) -> str:
        """Short name, without the OS version: ``aarch64-macos-none``."""
        return f"{self.arch.value}-{self.os}-{self.abi.value}"

    @property
    def full_name(self) -> str:
        """Directory name: ``aarch64-macos.11-none``, or the short name for any version."""
        if self.os_ver is OsVer.ANY:
            return self.name
        return f"{self.arch.value}-{self.os}.{self.os_ver.value}-{self.abi.value}"

    def __str__(self) -> str:
        return self.full_name

    @classmethod
    def parse(cls, full_name: str) -> Target:
        """Parse a name produced by :attr:`full_name`."""
        parts = full_name.split("-")
        if len(parts) != 3:
            raise ValueError(f"Invalid target name: {full_name!r}")
        arch_str, os_str, abi_str = parts
        os_ver = OsVer.ANY
        if "." in os_str:
            os_str, ver_str = os_str.split(".", 1)
            if not ver_str.isdigit():
                raise ValueError(f"Invalid OS version in target name: {full_name!r}")
            try:
                os_ver = OsVer(int(ver_str))
            except ValueError as e:
                raise ValueError(f"Unknown OS version in target name: {full_name!r}") from e
            if os_ver is OsVer.ANY:
                raise ValueError(f"Invalid OS version in target name: {full_name!r}")
        try:
            return cls(arch=Arch(arch_str), os_ver=os_ver, os=os_str, abi=Abi(abi_str))
        except ValueError as e:
            raise ValueError(f"Invalid target name: {full_name!r}") from e

    @classmethod
    def from_host(cls) -> Target:
        """Detect the target of the running macOS host."""
        release = platform.mac_ver()[0]
        if not release:
            raise UnsupportedHostError(f"Host is not macOS: {platform.system()}")
        major = int(release.split(".")[0])
        return cls(arch=Arch.from_machine(platform.machine()), os_ver=OsVer.from_major(major))


# ============================================================================
# Configuration
# ============================================================================

# The first entry is the output of the topmost layer.
SUPPORTED_TARGETS: tuple[Target, ...] = (
    Target(arch=Arch.ANY, os_ver=OsVer.ANY, abi=Abi.ANY),
    Target(arch=Arch.AARCH64, os_ver=OsVer.ANY),
    Target(arch=Arch.X86_64, os_ver=OsVer.ANY),
    Target(arch=Arch.X86_64, os_ver=OsVer.CATALINA),
    Target(arch=Arch.X86_64, os_ver=OsVer.BIG_SUR),
    Target(arch=Arch.X86_64, os_ver=OsVer.MONTEREY),
    Target(arch=Arch.AARCH64, os_ver=OsVer.BIG_SUR),
    Target(arch=Arch.AARCH64, os_ver=OsVer.MONTEREY),
)

LAYERED_OS_VERSIONS: tuple[OsVer, ...] = (OsVer.CATALINA, OsVer.BIG_SUR, OsVer.MONTEREY)

# Headers that are identical across architectures but use relative includes,
# so they cannot be moved into a shared directory such as `any-macos-any`.
DONT_DEDUP_PATHS: frozenset[str] = frozenset(
    {
        "libkern/OSAtomic.h",
        "libkern/OSAtomicDeprecated.h",
        "libkern/OSSpinLockDeprecated.h",
        "libkern/OSAtomicQueue.h",
    }
)


@dataclass(frozen=True)
class LayerSpec:
    """One deduplication pass: the targets compared together and the generic target they produce."""

    output: Target
    inputs: tuple[Target, ...]


def generic_target(os_ver: OsVer) -> Target:
    return Target(arch=Arch.ANY, os_ver=os_ver, abi=Abi.ANY)


def build_layer_specs(targets: tuple[Target, ...], os_versions: tuple[OsVer, ...]) -> list[LayerSpec]:
    """
    Build the ordered layer list.

    layer 1: x86_64-macos.10 x86_64-macos.11 x86_64-macos.12 aarch64-macos.11 aarch64-macos.12
    layer 2: any-macos.10 any-macos.11 any-macos.12
    layer 3: any-macos

    Each OS version whose targets number at least two gets its own layer
    producing ``any-macos.<ver>-any``. Versions with a single target skip
    straight to the final layer, which folds everything into ``any-macos-any``.
    """
    specs = []
    top_inputs: list[Target] = []

    for os_ver in os_versions:
        members = tuple(t for t in targets if t.os_ver is os_ver)
        if len(members) < 2:
            top_inputs.extend(members)
            continue
        spec = LayerSpec(output=generic_target(os_ver), inputs=members)
        specs.append(spec)
        top_inputs.append(spec.output)

    specs.append(LayerSpec(output=generic_target(OsVer.ANY), inputs=tuple(top_inputs)))
    return specs


LAYER_SPECS: tuple[LayerSpec, ...] = tuple(build_layer_specs(SUPPORTED_TARGETS, LAYERED_OS_VERSIONS))
