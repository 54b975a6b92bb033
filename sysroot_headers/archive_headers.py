"""
Package the generated header directories as a tar.zst archive.

This script:
1. Creates a tar archive of every target directory under the destination
2. Compresses it with zstd (level 22 by default)
3. Writes a SHA256 checksum file next to the archive
"""

from __future__ import annotations

import hashlib
import tarfile
import time
from pathlib import Path

from .utils import format_size, print_section

# ============================================================================
# Configuration
# ============================================================================

DEFAULT_ZSTD_LEVEL = 22
DEFAULT_ARCHIVE_NAME = "macos-libc-headers"


def create_tar_archive(source_dir: Path | str, output_tar: Path | str) -> Path:
    """Create a tar archive of the target directories inside ``source_dir``."""
    print_section("CREATE TAR ARCHIVE")

    source_dir = Path(source_dir)
    output_tar = Path(output_tar)

    print(f"Source: {source_dir}")
    print(f"Output: {output_tar}")

    def tar_filter(tarinfo: tarfile.TarInfo) -> tarfile.TarInfo:
        """Headers are plain data; normalize permissions and ownership."""
        tarinfo.mode = 0o755 if tarinfo.isdir() else 0o644
        tarinfo.uid = tarinfo.gid = 0
        tarinfo.uname = tarinfo.gname = ""
        return tarinfo

    with tarfile.open(output_tar, "w") as tar:
        for entry in sorted(source_dir.iterdir()):
            if entry.is_dir():
                tar.add(entry, arcname=entry.name, filter=tar_filter)
            else:
                print(f"Warning: skipping non-directory entry: {entry.name}")

    print(f"Created: {output_tar} ({format_size(output_tar.stat().st_size)})")
    return output_tar


def compress_with_zstd(tar_file: Path | str, output_zst: Path | str, level: int = DEFAULT_ZSTD_LEVEL) -> Path:
    """Compress tar with zstd using streaming compression."""
    print_section(f"COMPRESS WITH ZSTD LEVEL {level}")

    try:
        import zstandard as zstd
    except ImportError as e:
        raise ImportError("zstandard module required!\n" "Install with: pip install zstandard") from e

    tar_file = Path(tar_file)
    output_zst = Path(output_zst)

    file_size = tar_file.stat().st_size
    print(f"Input:  {tar_file} ({format_size(file_size)})")
    print(f"Output: {output_zst}")

    start = time.time()
    cctx = zstd.ZstdCompressor(level=level, threads=-1)

    try:
        with open(tar_file, "rb") as ifh, open(output_zst, "wb") as ofh:
            with cctx.stream_writer(ofh, closefd=False) as compressor:
                for chunk in iter(lambda: ifh.read(1024 * 1024), b""):
                    compressor.write(chunk)
    except KeyboardInterrupt:
        print("\nCompression interrupted - cleaning up partial file...")
        output_zst.unlink(missing_ok=True)
        raise

    elapsed = time.time() - start
    compressed_size = output_zst.stat().st_size
    print(f"Compressed in {elapsed:.1f}s")
    print(f"  Original:   {format_size(file_size)}")
    print(f"  Compressed: {format_size(compressed_size)}")
    if compressed_size:
        print(f"  Ratio:      {file_size / compressed_size:.2f}:1")

    return output_zst


def get_file_hash(filepath: Path | str, algorithm: str = "sha256") -> str:
    """Calculate hash of a file."""
    h = hashlib.new(algorithm)
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def generate_checksum(archive_path: Path | str) -> str:
    """Write ``<archive>.sha256`` and return the digest."""
    archive_path = Path(archive_path)
    sha256 = get_file_hash(archive_path, "sha256")
    sha256_file = archive_path.parent / f"{archive_path.name}.sha256"
    with open(sha256_file, "w") as f:
        f.write(f"{sha256} *{archive_path.name}\n")
    print(f"SHA256: {sha256}")
    print(f"Saved to: {sha256_file.name}")
    return sha256


def archive_headers(
    dest: Path | str,
    output_dir: Path | str,
    name: str = DEFAULT_ARCHIVE_NAME,
    level: int = DEFAULT_ZSTD_LEVEL,
) -> Path:
    """
    Archive a generated header tree.

    Returns:
        Path of the ``.tar.zst`` archive
    """
    dest = Path(dest)
    if not dest.is_dir():
        raise NotADirectoryError(f"path '{dest}' not a directory")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    tar_file = output_dir / f"{name}.tar"
    zst_file = output_dir / f"{name}.tar.zst"
    try:
        create_tar_archive(dest, tar_file)
        compress_with_zstd(tar_file, zst_file, level=level)
    finally:
        tar_file.unlink(missing_ok=True)

    generate_checksum(zst_file)
    return zst_file
