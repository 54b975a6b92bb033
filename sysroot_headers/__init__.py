"""
Tools for preparing deduplicated macOS libc headers.

This package provides tools for:
- Fetching the host's libc headers into a per-target directory
- Finding headers that are identical across targets
- Hoisting shared headers into layered generic directories
- Packaging the result as a tar.zst archive

Main modules:
- fetch_headers: Collect the headers the host compiler uses
- scan_duplicates: Fingerprint one target's header tree
- resolve_layer: Deduplicate one layer of targets
- generate_dedup_dirs: Run every layer bottom-up
- archive_headers: Create the distributable archive
"""

from .cli import main

__all__ = ["main"]
