"""
Command line for fetching and deduplicating macOS libc headers.

Usage:
    python -m sysroot_headers fetch [cflags]
    python -m sysroot_headers generate <destination>
    python -m sysroot_headers archive <destination>
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .archive_headers import DEFAULT_ARCHIVE_NAME, DEFAULT_ZSTD_LEVEL, archive_headers
from .errors import HeadersError
from .fetch_headers import DEFAULT_SOURCE, fetch_headers
from .generate_dedup_dirs import HEADERS_SOURCE_PREFIX, generate_dedup_dirs
from .targets import Target

HINT = """Try:
1. Add missing libc headers to sysroot_headers/data/headers.c
2. Fetch them:
   python -m sysroot_headers fetch
3. Generate deduplicated headers dirs in <destination> path:
   python -m sysroot_headers generate <destination>

See -h/--help for more info.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysroot-headers",
        description="Fetch libc headers per target and deduplicate them into layered directories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sysroot_headers fetch
  python -m sysroot_headers fetch -isysroot /path/to/MacOSX11.sdk -mmacosx-version-min=11.0
  python -m sysroot_headers generate out/libc/include
  python -m sysroot_headers archive out/libc/include --output-dir dist
        """,
    )
    subparsers = parser.add_subparsers(dest="command")

    fetch = subparsers.add_parser(
        "fetch",
        help="Fetch libc headers into headers/<arch>-macos.<os_ver>-none",
        description="Fetch libc headers into headers/<arch>-macos.<os_ver>-none. "
        "Unrecognized arguments are passed to the compiler.",
        allow_abbrev=False,
    )
    fetch.add_argument(
        "--headers-dir",
        type=Path,
        default=HEADERS_SOURCE_PREFIX,
        help=f"Directory holding per-target header trees (default: {HEADERS_SOURCE_PREFIX})",
    )
    fetch.add_argument("--target", type=Target.parse, help="Target full name (default: detect from host)")
    fetch.add_argument("--source", type=Path, default=DEFAULT_SOURCE, help="C file including every wanted header")
    fetch.add_argument("--cc", default="cc", help="C compiler driver (default: cc)")

    generate = subparsers.add_parser(
        "generate",
        help="Generate deduplicated dirs such as aarch64-macos.11-none, x86_64-macos.11-none, any-macos.11-any",
    )
    generate.add_argument("destination", type=Path, help="Output directory")
    generate.add_argument(
        "--headers-dir",
        type=Path,
        default=HEADERS_SOURCE_PREFIX,
        help=f"Directory holding per-target header trees (default: {HEADERS_SOURCE_PREFIX})",
    )
    generate.add_argument("--verbose", action="store_true", help="Print every duplicate found")

    archive = subparsers.add_parser("archive", help="Package a generated header tree as tar.zst")
    archive.add_argument("destination", type=Path, help="Directory produced by 'generate'")
    archive.add_argument("--output-dir", type=Path, default=Path("dist"), help="Archive directory (default: dist)")
    archive.add_argument(
        "--name", default=DEFAULT_ARCHIVE_NAME, help=f"Archive base name (default: {DEFAULT_ARCHIVE_NAME})"
    )
    archive.add_argument(
        "--zstd-level",
        type=int,
        default=DEFAULT_ZSTD_LEVEL,
        help=f"Zstd compression level (default: {DEFAULT_ZSTD_LEVEL})",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)

    if args.command is None:
        print("fatal: no command or option specified\n", file=sys.stderr)
        print(HINT)
        return 1
    if extra and args.command != "fetch":
        parser.error(f"unrecognized arguments: {' '.join(extra)}")

    try:
        if args.command == "fetch":
            fetch_headers(extra, headers_dir=args.headers_dir, target=args.target, source=args.source, compiler=args.cc)
        elif args.command == "generate":
            generate_dedup_dirs(args.destination, headers_dir=args.headers_dir, verbose=args.verbose)
        elif args.command == "archive":
            archive_headers(args.destination, args.output_dir, name=args.name, level=args.zstd_level)
    except KeyboardInterrupt:
        print("\n\nOPERATION CANCELLED BY USER", file=sys.stderr)
        return 130
    except (NotADirectoryError, HeadersError) as e:
        print(f"fatal: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        return 1

    print("\n✅ Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
