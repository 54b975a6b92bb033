"""
Entry point for running the package as a script.

Usage:
    python -m sysroot_headers generate <destination>
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
