"""Console helpers shared by the header tools."""


def print_section(title: str) -> None:
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def format_size(bytes_size: int) -> str:
    """Format bytes as a human-readable string using binary units."""
    size = float(bytes_size)
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{int(size)} B" if unit == "B" else f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} GiB"
