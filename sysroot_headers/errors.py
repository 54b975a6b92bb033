"""Exceptions raised while fetching and deduplicating header trees."""


class HeadersError(RuntimeError):
    """Base class for fatal header preparation errors."""


class IntegrityError(HeadersError):
    """Output no longer matches its input (bad copy, broken layering)."""


class DuplicatePathError(IntegrityError):
    """A single target produced two different fingerprints for one path."""

    def __init__(self, rel_path: str, target_name: str):
        super().__init__(f"'{target_name}' recorded two different contents for '{rel_path}'")
        self.rel_path = rel_path
        self.target_name = target_name


class HeadersDirMissingError(HeadersError):
    """The headers source directory is missing or is not a directory."""


class UnsupportedHostError(HeadersError):
    """The running host does not map onto a supported target."""
