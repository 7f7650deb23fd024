"""Exception types raised and reported by elm-dep-cache."""

from pathlib import Path
from typing import Optional


class ElmDepCacheError(Exception):
    """Base class for all elm-dep-cache errors."""


class ManifestUnreadableError(ElmDepCacheError):
    """The manifest could not be opened or read. Fatal: no key, no work."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to read {self.path}: {reason}")


class FetchFailedError(ElmDepCacheError):
    """The external dependency fetch did not succeed. Fatal for the run."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)


class RestoreFailedError(ElmDepCacheError):
    """Copying a slot into the dependency home failed part way."""


class PopulateFailedError(ElmDepCacheError):
    """Copying the dependency home into a slot failed part way."""


class PruneEntryFailedError(ElmDepCacheError):
    """A single stale slot could not be removed."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to remove cache entry {key}: {reason}")
