"""Result types returned by cache store and runner operations."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from ..errors import ElmDepCacheError, PruneEntryFailedError


class RunOutcome(str, Enum):
    """How a cache run finished."""

    RESTORED = "restored"
    INSTALLED_AND_CACHED = "installed_and_cached"
    INSTALLED_NOT_CACHED = "installed_not_cached"
    DRY_RUN = "dry_run"


@dataclass
class TransferResult:
    """
    Outcome of a restore (slot -> home) or populate (home -> slot).

    A failed transfer may still have copied some files: there is no
    rollback, so `files_copied` reflects what reached the destination.
    """

    source: Path
    destination: Path
    files_copied: int = 0
    directories_created: int = 0
    skipped: list[Path] = field(default_factory=list)
    error: Optional[ElmDepCacheError] = None

    @property
    def ok(self) -> bool:
        """True if the whole tree was copied."""
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok


@dataclass
class PruneResult:
    """Outcome of pruning stale slots from the cache root."""

    removed: int = 0
    kept: int = 0
    removed_keys: list[str] = field(default_factory=list)
    failures: list[PruneEntryFailedError] = field(default_factory=list)

    @property
    def counts(self) -> tuple[int, int]:
        """(removed, kept) pair."""
        return self.removed, self.kept

    @property
    def ok(self) -> bool:
        """True if every stale slot was removed."""
        return not self.failures

    def to_dict(self) -> dict:
        """Convert result to dictionary for serialization."""
        return {
            "removed": self.removed,
            "kept": self.kept,
            "removed_keys": list(self.removed_keys),
            "failures": [str(f) for f in self.failures],
        }
