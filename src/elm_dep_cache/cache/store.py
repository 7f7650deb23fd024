"""On-disk cache slots keyed by manifest checksum."""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from ..errors import PopulateFailedError, PruneEntryFailedError, RestoreFailedError
from ..models.results import PruneResult, TransferResult
from .tree import CopyStats, copy_tree, remove_tree

if TYPE_CHECKING:
    from ..models.config import ElmDepCacheConfig

logger = logging.getLogger(__name__)


class CacheStore:
    """Manage a cache root holding one slot directory per cache key.

    Layout:
        <cache_root>/<key>/...   verbatim copy of the dependency home

    Slots are only ever deleted by prune(). restore() and populate() are
    overwrite-merge copies: files missing from the source are never removed
    from the destination.
    """

    def __init__(self, cache_root: Union[str, Path]):
        """Initialize cache store.

        Args:
            cache_root: Directory holding the slots (created lazily)
        """
        self.cache_root = Path(cache_root)

    @classmethod
    def from_config(cls, config: "ElmDepCacheConfig") -> "CacheStore":
        """Create a store rooted at the configured cache directory."""
        return cls(config.cache_root)

    def slot_path(self, key: str) -> Path:
        """Get the directory for a cache key."""
        return self.cache_root / key

    def exists(self, key: str) -> bool:
        """Check if a slot exists for a key.

        Args:
            key: Cache key

        Returns:
            True if <cache_root>/<key> is a directory
        """
        return self.slot_path(key).is_dir()

    def list_slots(self) -> list[str]:
        """Get the names of all slots under the cache root.

        Returns:
            Sorted slot names (empty if the root does not exist)
        """
        if not self.cache_root.is_dir():
            return []
        return sorted(p.name for p in self.cache_root.iterdir() if p.is_dir() and not p.is_symlink())

    @staticmethod
    def _transfer(src: Path, dest: Path) -> tuple[TransferResult, Optional[OSError]]:
        """Copy src into dest, keeping partial counts if the copy fails."""
        stats = CopyStats()
        failure: Optional[OSError] = None
        try:
            dest.mkdir(parents=True, exist_ok=True)
            copy_tree(src, dest, stats)
        except OSError as e:
            failure = e

        result = TransferResult(
            source=src,
            destination=dest,
            files_copied=stats.files_copied,
            directories_created=stats.directories_created,
            skipped=stats.skipped,
        )
        return result, failure

    def restore(self, key: str, dest_dir: Union[str, Path]) -> TransferResult:
        """Copy a slot into the dependency home.

        Args:
            key: Cache key of the slot to restore
            dest_dir: Dependency home (created if missing)

        Returns:
            Transfer result; on failure `error` holds a RestoreFailedError
        """
        slot = self.slot_path(key)
        logger.info(f"Restoring dependencies from cache: {slot}")

        result, failure = self._transfer(slot, Path(dest_dir))
        if failure is not None:
            result.error = RestoreFailedError(f"Failed to restore from cache: {failure}")
            result.error.__cause__ = failure
            logger.error(str(result.error))
            return result

        logger.info(f"Restored {result.files_copied} files from cache")
        return result

    def populate(self, key: str, src_dir: Union[str, Path]) -> TransferResult:
        """Copy the dependency home into a slot.

        A failed populate leaves whatever was already written in place; a
        later populate overwrites it or prune removes it.

        Args:
            key: Cache key of the slot to fill
            src_dir: Dependency home to read from

        Returns:
            Transfer result; on failure `error` holds a PopulateFailedError
        """
        src = Path(src_dir)
        slot = self.slot_path(key)
        logger.info(f"Caching dependencies to: {slot}")

        if not src.is_dir():
            result = TransferResult(source=src, destination=slot)
            result.error = PopulateFailedError(f"Dependency home does not exist: {src}")
            logger.error(str(result.error))
            return result

        result, failure = self._transfer(src, slot)
        if failure is not None:
            result.error = PopulateFailedError(f"Failed to cache dependencies: {failure}")
            result.error.__cause__ = failure
            logger.error(str(result.error))
            return result

        logger.info(f"Cached {result.files_copied} files")
        return result

    def prune(self, keep_key: str) -> PruneResult:
        """Delete every slot except the one named keep_key.

        Removal failures are collected per slot and the scan continues.

        Args:
            keep_key: Key of the slot to keep

        Returns:
            Prune result with removed/kept counts and any failures
        """
        result = PruneResult()

        if not self.cache_root.is_dir():
            logger.info("No cache directory found, nothing to clean")
            return result

        try:
            with os.scandir(self.cache_root) as entries:
                slots = sorted(entry.name for entry in entries if entry.is_dir(follow_symlinks=False))
        except OSError as e:
            failure = PruneEntryFailedError(self.cache_root.name, e.strerror or str(e))
            failure.__cause__ = e
            logger.error(f"Failed to clean caches: {failure}")
            result.failures.append(failure)
            return result

        for name in slots:
            if name == keep_key:
                logger.info(f"  Keeping current cache: {name}")
                result.kept += 1
                continue

            logger.info(f"  Removing old cache: {name}")
            try:
                remove_tree(self.cache_root / name)
            except OSError as e:
                failure = PruneEntryFailedError(name, e.strerror or str(e))
                failure.__cause__ = e
                logger.error(str(failure))
                result.failures.append(failure)
                continue

            result.removed += 1
            result.removed_keys.append(name)

        return result
