"""Restore-or-install control flow around the cache store."""

import logging
from pathlib import Path
from typing import Optional

from ..cache import CacheStore, derive_key
from ..elm import ElmInstaller
from ..models.config import ElmDepCacheConfig
from ..models.results import PruneResult, RunOutcome

logger = logging.getLogger(__name__)


def _entries(count: int) -> str:
    return "entry" if count == 1 else "entries"


class CacheRunner:
    """
    Drive one elm-dep-cache invocation.

    The key is derived once from the manifest and reused for the whole run.
    On a cache hit the slot is restored into ELM_HOME; on a miss (or when the
    restore fails) dependencies are installed and then cached.

    Example:
        runner = CacheRunner(ElmDepCacheConfig())
        outcome = runner.run()
    """

    def __init__(
        self,
        config: ElmDepCacheConfig,
        store: Optional[CacheStore] = None,
        installer: Optional[ElmInstaller] = None,
    ):
        self.config = config
        self.store = store or CacheStore.from_config(config)
        self.elm_home: Path = config.resolved_elm_home()
        self.installer = installer or ElmInstaller(
            project_dir=config.project_dir,
            elm_binary=config.elm.binary,
            elm_home=config.elm.home,
            timeout=config.elm.timeout,
        )
        self._key: Optional[str] = None

    @property
    def key(self) -> str:
        """Cache key for the manifest (raises ManifestUnreadableError)."""
        if self._key is None:
            self._key = derive_key(self.config.manifest)
            logger.info(f"{self.config.manifest.name} checksum: {self._key}")
        return self._key

    def run(self) -> RunOutcome:
        """Restore dependencies from cache, or install and cache them.

        Returns:
            How the run finished

        Raises:
            ManifestUnreadableError: If the manifest cannot be read
            FetchFailedError: If installing dependencies fails
        """
        key = self.key
        logger.info(f"ELM_HOME: {self.elm_home}")
        logger.info(f"Cache directory: {self.store.slot_path(key)}")

        if self.store.exists(key):
            logger.info("Cache found!")
            if self.config.dry_run:
                logger.info(f"[dry-run] Would restore {self.store.slot_path(key)} into {self.elm_home}")
                return RunOutcome.DRY_RUN
            if self.store.restore(key, self.elm_home):
                logger.info("Done! Dependencies restored from cache.")
                return RunOutcome.RESTORED
            logger.warning("Cache restoration failed, falling back to fresh install...")
        else:
            logger.info("No cache found, will install and cache dependencies")

        if self.config.dry_run:
            logger.info(f"[dry-run] Would install dependencies and cache {self.elm_home}")
            return RunOutcome.DRY_RUN

        self.installer.install()

        if self.store.populate(key, self.elm_home):
            logger.info("Done! Dependencies installed and cached.")
            return RunOutcome.INSTALLED_AND_CACHED

        logger.warning("Dependencies installed but caching failed")
        return RunOutcome.INSTALLED_NOT_CACHED

    def clean(self) -> PruneResult:
        """Remove every cache slot except the one for the current manifest.

        Raises:
            ManifestUnreadableError: If the manifest cannot be read
        """
        key = self.key
        logger.info("Cleaning old cache entries...")

        if self.config.dry_run:
            stale = [name for name in self.store.list_slots() if name != key]
            for name in stale:
                logger.info(f"  [dry-run] Would remove old cache: {name}")
            return PruneResult(kept=int(self.store.exists(key)))

        result = self.store.prune(key)
        logger.debug(f"Prune result: {result.to_dict()}")

        logger.info(f"Cleaned {result.removed} old cache {_entries(result.removed)}")
        if result.kept > 0:
            logger.info(f"Kept {result.kept} current cache {_entries(result.kept)}")
        if result.failures:
            logger.warning(f"Failed to remove {len(result.failures)} cache {_entries(len(result.failures))}")
        return result
