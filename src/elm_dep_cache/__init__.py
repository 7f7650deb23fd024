"""
elm-dep-cache - Cache Elm dependencies between runs, keyed by elm.json.

Usage:
    from elm_dep_cache import CacheRunner, ElmDepCacheConfig

    runner = CacheRunner(ElmDepCacheConfig())
    outcome = runner.run()      # restore from cache, or install and cache
    result = runner.clean()     # drop slots for other elm.json versions
"""

__version__ = "1.0.0"

from .cache import CacheStore, compute_checksum, copy_tree, derive_key, remove_tree
from .core.runner import CacheRunner
from .elm import ElmInstaller, find_elm_home
from .errors import (
    ElmDepCacheError,
    FetchFailedError,
    ManifestUnreadableError,
    PopulateFailedError,
    PruneEntryFailedError,
    RestoreFailedError,
)
from .models.config import CacheConfig, ElmConfig, ElmDepCacheConfig
from .models.results import PruneResult, RunOutcome, TransferResult

__all__ = [
    "__version__",
    # Core
    "CacheRunner",
    "CacheStore",
    "derive_key",
    "compute_checksum",
    "copy_tree",
    "remove_tree",
    # Elm
    "ElmInstaller",
    "find_elm_home",
    # Config
    "ElmDepCacheConfig",
    "CacheConfig",
    "ElmConfig",
    # Results
    "PruneResult",
    "RunOutcome",
    "TransferResult",
    # Errors
    "ElmDepCacheError",
    "ManifestUnreadableError",
    "FetchFailedError",
    "RestoreFailedError",
    "PopulateFailedError",
    "PruneEntryFailedError",
]
