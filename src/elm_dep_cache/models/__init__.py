"""Configuration and result models for elm-dep-cache."""

from .config import CacheConfig, ElmConfig, ElmDepCacheConfig
from .results import PruneResult, RunOutcome, TransferResult

__all__ = [
    # Config models
    "ElmDepCacheConfig",
    "CacheConfig",
    "ElmConfig",
    # Results
    "PruneResult",
    "RunOutcome",
    "TransferResult",
]
