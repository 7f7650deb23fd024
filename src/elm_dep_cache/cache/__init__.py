"""Cache key derivation and slot storage for elm-dep-cache."""

from .key import KEY_LENGTH, compute_checksum, derive_key, is_valid_key
from .store import CacheStore
from .tree import CopyStats, copy_tree, remove_tree

__all__ = [
    "CacheStore",
    "CopyStats",
    "KEY_LENGTH",
    "compute_checksum",
    "copy_tree",
    "derive_key",
    "is_valid_key",
    "remove_tree",
]
