"""Core control flow for elm-dep-cache."""

from .runner import CacheRunner

__all__ = ["CacheRunner"]
