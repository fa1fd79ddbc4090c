"""Immutable fetch cache APIs."""

from .keys import ImmutableCacheKey, cache_key
from .store import FetchCache, FileCache

__all__ = ["FetchCache", "FileCache", "ImmutableCacheKey", "cache_key"]
