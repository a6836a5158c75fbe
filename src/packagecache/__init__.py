"""Package cache: namespaced TTL stores used to memoize datasource lookups."""

from typing import Optional

from constants import CacheBackends, Constants

from .store import CacheEntry, CacheStore, MemoryCacheStore
from .file_store import FileCacheStore

__all__ = [
    "CacheEntry",
    "CacheStore",
    "MemoryCacheStore",
    "FileCacheStore",
    "create_cache_store",
]


def create_cache_store(backend: str = CacheBackends.MEMORY.value, cache_dir: Optional[str] = None) -> CacheStore:
    """Build a cache store for the named backend.

    Args:
        backend: "memory" or "file".
        cache_dir: Directory for the file backend; defaults to Constants.DEFAULT_CACHE_DIR.

    Raises:
        ValueError: for an unknown backend name.
    """
    if backend == CacheBackends.MEMORY.value:
        return MemoryCacheStore()
    if backend == CacheBackends.FILE.value:
        return FileCacheStore(cache_dir or Constants.DEFAULT_CACHE_DIR)
    raise ValueError(f"Unknown cache backend: {backend}")
