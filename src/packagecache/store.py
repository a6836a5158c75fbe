"""Namespaced TTL cache stores for datasource results."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from constants import Constants

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with TTL."""

    value: T
    expires_at: float
    created_at: float = field(default_factory=time.time)

    def is_expired(self) -> bool:
        """Check if this entry has expired."""
        return time.time() > self.expires_at


class CacheStore(ABC):
    """Key/value store with per-entry TTL, partitioned by namespace.

    Implementations must be safe to call from several threads. Expired
    entries are reported as absent.
    """

    @abstractmethod
    def get(self, namespace: str, key: str) -> Optional[Any]:
        """Return the cached value, or None if not found/expired."""

    @abstractmethod
    def set(self, namespace: str, key: str, value: Any, ttl_minutes: float) -> None:
        """Store a value, replacing any previous entry for the key."""

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None:
        """Drop one entry if present."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry in every namespace."""


class MemoryCacheStore(CacheStore):
    """In-process TTL cache.

    Expiry is checked on read; a periodic sweep and an entry bound keep the
    dict from growing without limit in long-running processes.
    """

    def __init__(
        self,
        max_entries: int = Constants.CACHE_MAX_ENTRIES,
        cleanup_interval: float = Constants.CACHE_CLEANUP_INTERVAL_SEC,
    ):
        """Initialize the memory cache.

        Args:
            max_entries: Upper bound on stored entries before eviction.
            cleanup_interval: Seconds between sweeps of expired entries.
        """
        self._cache: Dict[Tuple[str, str], CacheEntry[Any]] = {}
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = time.time()

    def get(self, namespace: str, key: str) -> Optional[Any]:
        with self._lock:
            self._maybe_cleanup()
            entry = self._cache.get((namespace, key))
            if entry is None:
                return None
            if entry.is_expired():
                del self._cache[(namespace, key)]
                return None
            return entry.value

    def set(self, namespace: str, key: str, value: Any, ttl_minutes: float) -> None:
        expires_at = time.time() + ttl_minutes * 60
        with self._lock:
            self._maybe_cleanup()
            self._cache[(namespace, key)] = CacheEntry(value=value, expires_at=expires_at)
            # Evict oldest entries if over limit
            if len(self._cache) > self._max_entries:
                self._evict_oldest(max(1, self._max_entries // 10))

    def delete(self, namespace: str, key: str) -> None:
        with self._lock:
            self._cache.pop((namespace, key), None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            expired_count = sum(1 for e in self._cache.values() if e.is_expired())
            return {
                "total_entries": len(self._cache),
                "expired_entries": expired_count,
                "active_entries": len(self._cache) - expired_count,
                "namespaces": sorted({ns for ns, _ in self._cache}),
                "max_entries": self._max_entries,
            }

    def _maybe_cleanup(self) -> None:
        """Run cleanup if enough time has passed. Caller holds the lock."""
        now = time.time()
        if now - self._last_cleanup > self._cleanup_interval:
            expired = [k for k, v in self._cache.items() if v.is_expired()]
            for key in expired:
                del self._cache[key]
            self._last_cleanup = now

    def _evict_oldest(self, count: int) -> None:
        """Evict the oldest entries. Caller holds the lock."""
        sorted_keys = sorted(self._cache, key=lambda k: self._cache[k].created_at)
        for key in sorted_keys[:count]:
            del self._cache[key]
