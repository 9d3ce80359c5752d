"""Cache stores implementing the fetch-or-compute contract."""

from __future__ import annotations

import abc
import logging
import pickle
import threading
import time
from typing import Any, Callable

import cloudpickle
from typing_extensions import override

from serialite.cache.core import CACHE_MISS
from serialite.cache.core import CacheMiss

logger = logging.getLogger(__name__)


class CacheStore(abc.ABC):
    """
    Base class for cache backends.

    Subclasses implement `get` and `put`; `fetch` combines them into the fetch-or-compute contract
    used by resources. Concurrent fetches for the same key follow the backend's own semantics,
    serialite adds no locking of its own.
    """

    @abc.abstractmethod
    def get(self, key: str) -> Any | CacheMiss:
        """
        Retrieve a cached value.

        Args:
            key: Cache key.

        Returns:
            Cached value if found and not expired, ``CACHE_MISS`` otherwise.
        """
        ...

    @abc.abstractmethod
    def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key.
            value: The value to cache.
            ttl: Time-to-live in seconds. None means no expiration.
        """
        ...

    def invalidate(self, key: str) -> None:
        """Remove a cached entry. Safe to call on non-existent entries."""

    def clear(self) -> None:
        """Remove all cached entries."""

    def fetch(self, key: str | None, compute: Callable[[], Any]) -> Any:
        """
        Return the value stored under `key`, computing and storing it on a miss.

        A None key always computes and never stores. Exceptions raised by `compute` propagate
        and nothing is stored.

        Args:
            key: Cache key, or None to bypass the cache.
            compute: Zero-argument callable producing the value.

        Returns:
            The cached or freshly computed value.
        """
        if key is None:
            return compute()

        cached = self.get(key)
        if cached is not CACHE_MISS:
            logger.debug(f"Cache hit for key {key[:12]}")
            return cached

        logger.debug(f"Cache miss for key {key[:12]}")
        value = compute()
        self.put(key, value)
        return value


class NullCacheStore(CacheStore):
    """
    Cache store that never stores anything.

    Examples:
        >>> store = NullCacheStore()
        >>> store.fetch("abc", lambda: 42)
        42
        >>> store.get("abc")
        CACHE_MISS
    """

    @override
    def get(self, key: str) -> Any | CacheMiss:
        return CACHE_MISS

    @override
    def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        pass

    @override
    def fetch(self, key: str | None, compute: Callable[[], Any]) -> Any:
        return compute()


class MemoryCacheStore(CacheStore):
    """
    In-process cache store with optional TTL expiration.

    Values are stored as cloudpickle bytes, so every hit returns an independent copy and callers
    can not mutate cached hashes in place.

    Examples:
        >>> store = MemoryCacheStore()
        >>> store.put("abc123", {"id": 1}, ttl=3600)
        >>> store.get("abc123")
        {'id': 1}
        >>> store.invalidate("abc123")
        >>> store.get("abc123")
        CACHE_MISS
    """

    def __init__(self, default_ttl: float | None = None) -> None:
        """
        Initialize an empty store.

        Args:
            default_ttl: TTL in seconds applied by `fetch` and by `put` calls without an explicit
                TTL. None means entries never expire.
        """
        self.default_ttl = default_ttl
        self._entries: dict[str, tuple[bytes, float, float | None]] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not CACHE_MISS

    @override
    def get(self, key: str) -> Any | CacheMiss:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return CACHE_MISS

            data, timestamp, ttl = entry
            if ttl is not None and time.time() - timestamp > ttl:
                # Expired, clean up and return miss
                del self._entries[key]
                return CACHE_MISS

        try:
            return cloudpickle.loads(data)
        except pickle.UnpicklingError:
            return CACHE_MISS

    @override
    def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        data = cloudpickle.dumps(value)
        effective_ttl = ttl if ttl is not None else self.default_ttl
        with self._lock:
            self._entries[key] = (data, time.time(), effective_ttl)

    @override
    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    @override
    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __getstate__(self) -> dict[str, Any]:
        """Serialize for pickling, without the lock."""
        with self._lock:
            return {"default_ttl": self.default_ttl, "entries": dict(self._entries)}

    def __setstate__(self, state: dict[str, Any]) -> None:
        """Reconstruct from pickled state."""
        self.default_ttl = state["default_ttl"]
        self._entries = state["entries"]
        self._lock = threading.RLock()
