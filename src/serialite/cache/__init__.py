"""Cache stores and cache key derivation for serializable hashes."""

from serialite.cache.core import CACHE_MISS
from serialite.cache.core import CacheMiss
from serialite.cache.core import Versioned
from serialite.cache.core import default_cache_hash
from serialite.cache.store import CacheStore
from serialite.cache.store import MemoryCacheStore
from serialite.cache.store import NullCacheStore

__all__ = [
    "CACHE_MISS",
    "CacheMiss",
    "CacheStore",
    "MemoryCacheStore",
    "NullCacheStore",
    "Versioned",
    "default_cache_hash",
]
