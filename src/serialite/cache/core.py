"""Cache key derivation using cloudpickle for parameter hashing."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import cloudpickle


class CacheMiss:
    """Sentinel type returned by cache stores when a key is absent or expired."""

    _instance: CacheMiss | None = None

    def __new__(cls) -> CacheMiss:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CACHE_MISS"

    def __bool__(self) -> bool:
        return False


CACHE_MISS = CacheMiss()


@runtime_checkable
class Versioned(Protocol):
    """Objects exposing a versioned identity usable as a cache key."""

    def cache_key_with_version(self) -> str: ...


def default_cache_hash(resource_name: str, version_key: str, params: Mapping[str, Any]) -> str:
    """
    Generate a cache key from the resource name, the object's versioned identity and params.

    Uses cloudpickle to serialize parameter values for hashing, which handles lambdas, closures,
    and most Python types automatically.

    Args:
        resource_name: Fully qualified name of the resource class.
        version_key: Versioned identity of the object being serialized.
        params: Params the resource was bound with.

    Returns:
        SHA256 hex digest string.

    Examples:
        >>> key1 = default_cache_hash("app.UserResource", "users/1-20240101", {"a": 1})
        >>> key2 = default_cache_hash("app.UserResource", "users/1-20240101", {"a": 1})
        >>> key1 == key2
        True
        >>> key3 = default_cache_hash("app.UserResource", "users/1-20240102", {"a": 1})
        >>> key1 == key3
        False
    """
    h = hashlib.sha256()
    h.update(resource_name.encode())
    h.update(b"\x00")
    h.update(version_key.encode())

    # Hash each param via cloudpickle, normalizing order-sensitive containers first
    for name, value in sorted(params.items()):
        h.update(name.encode())
        h.update(cloudpickle.dumps(_canonical(value)))

    return h.hexdigest()


def _canonical(value: Any) -> Any:
    """
    Recursively normalize order-sensitive containers for stable hashing.

    Equal dicts and sets built in different orders must produce the same bytes, so they are
    converted to sorted structures before pickling.
    """
    if isinstance(value, Mapping):
        return sorted(((_canonical(k), _canonical(v)) for k, v in value.items()), key=repr)
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(v) for v in value), key=repr)
    if isinstance(value, list):
        return [_canonical(v) for v in value]
    if isinstance(value, tuple):
        return tuple(_canonical(v) for v in value)
    return value


__all__ = ["CACHE_MISS", "CacheMiss", "Versioned", "default_cache_hash"]
