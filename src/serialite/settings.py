from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from dataclasses import field
from typing import Any, Callable

from serialite.cache.store import CacheStore
from serialite.cache.store import NullCacheStore

_GLOBAL_SERIALITE_SETTINGS: SerialiteSettings | None = None
_SETTINGS_LOCK = threading.RLock()


def default_encoder(data: Any) -> str:
    """Encode an object graph as compact JSON text."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class SerialiteSettings:
    """Configuration settings for serialite."""

    cache: CacheStore = field(default_factory=NullCacheStore)
    """
    Cache backend used by `Resource.serializable_hash`.

    Defaults to a `NullCacheStore`, which always recomputes and never stores.
    """

    encoder: Callable[[Any], str] = default_encoder
    """Callable encoding a serializable hash (or list of hashes) into JSON text."""

    detect_cycles: bool = True
    """
    Whether associations check for objects that are already being serialized.

    If False, cyclic object graphs recurse until the interpreter's recursion limit is hit.
    """


def get_global_settings() -> SerialiteSettings:
    """
    Get the global serialite settings instance (thread-safe).

    If no global settings have been set, returns a default instance.
    """
    with _SETTINGS_LOCK:
        global _GLOBAL_SERIALITE_SETTINGS
        if _GLOBAL_SERIALITE_SETTINGS is None:
            _GLOBAL_SERIALITE_SETTINGS = SerialiteSettings()
        return _GLOBAL_SERIALITE_SETTINGS


def set_global_settings(settings: SerialiteSettings | None) -> None:
    """
    Set the global serialite settings instance (thread-safe).

    Args:
        settings (SerialiteSettings | None): Settings to set as global. None restores defaults on
            the next call to `get_global_settings()`.
    """
    with _SETTINGS_LOCK:
        global _GLOBAL_SERIALITE_SETTINGS
        _GLOBAL_SERIALITE_SETTINGS = settings
