"""Shared utility helpers for serialite."""

from __future__ import annotations

import reprlib
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any


def build_repr(class_name: str, *leading: str, kwargs: Mapping[str, Any] | None = None) -> str:
    """Build a concise repr string: ``ClassName(leading…, k=v, …)``."""
    parts = list(leading)
    if kwargs:
        parts.extend(f"{k}={reprlib.Repr().repr(v)}" for k, v in kwargs.items())
    return f"{class_name}({', '.join(parts)})"


def is_collection(obj: Any) -> bool:
    """
    Whether an object is serialized element-wise.

    Strings, bytes and mappings are iterable but describe a single object.

    Examples:
        >>> is_collection([1, 2])
        True
        >>> is_collection({"id": 1})
        False
        >>> is_collection("abc")
        False
    """
    return isinstance(obj, Iterable) and not isinstance(obj, (str, bytes, bytearray, Mapping))
