"""
Attribute slots: the declared output fields of a resource schema.

A slot is one of `Accessor`, `Computed`, or an association node (`One` / `Many`, see
`serialite.associations`). Slots are immutable once declared; re-declaring a key replaces the
slot stored under it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from serialite.exceptions import UnresolvedAccessorError

if TYPE_CHECKING:
    from serialite.resource import Resource


@dataclass(frozen=True)
class Accessor:
    """Reads a named property off the target object."""

    name: str
    """Attribute (or mapping key) to read."""


@dataclass(frozen=True)
class Computed:
    """Calls a user-supplied function with the bound resource and the target object."""

    func: Callable[[Resource, Any], Any]
    """Function called as ``func(resource, obj)``; its return value is used verbatim."""


def read_attribute(obj: Any, name: str) -> Any:
    """
    Read a named property off an object.

    Mappings are read by key, everything else by attribute access.

    Args:
        obj: Object to read from.
        name: Property name.

    Returns:
        The property value.

    Raises:
        UnresolvedAccessorError: If the object has no such property.
    """
    if isinstance(obj, Mapping):
        try:
            return obj[name]
        except KeyError:
            raise UnresolvedAccessorError(
                f"Key '{name}' is missing from {type(obj).__name__} object"
            ) from None

    try:
        return getattr(obj, name)
    except AttributeError as exc:
        # Only a missing attribute on `obj` itself is an accessor error, not one raised
        # inside a property getter.
        if getattr(exc, "obj", obj) is not obj or getattr(exc, "name", name) != name:
            raise
        raise UnresolvedAccessorError(
            f"Attribute '{name}' is missing from {type(obj).__name__} object"
        ) from None


__all__ = ["Accessor", "Computed", "read_attribute"]
