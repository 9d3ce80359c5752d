"""
Association nodes: nested single objects (`One`) and nested collections (`Many`).

An association reads its source property off the parent object and serializes the related
object(s) with a delegate resource. A None source short-circuits to None without instantiating
the delegate. Nested associations are never wrapped under a root key.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from typing_extensions import override

from serialite.attributes import read_attribute
from serialite.exceptions import CircularReferenceError

if TYPE_CHECKING:
    from serialite.resource import Resource


@dataclass(frozen=True)
class Association(abc.ABC):
    """Base class for association nodes."""

    name: str
    """Property read off the parent object."""

    resource: type[Resource]
    """Resource class instantiated once per related object."""

    condition: Callable[[Any], Any] | None = None
    """Optional gate (`One`) or collection transform (`Many`) applied before expansion."""

    def to_hash(
        self, target: Any, *, params: Mapping[str, Any], ancestors: frozenset[int] = frozenset()
    ) -> Any:
        """
        Serialize the association for the given parent object.

        Args:
            target: Parent object the source property is read from.
            params: Params of the parent resource, passed through to the delegate.
            ancestors: Identities of the objects currently being serialized above this node.

        Returns:
            A nested hash, a list of hashes, or None.
        """
        value = read_attribute(target, self.name)
        if value is None:
            return None
        return self.expand(value, params, ancestors)

    @abc.abstractmethod
    def expand(self, value: Any, params: Mapping[str, Any], ancestors: frozenset[int]) -> Any:
        """Serialize a non-None source value."""
        ...

    def _delegate(self, value: Any, params: Mapping[str, Any], ancestors: frozenset[int]) -> Any:
        if id(value) in ancestors:
            raise CircularReferenceError(
                f"Association '{self.name}' refers back to a {type(value).__name__} object that "
                f"is already being serialized"
            )
        return self.resource(value, params, _ancestors=ancestors).serializable_hash()


@dataclass(frozen=True)
class One(Association):
    """Single-valued association; the condition is a boolean gate on the related object."""

    @override
    def expand(self, value: Any, params: Mapping[str, Any], ancestors: frozenset[int]) -> Any:
        if self.condition is not None and not self.condition(value):
            return None
        return self._delegate(value, params, ancestors)


@dataclass(frozen=True)
class Many(Association):
    """
    Collection-valued association.

    The condition receives the whole collection and returns the collection to serialize.
    """

    @override
    def expand(self, value: Any, params: Mapping[str, Any], ancestors: frozenset[int]) -> Any:
        items: Iterable[Any] = value
        if self.condition is not None:
            items = self.condition(value)
            if items is None:
                return None
        return [self._delegate(item, params, ancestors) for item in items]


__all__ = ["Association", "Many", "One"]
