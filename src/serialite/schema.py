"""
Resource schemas: the ordered, declarative description of one resource type.

A `ResourceSchema` is built through chained builder calls and owned by exactly one `Resource`
subclass. Subclasses start from a deep copy of their parent's schema, so the two can be changed
independently afterwards.

Examples:
    >>> schema = ResourceSchema()
    >>> schema.attributes("id", "title").transform_keys("camel")
    ResourceSchema(attributes=['id', 'title'], key_transform='camel')
    >>> schema.ignoring("title", "missing")
    ResourceSchema(attributes=['id'], key_transform='camel')
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING, Any, Callable, Union

from typing_extensions import Self

from serialite.associations import Association
from serialite.associations import Many
from serialite.associations import One
from serialite.attributes import Accessor
from serialite.attributes import Computed
from serialite.exceptions import MissingBlockError
from serialite.key_transform import KEY_TRANSFORMS
from serialite.key_transform import normalize_strategy
from serialite.key_transform import transform_key
from serialite.utils import build_repr

if TYPE_CHECKING:
    from serialite.resource import Resource
    from serialite.serializers import Serializer

logger = logging.getLogger(__name__)

Slot = Union[Accessor, Computed, Association]
CacheKeyFunc = Callable[[Any], Union[str, None]]


@dataclass(repr=False)
class ResourceSchema:
    """Ordered mapping of output keys to attribute slots, plus resource-wide options."""

    slots: dict[str, Slot] = field(default_factory=dict)
    """Output key -> slot. Insertion order is the output key order."""

    root_key: str | None = None
    """Key the serialized output is wrapped under, if any."""

    key_transform: str | None = None
    """Canonical key-transform strategy applied to every output key."""

    serializer_class: type[Serializer] | None = None
    """Formatting strategy used when `serialize()` is called without an override."""

    cache_key_func: CacheKeyFunc | None = None
    """Returns the versioned identity of an object, or None to skip caching for it."""

    def __repr__(self) -> str:
        options = {
            name: value
            for name, value in (
                ("root_key", self.root_key),
                ("key_transform", self.key_transform),
                ("serializer", getattr(self.serializer_class, "__name__", None)),
            )
            if value is not None
        }
        return build_repr(
            "ResourceSchema", f"attributes={list(self.slots)!r}", kwargs=options or None
        )

    @property
    def attribute_names(self) -> list[str]:
        """Declared output keys in order."""
        return list(self.slots)

    def derive(self) -> ResourceSchema:
        """
        Return an independent copy of this schema for a subtype.

        Slot containers are copied by value; delegate resource classes and user functions are
        shared.
        """
        return copy.deepcopy(self)

    # region Attributes

    def attributes(self, *names: str) -> Self:
        """
        Declare accessor attributes keyed by their own names.

        Re-declaring an existing key replaces its slot in place.
        """
        for name in names:
            self.slots[str(name)] = Accessor(str(name))
        return self

    def attribute(self, name: str | Callable[..., Any], func: Callable[..., Any] | None = None):
        """
        Declare a computed attribute.

        Can be called directly, ``schema.attribute("name", func)``, or used as a bare decorator
        on a function whose ``__name__`` becomes the key.

        Args:
            name: Output key, or the function itself when used as a decorator.
            func: Function called as ``func(resource, obj)`` during serialization.

        Returns:
            The schema, or the decorated function when used as a decorator.

        Raises:
            MissingBlockError: If no function is given.
        """
        if callable(name) and func is None:
            self.slots[name.__name__] = Computed(name)
            return name

        if func is None:
            raise MissingBlockError(f"No function given for computed attribute '{name}'")
        if not callable(func):
            raise MissingBlockError(
                f"Computed attribute '{name}' expects a callable, got {type(func).__name__}"
            )

        self.slots[str(name)] = Computed(func)
        return self

    def one(
        self,
        name: str,
        condition: Callable[[Any], Any] | None = None,
        *,
        resource: type[Resource] | None = None,
        key: str | None = None,
        define: Callable[[ResourceSchema], Any] | None = None,
    ) -> Self:
        """
        Declare a single-valued association.

        Args:
            name: Property read off the parent object.
            condition: Optional predicate; the association serializes to None when it returns a
                falsy value for the related object.
            resource: Resource class used for the related object.
            key: Output key, defaults to `name`.
            define: Builds an anonymous resource from a fresh schema, used when `resource` is
                not given.
        """
        self._add_association(One, name, condition, resource, key, define)
        return self

    def many(
        self,
        name: str,
        condition: Callable[[Any], Any] | None = None,
        *,
        resource: type[Resource] | None = None,
        key: str | None = None,
        define: Callable[[ResourceSchema], Any] | None = None,
    ) -> Self:
        """
        Declare a collection-valued association.

        Args:
            name: Property read off the parent object.
            condition: Optional transform called with the whole collection; its return value is
                the collection that gets serialized.
            resource: Resource class used for each element.
            key: Output key, defaults to `name`.
            define: Builds an anonymous resource from a fresh schema, used when `resource` is
                not given.
        """
        self._add_association(Many, name, condition, resource, key, define)
        return self

    has_one = one
    has_many = many

    def ignoring(self, *names: str) -> Self:
        """Remove attributes; names that are not declared are skipped."""
        for name in names:
            self.slots.pop(str(name), None)
        return self

    # region Options

    def key(self, root_key: str) -> Self:
        """Set the root key the serialized output is wrapped under."""
        self.root_key = str(root_key)
        return self

    def transform_keys(self, strategy: str | None) -> Self:
        """Set the key-transform strategy applied to every output key."""
        name = normalize_strategy(strategy)
        if strategy is not None and name is None and strategy != "none":
            logger.warning(
                f"Unknown key transform '{strategy}', keys will be left unchanged. "
                f"Supported transforms: {list(KEY_TRANSFORMS)}"
            )
        self.key_transform = name
        return self

    def serializer(self, serializer_class: Any) -> Self:
        """Set the formatting strategy; anything but a `Serializer` subclass clears it."""
        from serialite.serializers import Serializer

        if isinstance(serializer_class, type) and issubclass(serializer_class, Serializer):
            self.serializer_class = serializer_class
        else:
            self.serializer_class = None
        return self

    def cache_key(self, func: CacheKeyFunc | None) -> Self:
        """Set the function deriving an object's versioned identity for caching."""
        self.cache_key_func = func
        return self

    def transform(self, key: str) -> str:
        """Apply this schema's key transform to a single key."""
        return transform_key(key, self.key_transform)

    # region Helpers

    def _add_association(
        self,
        association_class: type[Association],
        name: str,
        condition: Callable[[Any], Any] | None,
        resource: type[Resource] | None,
        key: str | None,
        define: Callable[[ResourceSchema], Any] | None,
    ) -> None:
        if resource is not None and define is not None:
            raise ValueError(
                f"Association '{name}' accepts either `resource` or `define`, not both"
            )

        if resource is None:
            if define is None:
                raise ValueError(f"Association '{name}' needs a `resource` or a `define` function")
            resource = _build_inline_resource(name, define)

        self.slots[str(key or name)] = association_class(
            name=str(name), resource=resource, condition=condition
        )


def _build_inline_resource(name: str, define: Callable[[ResourceSchema], Any]) -> type[Resource]:
    """Create an anonymous resource class whose schema is built by `define`."""
    # Import here to avoid circular imports
    from serialite.resource import Resource

    class_name = transform_key(str(name), "camel") + "Resource"
    inline = type(class_name, (Resource,), {"__module__": __name__})
    define(inline.schema)
    return inline


__all__ = ["ResourceSchema", "Slot"]
