"""
Resources bind a schema to an object and run the serialization pipeline.

Declare a resource by subclassing `Resource`. Class parameters set resource-wide options and the
optional `define` classmethod declares attributes on the subclass's own schema:

    >>> class ArticleResource(Resource, transform_keys="lower_camel"):
    ...     @classmethod
    ...     def define(cls, schema):
    ...         schema.attributes("title", "author_name")
    >>> class Article:
    ...     title = "Hello"
    ...     author_name = "Ana"
    >>> ArticleResource(Article()).serializable_hash()
    {'title': 'Hello', 'authorName': 'Ana'}
    >>> ArticleResource(Article()).serialize()
    '{"title":"Hello","authorName":"Ana"}'
"""

from __future__ import annotations

import logging
import reprlib
import time
from collections.abc import Iterable
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, ClassVar

from typing_extensions import Self

from serialite.associations import Association
from serialite.attributes import Accessor
from serialite.attributes import Computed
from serialite.attributes import read_attribute
from serialite.cache.core import Versioned
from serialite.cache.core import default_cache_hash
from serialite.cache.store import CacheStore
from serialite.cache.store import NullCacheStore
from serialite.exceptions import DuplicateKeyError
from serialite.exceptions import InvalidFormatterArgumentError
from serialite.exceptions import UnsupportedAttributeTypeError
from serialite.schema import ResourceSchema
from serialite.serializers import Serializer
from serialite.serializers import inline_serializer
from serialite.settings import get_global_settings
from serialite.utils import build_repr
from serialite.utils import is_collection

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Resource:
    """
    Base class for resources.

    Each subclass owns a `ResourceSchema` seeded from a deep copy of its parent's schema when the
    subclass is created.
    """

    schema: ClassVar[ResourceSchema] = ResourceSchema()

    def __init_subclass__(
        cls,
        *,
        key: str | None = None,
        transform_keys: str | None = _UNSET,
        serializer: type[Serializer] | None = _UNSET,
        cache_key: Any = _UNSET,
        **kwargs: Any,
    ) -> None:
        """
        Give the subclass its own schema and apply class-level declarations.

        Args:
            key: Root key the serialized output is wrapped under.
            transform_keys: Key-transform strategy applied to every output key.
            serializer: Formatting strategy used when `serialize()` gets no override.
            cache_key: Function deriving an object's versioned identity for caching.
            kwargs: Additional keyword arguments.

        Examples:
            >>> class UserResource(Resource, key="user", transform_keys="camel"):
            ...     @classmethod
            ...     def define(cls, schema):
            ...         schema.attributes("id", "first_name")
            >>> UserResource.schema
            ResourceSchema(attributes=['id', 'first_name'], root_key='user', key_transform='camel')
        """
        super().__init_subclass__(**kwargs)

        parent_schema = next(
            base.__dict__["schema"] for base in cls.__mro__[1:] if "schema" in base.__dict__
        )
        schema = parent_schema.derive()
        logger.debug(f"Derived schema for {cls.__qualname__} with {len(schema.slots)} attributes")

        if key is not None:
            schema.key(key)
        if transform_keys is not _UNSET:
            schema.transform_keys(transform_keys)
        if serializer is not _UNSET:
            schema.serializer(serializer)
        if cache_key is not _UNSET:
            schema.cache_key(cache_key)

        cls.schema = schema
        if "define" in cls.__dict__:
            cls.define(schema)

    @classmethod
    def define(cls, schema: ResourceSchema) -> None:
        """Declare the attributes of this resource. Override in subclasses."""

    # region Declaration

    @classmethod
    def attributes(cls, *names: str) -> type[Self]:
        """Declare accessor attributes on this resource's schema."""
        cls.schema.attributes(*names)
        return cls

    @classmethod
    def attribute(cls, name: str | Callable[..., Any], func: Callable[..., Any] | None = None):
        """
        Declare a computed attribute on this resource's schema.

        Also usable as a bare decorator, in which case the decorated function is returned.
        """
        result = cls.schema.attribute(name, func)
        return cls if result is cls.schema else result

    @classmethod
    def one(cls, name: str, condition: Callable[[Any], Any] | None = None, **options: Any):
        """Declare a single-valued association (see `ResourceSchema.one`)."""
        cls.schema.one(name, condition, **options)
        return cls

    @classmethod
    def many(cls, name: str, condition: Callable[[Any], Any] | None = None, **options: Any):
        """Declare a collection-valued association (see `ResourceSchema.many`)."""
        cls.schema.many(name, condition, **options)
        return cls

    has_one = one
    has_many = many

    @classmethod
    def ignoring(cls, *names: str) -> type[Self]:
        """Remove attributes from this resource's schema."""
        cls.schema.ignoring(*names)
        return cls

    @classmethod
    def transform_keys(cls, strategy: str | None) -> type[Self]:
        """Set the key-transform strategy of this resource's schema."""
        cls.schema.transform_keys(strategy)
        return cls

    @classmethod
    def serializer(cls, serializer_class: Any) -> type[Self]:
        """Set the formatting strategy of this resource's schema."""
        cls.schema.serializer(serializer_class)
        return cls

    # region Instance

    def __init__(
        self,
        object: Any,
        params: Mapping[str, Any] | None = None,
        *,
        _ancestors: frozenset[int] = frozenset(),
    ) -> None:
        """
        Bind the resource to an object (or a collection of objects).

        Args:
            object: The object to be serialized.
            params: Arbitrary read-only data available to computed attributes and passed on to
                associated resources.
        """
        self.object = object
        self.params: Mapping[str, Any] = MappingProxyType(dict(params or {}))
        self._ancestors = _ancestors

    def __repr__(self) -> str:
        return build_repr(type(self).__name__, reprlib.repr(self.object))

    @property
    def key(self) -> str:
        """Declared root key, or one derived from the class name (see `derive_key`)."""
        if self.schema.root_key is not None:
            return self.schema.root_key
        return derive_key(type(self))

    @property
    def is_collection(self) -> bool:
        """Whether the bound object is serialized element-wise."""
        return is_collection(self.object)

    # region Serialization

    def serialize(self, serializer: Any = None, *, plugins: Iterable[Any] = ()) -> str:
        """
        Serialize the bound object to JSON text.

        Args:
            serializer: A `Serializer` subclass, or a callable that configures a fresh
                `Serializer` subclass. Defaults to the schema's serializer, then `Serializer`.
            plugins: Hook implementations used for this call in addition to the registered ones.

        Returns:
            The encoded text.

        Raises:
            InvalidFormatterArgumentError: If `serializer` is neither a Serializer class nor a
                callable.
        """
        # Import here to avoid circular imports
        from serialite.plugins.manager import get_hook_manager

        serializer_class = self._resolve_serializer(serializer)
        hook = get_hook_manager(list(plugins)).hook

        hook.before_serialize(resource=self)
        start = time.perf_counter()
        try:
            text = serializer_class(self).serialize()
        except Exception as exc:
            hook.on_serialize_error(
                resource=self, error=exc, duration=time.perf_counter() - start
            )
            raise

        hook.after_serialize(resource=self, result=text, duration=time.perf_counter() - start)
        return text

    def serializable_hash(self) -> Any:
        """
        Build the serializable hash for the bound object.

        Returns a dict for a single object and a list of dicts for a collection. Results are
        cached when a cache store is configured and the object has a versioned identity.
        """
        cache = get_global_settings().cache
        cache_key = self.cache_key(cache)
        return cache.fetch(cache_key, self._build)

    to_hash = serializable_hash

    def cache_key(self, cache: CacheStore | None = None) -> str | None:
        """
        Derive the cache key for the bound object.

        Returns None (bypass caching) when the cache is a `NullCacheStore` or the object has no
        versioned identity.
        """
        if cache is None:
            cache = get_global_settings().cache
        if isinstance(cache, NullCacheStore):
            return None

        if self.schema.cache_key_func is not None:
            version_key = self.schema.cache_key_func(self.object)
        elif isinstance(self.object, Versioned):
            version_key = self.object.cache_key_with_version()
        else:
            version_key = None

        if version_key is None:
            return None

        resource_name = f"{type(self).__module__}.{type(self).__qualname__}"
        return default_cache_hash(resource_name, str(version_key), self.params)

    def transform_key(self, key: str) -> str:
        """Transform an output key. Override this method to supply a custom key transform."""
        return self.schema.transform(key)

    # region Helpers

    def _build(self) -> Any:
        if self.is_collection:
            return [self._convert(item) for item in self.object]
        return self._convert(self.object)

    def _convert(self, target: Any) -> dict[str, Any]:
        ancestors = self._ancestors
        if get_global_settings().detect_cycles:
            ancestors = ancestors | {id(target)}

        result: dict[str, Any] = {}
        for key, slot in self.schema.slots.items():
            output_key = self.transform_key(key)
            if output_key in result:
                raise DuplicateKeyError(
                    f"Attributes of {type(self).__qualname__} collide on output key "
                    f"'{output_key}' after key transformation"
                )
            result[output_key] = self._fetch_attribute(target, key, slot, ancestors)
        return result

    def _fetch_attribute(self, target: Any, key: str, slot: Any, ancestors: frozenset[int]) -> Any:
        if isinstance(slot, Accessor):
            return read_attribute(target, slot.name)
        if isinstance(slot, Computed):
            return slot.func(self, target)
        if isinstance(slot, Association):
            return slot.to_hash(target, params=self.params, ancestors=ancestors)
        raise UnsupportedAttributeTypeError(
            f"Unsupported type of attribute '{key}': {type(slot).__name__}"
        )

    def _resolve_serializer(self, serializer: Any) -> type[Serializer]:
        if serializer is None:
            return self.schema.serializer_class or Serializer
        if isinstance(serializer, type):
            if issubclass(serializer, Serializer):
                return serializer
        elif callable(serializer):
            return inline_serializer(serializer)
        raise InvalidFormatterArgumentError(
            f"Unexpected type for serializer: {type(serializer).__name__}, "
            f"expected a Serializer subclass or a callable"
        )


def derive_key(resource_class: type) -> str:
    """
    Derive a root key from a resource class's qualified name.

    The ``Resource`` suffix is dropped, each name segment is lower-cased and nested class names
    are joined with ``_``.

    Examples:
        >>> class BlogPostResource(Resource): ...
        >>> derive_key(BlogPostResource)
        'blogpost'
    """
    # Names of enclosing functions are not part of the key
    qualname = resource_class.__qualname__.rsplit("<locals>.", 1)[-1]
    segments = qualname.split(".")
    segments[-1] = segments[-1].removesuffix("Resource") or segments[-1]
    return "_".join(segment.lower() for segment in segments)


__all__ = ["Resource", "derive_key"]
