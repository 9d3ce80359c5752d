"""
Formatting strategies turning a resource's serializable hash into JSON text.

Examples:
    Wrap the output under a fixed key:

    >>> class WithKey(Serializer, key="data"): ...

    Or configure a serializer inline at call time:

    >>> resource.serialize(lambda s: s.set(key="data"))  # doctest: +SKIP
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, ClassVar, Union

from serialite.settings import get_global_settings

if TYPE_CHECKING:
    from serialite.resource import Resource

RootKey = Union[str, bool, None]

_UNSET: Any = object()


class Serializer:
    """
    Default formatting strategy.

    The `key` option controls root-key wrapping:

    - ``None`` (default): wrap under the schema's declared root key, if it has one.
    - ``True``: wrap under the resource's key (declared or derived from its class name).
    - ``False``: never wrap.
    - a string: wrap under that string.
    """

    key: ClassVar[RootKey] = None

    def __init_subclass__(cls, *, key: RootKey = _UNSET, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if key is not _UNSET:
            cls.key = key

    @classmethod
    def set(cls, *, key: RootKey = _UNSET) -> None:
        """Set serializer options on this class."""
        if key is not _UNSET:
            cls.key = key

    def __init__(self, resource: Resource) -> None:
        self.resource = resource

    def root_key(self) -> str | None:
        """Resolve the key the output is wrapped under, or None for no wrapping."""
        key = self.key
        if key is None:
            return self.resource.schema.root_key
        if key is True:
            return self.resource.key
        if key is False:
            return None
        return str(key)

    def build(self) -> Any:
        """Build the object graph handed to the encoder."""
        data = self.resource.serializable_hash()
        root_key = self.root_key()
        return {root_key: data} if root_key is not None else data

    def encode(self, data: Any) -> str:
        """Encode the object graph as text. Override to use a different encoder."""
        return get_global_settings().encoder(data)

    def serialize(self) -> str:
        """Build and encode the resource."""
        return self.encode(self.build())


def inline_serializer(declare: Callable[[type[Serializer]], Any]) -> type[Serializer]:
    """Create a fresh `Serializer` subclass configured by `declare`."""
    serializer_class = type("InlineSerializer", (Serializer,), {"__module__": __name__})
    declare(serializer_class)
    return serializer_class


__all__ = ["Serializer", "inline_serializer"]
