"""Hook specifications for serialite serialization lifecycle events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .markers import hook_spec

if TYPE_CHECKING:
    from serialite.resource import Resource


class SerializeSpec:
    """Hook specifications for top-level `Resource.serialize()` calls."""

    @hook_spec
    def before_serialize(self, resource: Resource) -> None:
        """
        Called before a resource is serialized.

        Args:
            resource: The resource being serialized.
        """

    @hook_spec
    def after_serialize(self, resource: Resource, result: str, duration: float) -> None:
        """
        Called after a resource was serialized successfully.

        Args:
            resource: The resource that was serialized.
            result: The encoded text.
            duration: Time taken to serialize in seconds.
        """

    @hook_spec
    def on_serialize_error(self, resource: Resource, error: Exception, duration: float) -> None:
        """
        Called when serialization fails, before the error propagates to the caller.

        Args:
            resource: The resource that failed to serialize.
            error: The exception that was raised.
            duration: Time until the failure in seconds.
        """
