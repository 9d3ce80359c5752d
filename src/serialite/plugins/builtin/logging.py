"""
Logging plugin for serialization lifecycle events.

Example:
    >>> from serialite.plugins import LoggingPlugin
    >>> resource.serialize(plugins=[LoggingPlugin()])  # doctest: +SKIP
"""

import logging
from typing import Any, MutableMapping

from serialite.plugins.hooks.markers import hook_impl

DEFAULT_LOGGER_NAME = "serialite.serialize"


class ResourceLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects the resource name into log records.

    The name is available to formatters as ``%(serialite_resource)s``.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, dict[str, Any]]:
        """
        Process log call to inject resource context.

        Args:
            msg: Log message
            kwargs: Keyword arguments from log call

        Returns:
            Tuple of (message, modified kwargs with resource context)
        """
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("serialite_resource", (self.extra or {}).get("serialite_resource"))
        kwargs["extra"] = extra
        return msg, dict(kwargs)


def get_logger(name: str | None = None, resource: Any = None) -> ResourceLoggerAdapter:
    """
    Get a logger that tags records with a resource name.

    Args:
        name: Logger name, defaults to ``serialite.serialize``.
        resource: Resource instance or class whose name is attached to every record.

    Returns:
        A `ResourceLoggerAdapter` wrapping the named logger.
    """
    base_logger = logging.getLogger(name or DEFAULT_LOGGER_NAME)
    resource_name = None
    if resource is not None:
        resource_class = resource if isinstance(resource, type) else type(resource)
        resource_name = resource_class.__qualname__
    return ResourceLoggerAdapter(base_logger, {"serialite_resource": resource_name})


class LoggingPlugin:
    """
    Logs every top-level serialization.

    Successful calls are logged at `level`, failures at ERROR with the exception message.
    """

    def __init__(self, logger_name: str | None = None, level: int = logging.DEBUG) -> None:
        """
        Initialize the plugin.

        Args:
            logger_name: Name of the logger records are sent to.
            level: Level used for the start/finish records.
        """
        self.logger_name = logger_name or DEFAULT_LOGGER_NAME
        self.level = level

    @hook_impl
    def before_serialize(self, resource: Any) -> None:
        logger = get_logger(self.logger_name, resource)
        logger.log(self.level, f"Serializing {type(resource.object).__name__}")

    @hook_impl
    def after_serialize(self, resource: Any, result: str, duration: float) -> None:
        logger = get_logger(self.logger_name, resource)
        logger.log(self.level, f"Serialized {len(result)} characters in {duration:.6f}s")

    @hook_impl
    def on_serialize_error(self, resource: Any, error: Exception, duration: float) -> None:
        logger = get_logger(self.logger_name, resource)
        logger.error(f"Serialization failed after {duration:.6f}s: {type(error).__name__}: {error}")
