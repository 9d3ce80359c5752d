"""Utility functions to manage the project-wide hook configuration."""

import logging
import threading
from inspect import isclass
from typing import Any

from pluggy import PluginManager

from .hooks.markers import HOOK_NAMESPACE
from .hooks.specs import SerializeSpec

logger = logging.getLogger(__name__)

_PLUGIN_ENTRY_POINT = "serialite.hooks"  # entry-point to load hooks from for installed plugins
_PLUGIN_MANAGER: PluginManager | None = None
_PLUGIN_LOCK = threading.RLock()


# region API


def register_hooks(*hooks: Any) -> None:
    """Register specified serialite pluggy hooks."""
    hook_manager = _get_global_plugin_manager()
    for hooks_collection in hooks:
        if not hook_manager.is_registered(hooks_collection):
            _check_instance(hooks_collection)
            hook_manager.register(hooks_collection)


def unregister_hooks(*hooks: Any) -> None:
    """Unregister previously registered serialite pluggy hooks."""
    hook_manager = _get_global_plugin_manager()
    for hooks_collection in hooks:
        if hook_manager.is_registered(hooks_collection):
            hook_manager.unregister(hooks_collection)


def register_plugins_entry_points(_plugin_manager: PluginManager | None = None) -> None:
    """Register serialite plugins from Python package entrypoints."""
    _plugin_manager = _plugin_manager if _plugin_manager else _get_global_plugin_manager()
    _plugin_manager.load_setuptools_entrypoints(_PLUGIN_ENTRY_POINT)  # Doesn't use setuptools


def get_hook_manager(plugins: list[Any] | None = None) -> PluginManager:
    """
    Return the hook manager to use for a single serialization call.

    Without call-specific plugins this is the global manager; otherwise a new manager combining
    the global hooks with `plugins`.
    """
    if not plugins:
        return _get_global_plugin_manager()
    return create_hook_manager_with_plugins(plugins)


def create_hook_manager_with_plugins(plugins: list[Any]) -> PluginManager:
    """
    Create a new hook manager with both global and call-specific plugins.

    Args:
        plugins: Additional hook implementations to register.

    Returns:
        A new PluginManager with global + call-specific hooks.
    """
    # Create new manager with hook specs
    manager = _create_plugin_manager()

    # Copy global hooks
    global_manager = _get_global_plugin_manager()
    for plugin in global_manager.get_plugins():
        if not manager.is_registered(plugin):  # pragma: no branch
            manager.register(plugin)

    # Add call-specific hooks
    for plugin in plugins:
        if not manager.is_registered(plugin):  # pragma: no branch
            _check_instance(plugin)
            manager.register(plugin)

    return manager


# region Helpers


def _initialize_plugin_system() -> PluginManager:
    """Initializes hooks for the serialite library."""
    with _PLUGIN_LOCK:
        manager = _create_plugin_manager()
        global _PLUGIN_MANAGER
        _PLUGIN_MANAGER = manager
        return manager


def _get_global_plugin_manager() -> PluginManager:
    """Returns the initialized global plugin manager, initializing it on first use."""
    plugin_manager = _PLUGIN_MANAGER
    if plugin_manager is None:
        plugin_manager = _initialize_plugin_system()
    return plugin_manager


def _create_plugin_manager() -> PluginManager:
    """Create a new PluginManager instance and register serialite's hook specs."""
    manager = PluginManager(HOOK_NAMESPACE)
    manager.trace.root.setwriter(
        logger.debug if logger.getEffectiveLevel() == logging.DEBUG else None
    )
    manager.enable_tracing()
    manager.add_hookspecs(SerializeSpec)
    return manager


def _check_instance(plugin: Any) -> None:
    if isclass(plugin):
        raise TypeError(
            "serialite expects hooks to be registered as instances. "
            "Have you forgotten the `()` when registering a hook class?"
        )
