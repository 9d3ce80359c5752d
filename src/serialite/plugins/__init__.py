from serialite.plugins.builtin import LoggingPlugin
from serialite.plugins.builtin import get_logger
from serialite.plugins.manager import register_hooks
from serialite.plugins.manager import register_plugins_entry_points
from serialite.plugins.manager import unregister_hooks

from .hooks.markers import hook_impl

__all__ = [
    "hook_impl",
    "LoggingPlugin",
    "get_logger",
    "register_hooks",
    "register_plugins_entry_points",
    "unregister_hooks",
]
