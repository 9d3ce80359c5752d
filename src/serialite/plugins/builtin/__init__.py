"""Default plugins shipped with serialite."""

from serialite.plugins.builtin.logging import LoggingPlugin
from serialite.plugins.builtin.logging import get_logger

__all__ = [
    "LoggingPlugin",
    "get_logger",
]
