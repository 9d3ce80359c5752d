"""Serialite: declarative, cacheable JSON serialization for arbitrary Python objects."""

__version__ = "0.1.0"

from . import settings
from .associations import Many
from .associations import One
from .cache import MemoryCacheStore
from .cache import NullCacheStore
from .exceptions import SerialiteError
from .plugins.manager import _initialize_plugin_system
from .resource import Resource
from .schema import ResourceSchema
from .serializers import Serializer

# Initialize hooks system on module import
_initialize_plugin_system()

__all__ = [
    "MemoryCacheStore",
    "Many",
    "NullCacheStore",
    "One",
    "Resource",
    "ResourceSchema",
    "SerialiteError",
    "Serializer",
    "settings",
]
