"""
Centralized exception classes for the serialite library.

All serialite-specific exceptions inherit from SerialiteError for easy catching.
"""


class SerialiteError(Exception):
    """Base exception for all serialite errors."""


class UnresolvedAccessorError(SerialiteError):
    """Raised when a declared accessor name is absent on the object being serialized."""


class UnsupportedAttributeTypeError(SerialiteError):
    """Raised when a schema slot holds a value that is not a recognized attribute type."""


class MissingBlockError(SerialiteError):
    """Raised when a computed attribute is declared without a function."""


class InvalidFormatterArgumentError(SerialiteError):
    """Raised when `serialize(serializer=...)` receives neither a Serializer class nor a callable."""


class CircularReferenceError(SerialiteError):
    """Raised when an association re-enters an object that is already being serialized."""


class DuplicateKeyError(SerialiteError):
    """Raised when two attributes map to the same output key after key transformation."""
