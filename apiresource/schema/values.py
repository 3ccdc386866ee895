"""Classification of JSON-like values and the singleton-list convention.

Wire payloads and declarative state both hold loosely typed values. Every
component that walks them classifies each value with ``classify_value`` so
that unexpected kinds become ``UnsupportedValueTypeError`` instead of
surfacing later as attribute or type errors.

Objects that contain other objects cannot be stored as flat maps in the
declarative state, so they are kept as a list holding exactly one map.
``wrap_object`` and ``unwrap_object`` are the only places that know this.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from apiresource.errors import InvalidSingletonListError, UnsupportedValueTypeError
from apiresource.schema.models import PropertyType


class ValueKind(Enum):
    """Kinds of value that may appear in a payload or state entry."""

    NULL = "null"
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    LIST = "list"
    MAP = "map"

    @property
    def is_scalar(self) -> bool:
        return self in (ValueKind.STRING, ValueKind.INT, ValueKind.FLOAT, ValueKind.BOOL)


def classify_value(value: Any) -> ValueKind:
    """Return the ValueKind of ``value``.

    Raises:
        UnsupportedValueTypeError: If the value is not JSON-like.
    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, so it must be tested first
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    if isinstance(value, dict):
        return ValueKind.MAP
    raise UnsupportedValueTypeError(type(value).__name__)


def wrap_object(value: dict[str, Any]) -> list[dict[str, Any]]:
    """Store an object in the singleton-list representation."""
    return [value]


def unwrap_object(property_name: str, value: Any) -> dict[str, Any]:
    """Return the map behind an object value.

    Accepts either a plain map or the singleton-list representation.

    Raises:
        InvalidSingletonListError: If a list does not hold exactly one element.
        UnsupportedValueTypeError: If the value (or the wrapped element) is not a map.
    """
    kind = classify_value(value)
    if kind == ValueKind.LIST:
        if len(value) != 1:
            raise InvalidSingletonListError(property_name, len(value))
        value = value[0]
        kind = classify_value(value)
    if kind != ValueKind.MAP:
        raise UnsupportedValueTypeError(
            kind.value,
            message=f"{kind.value} not supported for object property '{property_name}'",
        )
    return value


def to_canonical_string(value: Any) -> str:
    """Render a scalar the way it is kept inside object-typed state.

    Example:
        >>> to_canonical_string(True)
        'true'
        >>> to_canonical_string(1.0)
        '1'
        >>> to_canonical_string(1.5)
        '1.5'
    """
    kind = classify_value(value)
    if kind == ValueKind.BOOL:
        return "true" if value else "false"
    if kind == ValueKind.FLOAT:
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if kind == ValueKind.INT:
        return str(value)
    if kind == ValueKind.STRING:
        return value
    raise UnsupportedValueTypeError(kind.value)


def from_canonical_string(value: str, property_type: PropertyType) -> Any:
    """Convert a canonical string back into the declared scalar type.

    Raises:
        UnsupportedValueTypeError: If the string does not represent the type.
    """
    try:
        if property_type == PropertyType.INT:
            return int(value)
        if property_type == PropertyType.NUMBER:
            number = float(value)
            return int(number) if number.is_integer() and "." not in value else number
    except ValueError:
        raise UnsupportedValueTypeError(
            "str",
            message=f"value '{value}' can not be converted to {property_type.value}",
        ) from None
    if property_type == PropertyType.BOOL:
        lowered = value.lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
        raise UnsupportedValueTypeError(
            "str", message=f"value '{value}' can not be converted to {property_type.value}"
        )
    return value
