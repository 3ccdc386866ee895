"""Translation of wire payloads back into declarative state.

The populator is strict: a payload key the schema does not declare aborts the
whole update with UnknownRemotePropertyError, which protects the state from
silently drifting away from the API. Every value is converted before the first
write, so a failed conversion leaves the state exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Any

from apiresource.errors import UnknownRemotePropertyError, UnsupportedValueTypeError
from apiresource.schema import (
    PropertyType,
    SchemaDefinition,
    SchemaDefinitionProperty,
    ValueKind,
    classify_value,
    to_canonical_string,
    wrap_object,
)
from apiresource.state import StateAccessor

logger = logging.getLogger(__name__)


class StatePopulator:
    """Writes remote payload data into a declarative state."""

    def apply(
        self, payload: dict[str, Any], schema: SchemaDefinition, state: StateAccessor
    ) -> None:
        """Populate ``state`` from ``payload``.

        The property named 'id' is not written; it belongs in the identifier slot.

        Raises:
            UnknownRemotePropertyError: If the payload holds an undeclared property.
            UnsupportedValueTypeError: If a value is of an unsupported kind.
        """
        converted: list[tuple[str, Any]] = []
        for key, remote_value in payload.items():
            prop = schema.get_property(key)
            if prop is None:
                raise UnknownRemotePropertyError(key)
            if prop.is_named_id:
                continue
            converted.append((prop.canonical_name, self.convert(prop, remote_value)))

        for name, value in converted:
            state.set(name, value)
        logger.debug(f"Populated {len(converted)} properties from remote payload")

    def convert(
        self, prop: SchemaDefinitionProperty, remote_value: Any, in_object: bool = False
    ) -> Any:
        """Convert one remote value into its state representation.

        Args:
            prop: Schema property the value belongs to.
            remote_value: Value as decoded from the wire.
            in_object: Whether the value sits inside an object, where scalars
                are kept as their canonical strings.
        """
        kind = classify_value(remote_value)

        if kind == ValueKind.NULL:
            return None

        if kind == ValueKind.LIST:
            if prop.type != PropertyType.LIST:
                raise UnsupportedValueTypeError(
                    kind.value,
                    message=f"{kind.value} not supported for {prop.type.value} property '{prop.name}'",
                )
            if prop.is_list_of_primitives:
                return list(remote_value)
            return [self._convert_object(prop, item, in_object=False) for item in remote_value]

        if kind == ValueKind.MAP:
            if not prop.is_object:
                raise UnsupportedValueTypeError(
                    kind.value,
                    message=f"{kind.value} not supported for {prop.type.value} property '{prop.name}'",
                )
            local_object = self._convert_object(prop, remote_value, in_object=True)
            if prop.has_nested_objects:
                return wrap_object(local_object)
            return local_object

        if not prop.type.is_primitive:
            raise UnsupportedValueTypeError(
                kind.value,
                message=f"{kind.value} not supported for {prop.type.value} property '{prop.name}'",
            )
        if in_object:
            return to_canonical_string(remote_value)
        if prop.type == PropertyType.INT and kind == ValueKind.FLOAT and remote_value.is_integer():
            return int(remote_value)
        return remote_value

    def _convert_object(
        self, prop: SchemaDefinitionProperty, remote_value: Any, in_object: bool
    ) -> dict[str, Any]:
        assert prop.schema_definition is not None
        kind = classify_value(remote_value)
        if kind == ValueKind.NULL:
            return {}
        if kind != ValueKind.MAP:
            raise UnsupportedValueTypeError(
                kind.value,
                message=f"{kind.value} not supported for object property '{prop.name}'",
            )

        local_object: dict[str, Any] = {}
        for key, nested_value in remote_value.items():
            nested = prop.schema_definition.get_property(key)
            if nested is None:
                raise UnknownRemotePropertyError(key)
            local_object[nested.canonical_name] = self.convert(
                nested, nested_value, in_object=in_object
            )
        return local_object
