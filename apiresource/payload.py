"""Translation of declarative state into wire payloads.

The builder walks the schema, not the state, so properties the state holds
but the schema does not declare never reach the wire. Computed properties are
skipped at every depth; the identifier and parent properties only at the top
level of the resource.
"""

from __future__ import annotations

import logging
from typing import Any

from apiresource.errors import (
    NilPropertyValueError,
    ResourceConfigurationError,
    UnsupportedValueTypeError,
)
from apiresource.schema import (
    PropertyType,
    SchemaDefinition,
    SchemaDefinitionProperty,
    ValueKind,
    classify_value,
    from_canonical_string,
    unwrap_object,
)
from apiresource.state import StateAccessor

logger = logging.getLogger(__name__)

_ACCEPTED_KINDS: dict[PropertyType, tuple[ValueKind, ...]] = {
    PropertyType.STRING: (ValueKind.STRING,),
    PropertyType.INT: (ValueKind.INT,),
    PropertyType.NUMBER: (ValueKind.INT, ValueKind.FLOAT),
    PropertyType.BOOL: (ValueKind.BOOL,),
}


class PayloadBuilder:
    """Builds the request payload for create and update calls."""

    def build(self, state: StateAccessor, schema: SchemaDefinition) -> dict[str, Any]:
        """Build the wire payload for ``state``.

        Raises:
            NilPropertyValueError: If a required property has no value.
            UnsupportedValueTypeError: If a value does not fit its declared type.
            InvalidSingletonListError: If a nested object is not a one-element list.
        """
        try:
            identifier: str | None = schema.get_identifier_property().canonical_name
        except ResourceConfigurationError:
            identifier = None

        payload: dict[str, Any] = {}
        for prop in schema.properties:
            if prop.computed or prop.is_parent_property:
                continue
            if prop.canonical_name == identifier:
                continue
            value = state.get(prop.canonical_name)
            if value is None:
                if prop.required:
                    raise NilPropertyValueError(prop.name)
                continue
            payload[prop.name] = self._build_value(prop, value, in_object=False)
        return payload

    def _build_object(
        self, prop: SchemaDefinitionProperty, value: Any, in_object: bool
    ) -> dict[str, Any]:
        assert prop.schema_definition is not None
        local_object = unwrap_object(prop.name, value)
        result: dict[str, Any] = {}
        for nested in prop.schema_definition.properties:
            if nested.computed:
                continue
            nested_value = local_object.get(nested.canonical_name)
            if nested_value is None:
                if nested.required:
                    raise NilPropertyValueError(nested.name)
                continue
            result[nested.name] = self._build_value(nested, nested_value, in_object=in_object)
        return result

    def _build_value(self, prop: SchemaDefinitionProperty, value: Any, in_object: bool) -> Any:
        kind = classify_value(value)

        if prop.is_object:
            return self._build_object(prop, value, in_object=True)

        if prop.type == PropertyType.LIST:
            if kind != ValueKind.LIST:
                raise UnsupportedValueTypeError(
                    kind.value,
                    message=f"{kind.value} not supported for list property '{prop.name}'",
                )
            if prop.is_list_of_objects:
                return [self._build_object(prop, item, in_object=False) for item in value]
            assert prop.item_type is not None
            return [
                _build_scalar(prop.name, prop.item_type, item, in_object=False) for item in value
            ]

        return _build_scalar(prop.name, prop.type, value, in_object=in_object)


def _build_scalar(name: str, property_type: PropertyType, value: Any, in_object: bool) -> Any:
    kind = classify_value(value)
    # scalars inside objects are held as strings in state
    if in_object and kind == ValueKind.STRING and property_type != PropertyType.STRING:
        return from_canonical_string(value, property_type)
    if property_type == PropertyType.INT and kind == ValueKind.FLOAT and value.is_integer():
        return int(value)
    if kind not in _ACCEPTED_KINDS[property_type]:
        raise UnsupportedValueTypeError(
            kind.value,
            message=f"{kind.value} not supported for {property_type.value} property '{name}'",
        )
    return value


def mask_sensitive(payload: dict[str, Any], schema: SchemaDefinition) -> dict[str, Any]:
    """Return a copy of a top-level payload with sensitive values masked, for logging."""
    masked = dict(payload)
    for prop in schema.properties:
        if prop.sensitive and prop.name in masked:
            masked[prop.name] = "***"
    return masked
