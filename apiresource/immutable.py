"""Guard that blocks updates touching immutable properties.

The guard compares the local state against a freshly read remote payload
before any write is issued. Remote values are first converted into their
state representation with the StatePopulator, so both sides are compared in
the same shape. Each property is governed by its own immutable flag, even when
it is nested inside an object that is itself mutable.
"""

from __future__ import annotations

import logging
from typing import Any

from apiresource.errors import ImmutablePropertyViolationError
from apiresource.populator import StatePopulator
from apiresource.schema import (
    SchemaDefinition,
    SchemaDefinitionProperty,
    ValueKind,
    classify_value,
    to_canonical_string,
    unwrap_object,
)
from apiresource.state import StateAccessor

logger = logging.getLogger(__name__)


class ImmutableFieldGuard:
    """Checks local state against remote data for immutable property changes."""

    def __init__(self, populator: StatePopulator | None = None) -> None:
        self.populator = populator or StatePopulator()

    def check(
        self, state: StateAccessor, remote_payload: dict[str, Any], schema: SchemaDefinition
    ) -> None:
        """Raise if any immutable property differs between state and remote.

        Raises:
            ImmutablePropertyViolationError: On the first immutable property whose
                local value differs from the remote one.
        """
        for prop in schema.properties:
            if prop.computed or prop.is_parent_property or prop.is_named_id:
                continue
            local_value = state.get(prop.canonical_name)
            remote_value = self.populator.convert(prop, remote_payload.get(prop.name))
            self._check_property(prop, local_value, remote_value)

    def _check_property(
        self, prop: SchemaDefinitionProperty, local_value: Any, remote_value: Any
    ) -> None:
        if prop.computed or local_value is None:
            return

        if prop.is_object:
            self._check_object(prop, local_value, remote_value)
        elif prop.is_list_of_objects:
            self._check_list_of_objects(prop, local_value, remote_value)
        elif prop.is_list_of_primitives:
            if prop.immutable:
                self._check_list_of_primitives(prop, local_value, remote_value)
        elif prop.immutable and not scalars_equal(local_value, remote_value):
            raise ImmutablePropertyViolationError(
                f"user attempted to update an immutable property ('{prop.name}'): "
                f"[user input: {local_value}; actual: {remote_value}]",
                property_name=prop.name,
                local_value=local_value,
                remote_value=remote_value,
            )

    def _check_list_of_primitives(
        self, prop: SchemaDefinitionProperty, local_value: Any, remote_value: Any
    ) -> None:
        local_list = list(local_value)
        remote_list = list(remote_value or [])
        if len(local_list) != len(remote_list):
            raise ImmutablePropertyViolationError(
                f"user attempted to update an immutable list property ('{prop.name}') size: "
                f"[user input list size: {len(local_list)}; actual list size: {len(remote_list)}]",
                property_name=prop.name,
                local_value=local_list,
                remote_value=remote_list,
            )
        for local_item, remote_item in zip(local_list, remote_list):
            if not scalars_equal(local_item, remote_item):
                raise ImmutablePropertyViolationError(
                    f"user attempted to update an immutable list property ('{prop.name}') "
                    f"element: [user input: {local_list}; actual: {remote_list}]",
                    property_name=prop.name,
                    local_value=local_list,
                    remote_value=remote_list,
                )

    def _check_list_of_objects(
        self, prop: SchemaDefinitionProperty, local_value: Any, remote_value: Any
    ) -> None:
        assert prop.schema_definition is not None
        local_list = list(local_value)
        remote_list = list(remote_value or [])

        if prop.immutable:
            if not values_equal(prop, local_list, remote_list):
                raise ImmutablePropertyViolationError(
                    f"user attempted to update an immutable list of objects ('{prop.name}'): "
                    f"[user input: {local_list}; actual: {remote_list}]",
                    property_name=prop.name,
                    local_value=local_list,
                    remote_value=remote_list,
                )
            return

        for local_item, remote_item in zip(local_list, remote_list):
            local_object = unwrap_object(prop.name, local_item)
            remote_object = unwrap_object(prop.name, remote_item)
            for nested in prop.schema_definition.properties:
                self._check_property(
                    nested,
                    local_object.get(nested.canonical_name),
                    remote_object.get(nested.canonical_name),
                )

    def _check_object(
        self, prop: SchemaDefinitionProperty, local_value: Any, remote_value: Any
    ) -> None:
        assert prop.schema_definition is not None
        local_object = unwrap_object(prop.name, local_value)
        remote_object = unwrap_object(prop.name, remote_value) if remote_value else {}

        for nested in prop.schema_definition.properties:
            if nested.computed:
                continue
            local_nested = local_object.get(nested.canonical_name)
            remote_nested = remote_object.get(nested.canonical_name)
            if prop.immutable:
                if local_nested is not None and not values_equal(nested, local_nested, remote_nested):
                    raise ImmutablePropertyViolationError(
                        f"user attempted to update an immutable object ('{prop.name}') property "
                        f"('{nested.name}'): [user input: {local_value}; actual: {remote_value}]",
                        property_name=prop.name,
                        local_value=local_value,
                        remote_value=remote_value,
                        sub_property=nested.name,
                    )
            else:
                self._check_property(nested, local_nested, remote_nested)


def check_immutable(
    state: StateAccessor, remote_payload: dict[str, Any], schema: SchemaDefinition
) -> None:
    """Raise ImmutablePropertyViolationError if ``state`` changes an immutable property."""
    ImmutableFieldGuard().check(state, remote_payload, schema)


def scalars_equal(local_value: Any, remote_value: Any) -> bool:
    """Compare two scalars by value rather than by representation.

    Numbers compare numerically regardless of int/float kind. A string compared
    with a non-string scalar compares by canonical string form.
    """
    if local_value is None or remote_value is None:
        return local_value is remote_value
    local_kind = classify_value(local_value)
    remote_kind = classify_value(remote_value)
    numeric = (ValueKind.INT, ValueKind.FLOAT)
    if local_kind in numeric and remote_kind in numeric:
        return float(local_value) == float(remote_value)
    if local_kind != remote_kind and ValueKind.STRING in (local_kind, remote_kind):
        if local_kind.is_scalar and remote_kind.is_scalar:
            return to_canonical_string(local_value) == to_canonical_string(remote_value)
    return local_kind == remote_kind and local_value == remote_value


def values_equal(prop: SchemaDefinitionProperty, local_value: Any, remote_value: Any) -> bool:
    """Structural comparison of two values in state representation."""
    if local_value is None or remote_value is None:
        return local_value is None and remote_value is None

    if prop.is_object:
        assert prop.schema_definition is not None
        local_object = unwrap_object(prop.name, local_value)
        remote_object = unwrap_object(prop.name, remote_value)
        return all(
            values_equal(
                nested,
                local_object.get(nested.canonical_name),
                remote_object.get(nested.canonical_name),
            )
            for nested in prop.schema_definition.properties
            if not nested.computed
        )

    if prop.is_list_of_objects:
        assert prop.schema_definition is not None
        if len(local_value) != len(remote_value):
            return False
        for local_item, remote_item in zip(local_value, remote_value):
            local_object = unwrap_object(prop.name, local_item)
            remote_object = unwrap_object(prop.name, remote_item)
            for nested in prop.schema_definition.properties:
                if nested.computed:
                    continue
                if not values_equal(
                    nested,
                    local_object.get(nested.canonical_name),
                    remote_object.get(nested.canonical_name),
                ):
                    return False
        return True

    if prop.is_list_of_primitives:
        if len(local_value) != len(remote_value):
            return False
        return all(scalars_equal(a, b) for a, b in zip(local_value, remote_value))

    return scalars_equal(local_value, remote_value)
