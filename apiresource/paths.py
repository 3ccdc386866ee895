"""Request path and parent-ID resolution for resources and subresources.

A subresource lives under one or more parent resources, e.g. a firewall under
``/v1/cdns/{cdn_id}/firewalls``. The IDs of the parents are held in the
declarative state under the parent properties declared by the descriptor and
are substituted into the path template in declaration order.

Import identifiers carry the whole hierarchy: ``{parent_id}/.../{id}``.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from apiresource.errors import ParentIDCountMismatchError, ResourceConfigurationError
from apiresource.schema import ResourceDescriptor
from apiresource.state import StateAccessor

logger = logging.getLogger(__name__)

IMPORT_ID_SEPARATOR = "/"


class ImportID(NamedTuple):
    """A composite import identifier split into its parts."""

    parent_ids: list[str]
    instance_id: str


def get_parent_ids(state: StateAccessor, descriptor: ResourceDescriptor | None) -> list[str]:
    """Read the parent IDs of a resource from state, outermost parent first.

    Raises:
        ResourceConfigurationError: If there is no descriptor, or a parent value
            is missing from the state.
    """
    if descriptor is None:
        raise ResourceConfigurationError(
            "can't get parent ids from a resource engine with no resource descriptor"
        )
    parent_ids: list[str] = []
    for parent_property in descriptor.parent_properties:
        value = state.get(parent_property)
        if value is None or value == "":
            raise ResourceConfigurationError(
                f"could not find ID value in the state for subresource parent property "
                f"'{parent_property}'"
            )
        parent_ids.append(str(value))
    return parent_ids


def get_parent_ids_and_resource_path(
    state: StateAccessor, descriptor: ResourceDescriptor | None
) -> tuple[list[str], str]:
    """Resolve the parent IDs and the concrete collection path.

    Raises:
        ResourceConfigurationError: If the parent IDs can not be read.
        PathResolutionError: If the path template can not be resolved.
    """
    parent_ids = get_parent_ids(state, descriptor)
    assert descriptor is not None
    resource_path = descriptor.resolve_path(parent_ids)
    return parent_ids, resource_path


def parse_import_id(import_id: str, descriptor: ResourceDescriptor) -> ImportID:
    """Split a composite import ID into parent IDs and the instance ID.

    Example:
        >>> parse_import_id("32/159", firewall_descriptor)
        ImportID(parent_ids=['32'], instance_id='159')

    Raises:
        ParentIDCountMismatchError: If the number of segments is not the number
            of parents plus one.
    """
    parts = import_id.split(IMPORT_ID_SEPARATOR)
    expected = len(descriptor.parent_properties) + 1
    if len(parts) != expected:
        raise ParentIDCountMismatchError(import_id, expected=expected, received=len(parts))
    return ImportID(parent_ids=parts[:-1], instance_id=parts[-1])
