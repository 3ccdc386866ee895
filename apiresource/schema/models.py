"""Schema model describing a remote resource.

This module defines the typed, immutable description of a resource that the
lifecycle engine consumes:
- SchemaDefinitionProperty: A single property with its flags
- SchemaDefinition: The ordered set of properties of an object
- ResponseDescriptor: Polling metadata attached to a response status code
- OperationDescriptor: One lifecycle operation (create, read, update, delete)
- ResourceDescriptor: Everything the engine needs to know about a resource

Descriptors are produced by the component that analyses the API document and
are frozen once constructed.

Example:
    >>> from apiresource.schema import (
    ...     OperationDescriptor, PropertyType, ResourceDescriptor,
    ...     SchemaDefinition, SchemaDefinitionProperty,
    ... )
    >>>
    >>> descriptor = ResourceDescriptor(
    ...     name="cdn",
    ...     path="/v1/cdns",
    ...     schema_definition=SchemaDefinition(properties=[
    ...         SchemaDefinitionProperty(name="id", type=PropertyType.STRING, computed=True),
    ...         SchemaDefinitionProperty(name="label", type=PropertyType.STRING, required=True),
    ...     ]),
    ...     create=OperationDescriptor(),
    ...     read=OperationDescriptor(),
    ... )
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from apiresource.errors import (
    PathResolutionError,
    ResourceConfigurationError,
    StatusFieldResolutionError,
)
from apiresource.schema.naming import to_snake_case

PATH_PARAMETER = re.compile(r"\{[^{}]+\}")


class PropertyType(str, Enum):
    """Types a schema property may declare."""

    STRING = "string"
    INT = "integer"
    NUMBER = "number"
    BOOL = "boolean"
    LIST = "list"
    OBJECT = "object"

    @property
    def is_primitive(self) -> bool:
        return self not in (PropertyType.LIST, PropertyType.OBJECT)


class OperationKind(str, Enum):
    """Lifecycle operations a resource may support."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def http_method(self) -> str:
        return {
            OperationKind.CREATE: "POST",
            OperationKind.READ: "GET",
            OperationKind.UPDATE: "PUT",
            OperationKind.DELETE: "DELETE",
        }[self]


class SchemaDefinitionProperty(BaseModel):
    """A single property of a resource schema.

    Attributes:
        name: Name of the property on the wire.
        preferred_name: Optional override for the canonical (state) name.
        type: Declared type of the property.
        item_type: Element type for list properties. Defaults to string.
        required: Whether the property must be set by the user.
        computed: Whether the value is only ever produced by the API.
        optional: Whether the property may be omitted.
        sensitive: Whether the value must be kept out of logs.
        force_new: Whether a change requires recreating the resource.
        immutable: Whether the value can not change after creation.
        is_identifier: Whether the property identifies the resource.
        is_status_identifier: Whether the property holds the resource status.
        is_parent_property: Whether the property holds an ancestor's ID.
        default: Default value, if any.
        schema_definition: Nested schema for objects and lists of objects.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    preferred_name: str | None = None
    type: PropertyType
    item_type: PropertyType | None = None
    required: bool = False
    computed: bool = False
    optional: bool = False
    sensitive: bool = False
    force_new: bool = False
    immutable: bool = False
    is_identifier: bool = False
    is_status_identifier: bool = False
    is_parent_property: bool = False
    default: Any = None
    schema_definition: SchemaDefinition | None = None

    @model_validator(mode="before")
    @classmethod
    def default_list_item_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("type") in (PropertyType.LIST, "list"):
            if data.get("item_type") is None:
                data = {**data, "item_type": PropertyType.STRING}
        return data

    @model_validator(mode="after")
    def check_nested_schema(self) -> SchemaDefinitionProperty:
        if self.item_type == PropertyType.LIST:
            raise ValueError(f"property '{self.name}': lists of lists are not supported")
        needs_schema = self.type == PropertyType.OBJECT or self.item_type == PropertyType.OBJECT
        if needs_schema and self.schema_definition is None:
            raise ValueError(f"property '{self.name}' requires a nested schema definition")
        return self

    @property
    def canonical_name(self) -> str:
        return self.preferred_name or to_snake_case(self.name)

    @property
    def is_named_id(self) -> bool:
        return self.canonical_name == "id"

    @property
    def is_named_status(self) -> bool:
        return self.canonical_name == "status"

    @property
    def is_list_of_primitives(self) -> bool:
        return self.type == PropertyType.LIST and self.item_type != PropertyType.OBJECT

    @property
    def is_list_of_objects(self) -> bool:
        return self.type == PropertyType.LIST and self.item_type == PropertyType.OBJECT

    @property
    def is_object(self) -> bool:
        return self.type == PropertyType.OBJECT

    @property
    def has_nested_objects(self) -> bool:
        """Whether this object is stored with the singleton-list convention."""
        if not self.is_object or self.schema_definition is None:
            return False
        return any(prop.is_object for prop in self.schema_definition.properties)


class SchemaDefinition(BaseModel):
    """Ordered set of properties describing an object."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    properties: tuple[SchemaDefinitionProperty, ...] = ()

    @model_validator(mode="after")
    def check_unique_names(self) -> SchemaDefinition:
        seen: set[str] = set()
        for prop in self.properties:
            if prop.canonical_name in seen:
                raise ValueError(f"duplicate canonical property name '{prop.canonical_name}'")
            seen.add(prop.canonical_name)
        return self

    def get_property(self, name: str) -> SchemaDefinitionProperty | None:
        """Find a property by wire name, falling back to its canonical name."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        for prop in self.properties:
            if prop.canonical_name == name:
                return prop
        return None

    def get_identifier_property(self) -> SchemaDefinitionProperty:
        """Resolve the identifier: a property named 'id' wins over a flagged one.

        Raises:
            ResourceConfigurationError: If no property identifies the resource.
        """
        for prop in self.properties:
            if prop.is_named_id:
                return prop
        for prop in self.properties:
            if prop.is_identifier:
                return prop
        raise ResourceConfigurationError(
            "could not find any identifier property in the resource schema definition"
        )

    def get_immutable_properties(self) -> list[SchemaDefinitionProperty]:
        return [prop for prop in self.properties if prop.immutable and not prop.is_named_id]

    def get_status_identifier(self) -> list[str]:
        """Return the wire-name path leading to the status property.

        The top-level property flagged as status identifier takes preference over
        one merely named 'status', and must be computed. When the chosen property
        is an object, the status is looked up inside its schema the same way.

        Raises:
            StatusFieldResolutionError: If no status property can be located.
        """
        return self._status_identifier(ignore_id=True, enforce_computed=True)

    def _status_identifier(self, ignore_id: bool, enforce_computed: bool) -> list[str]:
        status_property: SchemaDefinitionProperty | None = None
        for prop in self.properties:
            if ignore_id and prop.is_named_id:
                continue
            if prop.is_status_identifier:
                status_property = prop
                break
            if prop.is_named_status:
                status_property = prop

        if status_property is None:
            raise StatusFieldResolutionError(
                "could not find any status property. Please make sure the resource schema "
                "definition has either one property named 'status' or one property flagged "
                "as status identifier"
            )
        if enforce_computed and not status_property.computed:
            raise StatusFieldResolutionError(
                f"schema definition status property '{status_property.name}' must be computed"
            )

        path = [status_property.name]
        if status_property.is_object and status_property.schema_definition is not None:
            path.extend(
                status_property.schema_definition._status_identifier(
                    ignore_id=False, enforce_computed=False
                )
            )
        return path


class ResponseDescriptor(BaseModel):
    """Polling metadata for one response status code of an operation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    polling_enabled: bool = False
    pending_statuses: tuple[str, ...] = ()
    target_statuses: tuple[str, ...] = ()


class OperationDescriptor(BaseModel):
    """One lifecycle operation exposed by the remote API.

    Attributes:
        responses: Response descriptors keyed by HTTP status code.
        timeout: Maximum seconds to wait for completion polling.
        security_schemes: Security scheme names the operation requires.
        header_parameters: Header names the operation requires.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    responses: dict[int, ResponseDescriptor] = Field(default_factory=dict)
    timeout: float | None = Field(default=None, gt=0)
    security_schemes: tuple[str, ...] = ()
    header_parameters: tuple[str, ...] = ()

    def response_for(self, status_code: int) -> ResponseDescriptor | None:
        return self.responses.get(status_code)

    def polling_response(self, status_code: int) -> ResponseDescriptor | None:
        """Return the response descriptor for ``status_code`` if it enables polling."""
        response = self.response_for(status_code)
        if response is not None and response.polling_enabled:
            return response
        return None


class ResourceDescriptor(BaseModel):
    """Everything the engine needs to drive one resource's lifecycle.

    Attributes:
        name: Resource name used in messages and logs.
        path: Collection path template, e.g. ``/v1/cdns/{cdn_id}/firewalls``.
        schema_definition: Properties of the resource.
        create: Create operation, None when unsupported.
        read: Read operation, None when unsupported.
        update: Update operation, None when unsupported.
        delete: Delete operation, None when unsupported.
        parent_properties: Canonical names of parent properties, outermost first.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    schema_definition: SchemaDefinition
    create: OperationDescriptor | None = None
    read: OperationDescriptor | None = None
    update: OperationDescriptor | None = None
    delete: OperationDescriptor | None = None
    parent_properties: tuple[str, ...] = ()

    @property
    def is_subresource(self) -> bool:
        return len(self.parent_properties) > 0

    @property
    def path_parameters(self) -> list[str]:
        return PATH_PARAMETER.findall(self.path)

    def operation(self, kind: OperationKind) -> OperationDescriptor | None:
        return getattr(self, kind.value)

    def resolve_path(self, parent_ids: list[str]) -> str:
        """Substitute ``parent_ids`` into the path template, in order.

        Raises:
            PathResolutionError: If the IDs do not fit the template.
        """
        placeholders = self.path_parameters
        if len(placeholders) != len(parent_ids):
            raise PathResolutionError(
                f"could not resolve sub-resource path correctly '{self.path}' with the given "
                f"ids - expected {len(placeholders)} ids to resolve the path params but "
                f"got {list(parent_ids)}"
            )
        for parent_id in parent_ids:
            if "/" in parent_id:
                raise PathResolutionError(
                    f"could not resolve sub-resource path correctly '{self.path}' due to "
                    f"parent IDs ({list(parent_ids)}) containing not supported characters "
                    "(forward slashes)"
                )
        resolved = self.path
        for placeholder, parent_id in zip(placeholders, parent_ids):
            resolved = resolved.replace(placeholder, parent_id, 1)
        return resolved.rstrip("/") if resolved != "/" else resolved

    def resolve_instance_path(self, parent_ids: list[str], instance_id: str) -> str:
        return f"{self.resolve_path(parent_ids).rstrip('/')}/{instance_id}"


SchemaDefinitionProperty.model_rebuild()
