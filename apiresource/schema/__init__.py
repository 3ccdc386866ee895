"""Schema model consumed by the resource lifecycle engine."""

from apiresource.schema.loader import descriptor_from_dict, load_descriptor
from apiresource.schema.models import (
    OperationDescriptor,
    OperationKind,
    PropertyType,
    ResourceDescriptor,
    ResponseDescriptor,
    SchemaDefinition,
    SchemaDefinitionProperty,
)
from apiresource.schema.naming import to_snake_case
from apiresource.schema.values import (
    ValueKind,
    classify_value,
    from_canonical_string,
    to_canonical_string,
    unwrap_object,
    wrap_object,
)

__all__ = [
    "PropertyType",
    "OperationKind",
    "SchemaDefinitionProperty",
    "SchemaDefinition",
    "ResponseDescriptor",
    "OperationDescriptor",
    "ResourceDescriptor",
    "load_descriptor",
    "descriptor_from_dict",
    "to_snake_case",
    "ValueKind",
    "classify_value",
    "wrap_object",
    "unwrap_object",
    "to_canonical_string",
    "from_canonical_string",
]
