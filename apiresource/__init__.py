"""apiresource - Resource lifecycle engine for declaratively managed API resources.

apiresource drives the create, read, update, delete and import lifecycle of a
remote HTTP resource from a machine-readable description of that resource. It
translates between a flat declarative state and the nested JSON payloads the
API exchanges, guards immutable properties, resolves subresource paths, and
waits for asynchronous operations to complete.

Example:
    >>> from apiresource import DeclarativeState, HttpApiClient, ResourceEngine, load_descriptor
    >>>
    >>> engine = ResourceEngine(load_descriptor("cdn.yaml"))
    >>> state = DeclarativeState({"label": "cdn-1"})
    >>> with HttpApiClient(engine.config) as client:
    ...     engine.create(state, client)

Core:
    ResourceEngine: CRUD/import orchestration
    PayloadBuilder: Declarative state -> wire payload
    StatePopulator: Wire payload -> declarative state
    ImmutableFieldGuard: Blocks updates to immutable properties
    CompletionPoller: Waits for asynchronous operations to complete

Configuration:
    EngineConfig: Timeouts, polling cadence and HTTP client settings
"""

from apiresource.client import ApiClient, ApiResponse, HttpApiClient
from apiresource.config import EngineConfig, load_config
from apiresource.engine import ResourceEngine
from apiresource.errors import (
    ImmutablePropertyViolationError,
    MissingIdentifierError,
    ParentIDCountMismatchError,
    PollingTimeoutError,
    ResourceConfigurationError,
    ResourceEngineError,
    StatusFieldResolutionError,
    UnexpectedStatusError,
    UnknownRemotePropertyError,
    UnsupportedOperationError,
    UnsupportedValueTypeError,
)
from apiresource.immutable import ImmutableFieldGuard, check_immutable
from apiresource.paths import get_parent_ids, get_parent_ids_and_resource_path, parse_import_id
from apiresource.payload import PayloadBuilder
from apiresource.polling import CompletionPoller, PollState
from apiresource.populator import StatePopulator
from apiresource.schema import (
    OperationDescriptor,
    PropertyType,
    ResourceDescriptor,
    ResponseDescriptor,
    SchemaDefinition,
    SchemaDefinitionProperty,
    load_descriptor,
)
from apiresource.state import DeclarativeState, StateAccessor

__version__ = "0.1.0"

__all__ = [
    "ResourceEngine",
    "PayloadBuilder",
    "StatePopulator",
    "ImmutableFieldGuard",
    "check_immutable",
    "CompletionPoller",
    "PollState",
    "get_parent_ids",
    "get_parent_ids_and_resource_path",
    "parse_import_id",
    "DeclarativeState",
    "StateAccessor",
    "ApiClient",
    "ApiResponse",
    "HttpApiClient",
    "EngineConfig",
    "load_config",
    "PropertyType",
    "SchemaDefinitionProperty",
    "SchemaDefinition",
    "ResponseDescriptor",
    "OperationDescriptor",
    "ResourceDescriptor",
    "load_descriptor",
    "ResourceEngineError",
    "UnsupportedOperationError",
    "UnexpectedStatusError",
    "MissingIdentifierError",
    "UnknownRemotePropertyError",
    "UnsupportedValueTypeError",
    "ImmutablePropertyViolationError",
    "StatusFieldResolutionError",
    "PollingTimeoutError",
    "ParentIDCountMismatchError",
    "ResourceConfigurationError",
]
