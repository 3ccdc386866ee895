"""Pytest fixtures for apiresource tests."""

from __future__ import annotations

import json
from typing import Any

import pytest

from apiresource.client import ApiResponse
from apiresource.config import EngineConfig
from apiresource.engine import ResourceEngine
from apiresource.schema import (
    OperationDescriptor,
    PropertyType,
    ResourceDescriptor,
    ResponseDescriptor,
    SchemaDefinition,
    SchemaDefinitionProperty,
)


def json_response(status_code: int, body: Any = None) -> ApiResponse:
    """Build an ApiResponse the way HttpApiClient decodes one."""
    text = json.dumps(body) if body is not None else ""
    return ApiResponse(status_code=status_code, body=body, text=text)


class FakeApiClient:
    """Scripted ApiClient recording every call it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Any]] = []
        self._responses: dict[str, list[ApiResponse | Exception]] = {
            "POST": [],
            "GET": [],
            "PUT": [],
            "DELETE": [],
        }

    def queue(self, method: str, *responses: ApiResponse | Exception) -> FakeApiClient:
        self._responses[method].extend(responses)
        return self

    def _next(self, method: str, path: str, payload: Any = None) -> ApiResponse:
        self.calls.append((method, path, payload))
        queued = self._responses[method]
        if not queued:
            raise AssertionError(f"unexpected {method} {path}")
        response = queued.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, path: str, payload: dict[str, Any], operation: Any = None) -> ApiResponse:
        return self._next("POST", path, payload)

    def get(self, path: str, operation: Any = None) -> ApiResponse:
        return self._next("GET", path)

    def put(self, path: str, payload: dict[str, Any], operation: Any = None) -> ApiResponse:
        return self._next("PUT", path, payload)

    def delete(self, path: str, operation: Any = None) -> ApiResponse:
        return self._next("DELETE", path)

    def methods(self) -> list[str]:
        return [method for method, _, _ in self.calls]


def string_prop(name: str, **flags: Any) -> SchemaDefinitionProperty:
    return SchemaDefinitionProperty(name=name, type=PropertyType.STRING, **flags)


@pytest.fixture
def fake_client() -> FakeApiClient:
    return FakeApiClient()


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(poll_interval=0, poll_initial_delay=0, default_timeout=5)


@pytest.fixture
def object_property() -> SchemaDefinitionProperty:
    return SchemaDefinitionProperty(
        name="objectProperty",
        type=PropertyType.OBJECT,
        schema_definition=SchemaDefinition(
            properties=[
                string_prop("message"),
                SchemaDefinitionProperty(name="detailedMessage", type=PropertyType.STRING),
                SchemaDefinitionProperty(name="exampleInt", type=PropertyType.INT),
                SchemaDefinitionProperty(name="exampleNumber", type=PropertyType.NUMBER),
                SchemaDefinitionProperty(name="exampleBoolean", type=PropertyType.BOOL),
            ]
        ),
    )


@pytest.fixture
def nested_object_property() -> SchemaDefinitionProperty:
    return SchemaDefinitionProperty(
        name="origin",
        type=PropertyType.OBJECT,
        schema_definition=SchemaDefinition(
            properties=[
                string_prop("kind"),
                SchemaDefinitionProperty(
                    name="endpoint",
                    type=PropertyType.OBJECT,
                    schema_definition=SchemaDefinition(
                        properties=[
                            string_prop("host"),
                            SchemaDefinitionProperty(name="port", type=PropertyType.INT),
                        ]
                    ),
                ),
            ]
        ),
    )


@pytest.fixture
def list_of_objects_property() -> SchemaDefinitionProperty:
    return SchemaDefinitionProperty(
        name="rules",
        type=PropertyType.LIST,
        item_type=PropertyType.OBJECT,
        schema_definition=SchemaDefinition(
            properties=[
                string_prop("name"),
                SchemaDefinitionProperty(name="priority", type=PropertyType.INT),
                string_prop("etag", computed=True),
            ]
        ),
    )


@pytest.fixture
def cdn_schema(
    object_property: SchemaDefinitionProperty,
    nested_object_property: SchemaDefinitionProperty,
    list_of_objects_property: SchemaDefinitionProperty,
) -> SchemaDefinition:
    return SchemaDefinition(
        properties=[
            string_prop("id", computed=True),
            string_prop("label", required=True),
            SchemaDefinitionProperty(name="ips", type=PropertyType.LIST),
            SchemaDefinitionProperty(name="port", type=PropertyType.INT),
            SchemaDefinitionProperty(name="ratio", type=PropertyType.NUMBER),
            SchemaDefinitionProperty(name="enabled", type=PropertyType.BOOL),
            string_prop("region", immutable=True),
            string_prop("password", sensitive=True),
            string_prop("status", computed=True),
            object_property,
            nested_object_property,
            list_of_objects_property,
        ]
    )


@pytest.fixture
def cdn_descriptor(cdn_schema: SchemaDefinition) -> ResourceDescriptor:
    return ResourceDescriptor(
        name="cdn",
        path="/v1/cdns",
        schema_definition=cdn_schema,
        create=OperationDescriptor(),
        read=OperationDescriptor(),
        update=OperationDescriptor(),
        delete=OperationDescriptor(),
    )


@pytest.fixture
def polling_descriptor(cdn_schema: SchemaDefinition) -> ResourceDescriptor:
    accepted = {
        202: ResponseDescriptor(
            polling_enabled=True,
            pending_statuses=("pending",),
            target_statuses=("deployed",),
        )
    }
    return ResourceDescriptor(
        name="cdn",
        path="/v1/cdns",
        schema_definition=cdn_schema,
        create=OperationDescriptor(responses=accepted),
        read=OperationDescriptor(),
        update=OperationDescriptor(responses=accepted),
        delete=OperationDescriptor(
            responses={
                202: ResponseDescriptor(
                    polling_enabled=True, pending_statuses=("delete_in_progress",)
                )
            }
        ),
    )


@pytest.fixture
def firewall_descriptor() -> ResourceDescriptor:
    return ResourceDescriptor(
        name="cdns_v1_firewall",
        path="/v1/cdns/{id}/firewall",
        schema_definition=SchemaDefinition(
            properties=[
                string_prop("id", computed=True),
                string_prop("cdns_v1_id", required=True, is_parent_property=True),
                string_prop("name", required=True),
            ]
        ),
        create=OperationDescriptor(),
        read=OperationDescriptor(),
        update=OperationDescriptor(),
        delete=OperationDescriptor(),
        parent_properties=("cdns_v1_id",),
    )


@pytest.fixture
def engine(cdn_descriptor: ResourceDescriptor, config: EngineConfig) -> ResourceEngine:
    return ResourceEngine(cdn_descriptor, config, sleep=lambda _: None)
