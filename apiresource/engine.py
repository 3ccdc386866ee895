"""CRUD and import orchestration for one remote resource.

ResourceEngine ties the components together: it resolves request paths,
translates state into payloads and back, guards immutable properties, and
waits for asynchronous operations to complete. Every call runs to completion
on the caller's thread; the polling loop blocks.

Example:
    >>> from apiresource import DeclarativeState, EngineConfig, HttpApiClient, ResourceEngine
    >>> from apiresource.schema import load_descriptor
    >>>
    >>> engine = ResourceEngine(load_descriptor("cdn.yaml"), EngineConfig())
    >>> state = DeclarativeState({"label": "cdn-1", "ips": ["127.0.0.1"]})
    >>> with HttpApiClient(engine.config) as client:
    ...     engine.create(state, client)
    ...     print(state.id)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from apiresource.client import ApiClient, ApiResponse
from apiresource.config import EngineConfig
from apiresource.errors import (
    ImmutablePropertyViolationError,
    MissingIdentifierError,
    ResourceConfigurationError,
    UnexpectedStatusError,
    UnsupportedOperationError,
    UnsupportedValueTypeError,
)
from apiresource.immutable import ImmutableFieldGuard
from apiresource.paths import get_parent_ids_and_resource_path, parse_import_id
from apiresource.payload import PayloadBuilder, mask_sensitive
from apiresource.polling import CompletionPoller, extract_status
from apiresource.populator import StatePopulator
from apiresource.schema import (
    OperationDescriptor,
    OperationKind,
    ResourceDescriptor,
    ValueKind,
    classify_value,
)
from apiresource.state import DeclarativeState, StateAccessor

logger = logging.getLogger(__name__)

CREATE_EXPECTED_STATUSES = [200, 201, 202]
READ_EXPECTED_STATUSES = [200]
UPDATE_EXPECTED_STATUSES = [200, 202]
DELETE_EXPECTED_STATUSES = [200, 202, 204]


class ResourceEngine:
    """Drives the lifecycle of one resource against the remote API.

    Attributes:
        descriptor: Description of the resource.
        config: Engine configuration (timeouts, polling cadence, defaults).
        builder: Translates state into request payloads.
        populator: Translates response payloads into state.
        guard: Blocks updates that change immutable properties.
    """

    def __init__(
        self,
        descriptor: ResourceDescriptor | None,
        config: EngineConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.descriptor = descriptor
        self.config = config or EngineConfig()
        self.builder = PayloadBuilder()
        self.populator = StatePopulator()
        self.guard = ImmutableFieldGuard(self.populator)
        self._clock = clock
        self._sleep = sleep

    @property
    def resource_name(self) -> str:
        return self.descriptor.name if self.descriptor else "<unknown>"

    def create(self, state: StateAccessor, client: ApiClient) -> None:
        """Create the remote resource from ``state`` and populate it with the result."""
        descriptor = self._require_descriptor()
        operation = self._require_operation(OperationKind.CREATE)
        schema = descriptor.schema_definition

        _, resource_path = get_parent_ids_and_resource_path(state, descriptor)
        payload = self.builder.build(state, schema)
        logger.debug(f"POST {resource_path} payload: {mask_sensitive(payload, schema)}")

        response = client.post(resource_path, payload, operation)
        self._check_status(response, CREATE_EXPECTED_STATUSES, "POST", resource_path)

        body = response.json_object()
        resource_id = self._identifier_from_payload(body)
        state.set_id(resource_id)
        self.populator.apply(body, schema, state)
        logger.info(f"Resource '{self.resource_name}' ID: {resource_id}")

        final_payload = self._poll_if_configured(
            state, client, operation, response.status_code, OperationKind.CREATE
        )
        if final_payload is not None:
            self.populator.apply(final_payload, schema, state)

    def read(self, state: StateAccessor, client: ApiClient) -> None:
        """Refresh ``state`` from the remote resource."""
        descriptor = self._require_descriptor()
        payload = self._read_remote(state, client)
        self.populator.apply(payload, descriptor.schema_definition, state)

    def update(self, state: StateAccessor, client: ApiClient) -> None:
        """Push ``state`` to the remote resource.

        The remote resource is read first; if an immutable property differs,
        the state is rolled back to the remote values and no write is issued.
        """
        descriptor = self._require_descriptor()
        operation = self._require_operation(OperationKind.UPDATE)
        schema = descriptor.schema_definition

        parent_ids, _ = get_parent_ids_and_resource_path(state, descriptor)
        instance_path = descriptor.resolve_instance_path(parent_ids, self._require_id(state))
        payload = self.builder.build(state, schema)

        remote_payload = self._read_remote(state, client)
        try:
            self.guard.check(state, remote_payload, schema)
        except ImmutablePropertyViolationError:
            # keep the rejected values out of the host's state
            self.populator.apply(remote_payload, schema, state)
            raise

        logger.debug(f"PUT {instance_path} payload: {mask_sensitive(payload, schema)}")
        response = client.put(instance_path, payload, operation)
        self._check_status(response, UPDATE_EXPECTED_STATUSES, "PUT", instance_path)

        self.populator.apply(response.json_object(), schema, state)
        final_payload = self._poll_if_configured(
            state, client, operation, response.status_code, OperationKind.UPDATE
        )
        if final_payload is not None:
            self.populator.apply(final_payload, schema, state)

    def delete(self, state: StateAccessor, client: ApiClient) -> None:
        """Delete the remote resource. A resource that is already gone is not an error."""
        descriptor = self._require_descriptor()
        operation = self._require_operation(OperationKind.DELETE)

        parent_ids, _ = get_parent_ids_and_resource_path(state, descriptor)
        instance_path = descriptor.resolve_instance_path(parent_ids, self._require_id(state))

        response = client.delete(instance_path, operation)
        if response.status_code == 404:
            logger.info(f"Resource '{self.resource_name}' ({state.id}) already deleted")
            return
        self._check_status(response, DELETE_EXPECTED_STATUSES, "DELETE", instance_path)

        self._poll_if_configured(
            state, client, operation, response.status_code, OperationKind.DELETE
        )
        logger.info(f"Resource '{self.resource_name}' ({state.id}) deleted")

    def import_resource(self, import_id: str, client: ApiClient) -> DeclarativeState:
        """Import an existing resource from a ``{parent_id}/.../{id}`` identifier."""
        descriptor = self._require_descriptor()
        parsed = parse_import_id(import_id, descriptor)

        state = DeclarativeState()
        for parent_property, parent_id in zip(descriptor.parent_properties, parsed.parent_ids):
            prop = descriptor.schema_definition.get_property(parent_property)
            if prop is None:
                raise ResourceConfigurationError(
                    f"[resource='{self.resource_name}'] parent property '{parent_property}' "
                    "is not declared in the resource schema"
                )
            state.set(prop.canonical_name, parent_id)
        state.set_id(parsed.instance_id)

        logger.info(f"Importing resource '{self.resource_name}' with ID '{import_id}'")
        self.read(state, client)
        return state

    def _read_remote(self, state: StateAccessor, client: ApiClient) -> dict[str, Any]:
        descriptor = self._require_descriptor()
        operation = self._require_operation(OperationKind.READ)
        parent_ids, _ = get_parent_ids_and_resource_path(state, descriptor)
        instance_path = descriptor.resolve_instance_path(parent_ids, self._require_id(state))

        response = client.get(instance_path, operation)
        self._check_status(response, READ_EXPECTED_STATUSES, "GET", instance_path)
        return response.json_object()

    def _poll_if_configured(
        self,
        state: StateAccessor,
        client: ApiClient,
        operation: OperationDescriptor,
        status_code: int,
        kind: OperationKind,
    ) -> dict[str, Any] | None:
        response_descriptor = operation.polling_response(status_code)
        if response_descriptor is None:
            return None

        descriptor = self._require_descriptor()
        destroyed_status = self.config.destroyed_status
        pending_statuses = list(response_descriptor.pending_statuses)
        target_statuses = list(response_descriptor.target_statuses)
        if kind == OperationKind.DELETE and destroyed_status not in target_statuses:
            target_statuses.append(destroyed_status)
        logger.debug(f"target statuses ({target_statuses}); pending statuses ({pending_statuses})")

        def refresh() -> tuple[dict[str, Any] | None, str]:
            try:
                payload = self._read_remote(state, client)
            except UnexpectedStatusError as e:
                if kind == OperationKind.DELETE and e.is_not_found:
                    return None, destroyed_status
                raise
            status_path = descriptor.schema_definition.get_status_identifier()
            return payload, extract_status(payload, status_path)

        poller = CompletionPoller(
            resource_name=self.resource_name,
            refresh=refresh,
            pending_statuses=pending_statuses,
            target_statuses=target_statuses,
            timeout=operation.timeout or self.config.default_timeout,
            poll_interval=self.config.poll_interval,
            initial_delay=self.config.poll_initial_delay,
            clock=self._clock,
            sleep=self._sleep,
        )
        return poller.run()

    def _identifier_from_payload(self, payload: dict[str, Any]) -> str:
        descriptor = self._require_descriptor()
        identifier = descriptor.schema_definition.get_identifier_property()
        value = payload.get(identifier.name)
        if value is None:
            raise MissingIdentifierError(
                f"response object returned from the API is missing mandatory identifier "
                f"property '{identifier.name}'"
            )
        kind = classify_value(value)
        if kind == ValueKind.STRING:
            return value
        if kind == ValueKind.INT:
            return str(value)
        if kind == ValueKind.FLOAT:
            return str(int(value))
        raise UnsupportedValueTypeError(
            kind.value, message=f"{kind.value} not supported for identifier '{identifier.name}'"
        )

    def _check_status(
        self, response: ApiResponse, expected: list[int], method: str, path: str
    ) -> None:
        if response.status_code in expected:
            return
        body = response.text or ""
        limit = self.config.max_error_body_length
        if len(body) > limit:
            body = body[:limit] + "..."
        raise UnexpectedStatusError(
            self.resource_name,
            method=method,
            path=path,
            status_code=response.status_code,
            expected=expected,
            body=body,
        )

    def _require_descriptor(self) -> ResourceDescriptor:
        if self.descriptor is None:
            raise ResourceConfigurationError("resource engine created with no resource descriptor")
        return self.descriptor

    def _require_operation(self, kind: OperationKind) -> OperationDescriptor:
        operation = self._require_descriptor().operation(kind)
        if operation is None:
            raise UnsupportedOperationError(
                resource_name=self.resource_name, operation=kind.http_method
            )
        return operation

    def _require_id(self, state: StateAccessor) -> str:
        if not state.id:
            raise MissingIdentifierError(
                f"[resource='{self.resource_name}'] state does not hold the resource identifier"
            )
        return state.id
