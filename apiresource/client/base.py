"""ApiClient capability consumed by the resource lifecycle engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from apiresource.schema import OperationDescriptor


@dataclass
class ApiResponse:
    """Status code and decoded body of one API call.

    Attributes:
        status_code: HTTP status code.
        body: Decoded JSON body, None when the response had no JSON body.
        text: Raw response text, used in error messages.
    """

    status_code: int
    body: Any = None
    text: str = ""

    def json_object(self) -> dict[str, Any]:
        """Return the body as a mapping, empty when it is not one."""
        if isinstance(self.body, dict):
            return self.body
        return {}


class ApiClient(Protocol):
    """Protocol for the transport the engine issues its calls through.

    Paths are already resolved, including parent IDs and the instance ID. The
    operation descriptor lets implementations inject the headers and API keys
    the operation requires. Transport failures are raised and are never
    interpreted by the engine.
    """

    def post(
        self, path: str, payload: dict[str, Any], operation: OperationDescriptor | None = None
    ) -> ApiResponse:
        ...

    def get(self, path: str, operation: OperationDescriptor | None = None) -> ApiResponse:
        ...

    def put(
        self, path: str, payload: dict[str, Any], operation: OperationDescriptor | None = None
    ) -> ApiResponse:
        ...

    def delete(self, path: str, operation: OperationDescriptor | None = None) -> ApiResponse:
        ...
