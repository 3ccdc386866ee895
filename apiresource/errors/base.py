"""Exception hierarchy for the resource lifecycle engine.

Every engine error inherits from ResourceEngineError and carries:
- error_code: An ErrorCode enum for programmatic handling
- context: ErrorContext with resource/operation/request/response details
- suggestions: Actionable steps to resolve the issue

Transport errors raised by an ApiClient are never wrapped in these types;
they reach the caller unchanged.

Example:
    try:
        engine.update(state, client)
    except ImmutablePropertyViolationError as e:
        print(f"Error: {e}")
        print(f"Suggestions: {e.suggestions}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes.

    Error codes are organized by category:
    - E1xx: Remote request errors
    - E2xx: Data translation errors
    - E3xx: Lifecycle guard errors
    - E4xx: Completion polling errors
    - E5xx: Configuration errors
    - E9xx: Unknown/internal errors
    """

    # Remote request errors (E1xx)
    UNEXPECTED_STATUS = "E101"
    UNSUPPORTED_OPERATION = "E102"
    MISSING_IDENTIFIER = "E103"

    # Data translation errors (E2xx)
    UNKNOWN_REMOTE_PROPERTY = "E201"
    UNSUPPORTED_VALUE_TYPE = "E202"
    NIL_PROPERTY_VALUE = "E203"
    INVALID_SINGLETON_LIST = "E204"

    # Lifecycle guard errors (E3xx)
    IMMUTABLE_PROPERTY = "E301"
    PARENT_ID_COUNT_MISMATCH = "E302"
    PATH_RESOLUTION = "E303"

    # Completion polling errors (E4xx)
    STATUS_FIELD_RESOLUTION = "E401"
    POLLING_TIMEOUT = "E402"

    # Configuration errors (E5xx)
    RESOURCE_CONFIGURATION = "E501"
    INVALID_CONFIG = "E502"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "request"
        elif code_num < 300:
            return "translation"
        elif code_num < 400:
            return "guard"
        elif code_num < 500:
            return "polling"
        elif code_num < 600:
            return "configuration"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context captured when an engine error occurs.

    Attributes:
        resource_name: Name of the resource being operated on
        operation: Lifecycle operation (create, read, update, delete, import)
        path: Resolved request path
        request: Request details (method, payload)
        response: Response details (status, body)
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    resource_name: str | None = None
    operation: str | None = None
    path: str | None = None
    request: dict[str, Any] | None = None
    response: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "resource_name": self.resource_name,
            "operation": self.operation,
            "path": self.path,
            "request": self.request,
            "response": self.response,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.resource_name:
            parts.append(f"resource={self.resource_name}")
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.path:
            parts.append(f"path={self.path}")
        return " > ".join(parts) if parts else "unknown location"


class ResourceEngineError(Exception):
    """Base exception for all resource engine errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        recoverable: Whether retrying the same call could succeed
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []
    recoverable: bool = False

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        recoverable: bool | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        if recoverable is not None:
            self.recoverable = recoverable
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        return self.message

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.context.response:
            status = self.context.response.get("status", "?")
            lines.append(f"Response: HTTP {status}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class UnsupportedOperationError(ResourceEngineError):
    """The resource descriptor does not define the requested operation."""

    error_code = ErrorCode.UNSUPPORTED_OPERATION
    default_message = "Operation not supported by resource"
    default_suggestions = [
        "Check the API document exposes this operation for the resource path",
        "Mark the properties that would need this operation as force-new instead",
    ]

    def __init__(
        self,
        message: str | None = None,
        resource_name: str | None = None,
        operation: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.resource_name = resource_name
        self.operation = operation
        if message is None and resource_name and operation:
            message = f"[resource='{resource_name}'] resource does not support {operation} operation"
        kwargs.setdefault(
            "context", ErrorContext(resource_name=resource_name, operation=operation)
        )
        super().__init__(message=message, **kwargs)


class UnexpectedStatusError(ResourceEngineError):
    """The remote API answered with a status code outside the expected set."""

    error_code = ErrorCode.UNEXPECTED_STATUS
    default_message = "Unexpected HTTP response status code"
    unauthorized_annotation = "Unauthorized: API access is denied due to invalid credentials"

    def __init__(
        self,
        resource_name: str,
        method: str,
        path: str,
        status_code: int,
        expected: list[int],
        body: str = "",
        **kwargs: Any,
    ) -> None:
        self.resource_name = resource_name
        self.method = method
        self.path = path
        self.status_code = status_code
        self.expected = list(expected)
        self.body = body

        if status_code == 401:
            detail = f"HTTP Response Status Code {status_code} - {self.unauthorized_annotation}"
        else:
            detail = (
                f"HTTP Response Status Code {status_code} not matching expected one "
                f"{self.expected}"
            )
        message = f"[resource='{resource_name}'] {method} {path} failed: {detail}"
        if body:
            message = f"{message}. Response Body = {body}"

        kwargs.setdefault("suggestions", self._suggestions_for_status(status_code))
        kwargs.setdefault(
            "context",
            ErrorContext(
                resource_name=resource_name,
                path=path,
                request={"method": method},
                response={"status": status_code, "body": body},
            ),
        )
        super().__init__(message=message, **kwargs)

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def _suggestions_for_status(self, status_code: int) -> list[str]:
        """Generate suggestions based on HTTP status code."""
        if status_code == 401:
            return [
                "Verify the API key or token configured for this operation is valid",
                "Check the security scheme names in the configuration match the API document",
            ]
        elif status_code == 404:
            return [
                "Check the resource still exists on the remote side",
                "Verify the parent IDs used to resolve the path are correct",
            ]
        elif 500 <= status_code < 600:
            return [
                "Check the remote service logs for error details",
                "This is a server-side error, retry once the service is healthy",
            ]
        return [
            f"Received HTTP {status_code} response",
            "Check the response body for error details",
        ]

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        result["expected"] = self.expected
        return result


class MissingIdentifierError(ResourceEngineError):
    """A response body did not contain the resource identifier."""

    error_code = ErrorCode.MISSING_IDENTIFIER
    default_message = "Response object returned from the API is missing the identifier property"
    default_suggestions = [
        "Make sure the API returns the created object including its identifier",
        "Flag the identifying property as identifier when it is not named 'id'",
    ]


class UnknownRemotePropertyError(ResourceEngineError):
    """The remote payload contains a property the schema does not declare."""

    error_code = ErrorCode.UNKNOWN_REMOTE_PROPERTY
    default_suggestions = [
        "The API returned a property missing from the resource schema definition",
        "Update the API document so the schema declares every returned property",
    ]

    def __init__(self, property_name: str, message: str | None = None, **kwargs: Any) -> None:
        self.property_name = property_name
        if message is None:
            message = (
                "failed to update state with remote data. This usually happens when the API "
                "returns properties that are not specified in the resource's schema definition "
                f"- property '{property_name}' not found"
            )
        super().__init__(message=message, **kwargs)


class UnsupportedValueTypeError(ResourceEngineError):
    """A value of a kind the engine cannot translate was encountered."""

    error_code = ErrorCode.UNSUPPORTED_VALUE_TYPE

    def __init__(self, kind: str, message: str | None = None, **kwargs: Any) -> None:
        self.kind = kind
        super().__init__(message=message or f"{kind} not supported", **kwargs)


class NilPropertyValueError(ResourceEngineError):
    """A required property carries no value in the declarative state."""

    error_code = ErrorCode.NIL_PROPERTY_VALUE

    def __init__(self, property_name: str, **kwargs: Any) -> None:
        self.property_name = property_name
        super().__init__(message=f"property '{property_name}' has a nil state value", **kwargs)


class InvalidSingletonListError(ResourceEngineError):
    """A nested object was not stored as a single-element list."""

    error_code = ErrorCode.INVALID_SINGLETON_LIST

    def __init__(self, property_name: str, size: int, **kwargs: Any) -> None:
        self.property_name = property_name
        self.size = size
        message = (
            f"object property '{property_name}' must be stored as a list holding exactly "
            f"one element, found {size}"
        )
        super().__init__(message=message, **kwargs)


class ImmutablePropertyViolationError(ResourceEngineError):
    """The local value of an immutable property differs from the remote one."""

    error_code = ErrorCode.IMMUTABLE_PROPERTY
    default_message = "Immutable property can not be updated"
    default_suggestions = [
        "Revert the change to the immutable property",
        "Recreate the resource if the property really needs a different value",
    ]

    def __init__(
        self,
        message: str,
        property_name: str,
        local_value: Any = None,
        remote_value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.property_name = property_name
        self.local_value = local_value
        self.remote_value = remote_value
        super().__init__(message=message, **kwargs)


class ParentIDCountMismatchError(ResourceEngineError):
    """The import identifier does not carry one ID per hierarchy level."""

    error_code = ErrorCode.PARENT_ID_COUNT_MISMATCH

    def __init__(self, import_id: str, expected: int, received: int, **kwargs: Any) -> None:
        self.import_id = import_id
        self.expected = expected
        self.received = received
        message = (
            f"the import ID provided '{import_id}' does not match the expected number of IDs: "
            f"expected {expected}, received {received}. The format should be "
            "'{parent_id}/.../{id}'"
        )
        super().__init__(message=message, **kwargs)


class PathResolutionError(ResourceEngineError):
    """The path template could not be resolved with the given parent IDs."""

    error_code = ErrorCode.PATH_RESOLUTION


class StatusFieldResolutionError(ResourceEngineError):
    """The status value could not be located in a schema or payload."""

    error_code = ErrorCode.STATUS_FIELD_RESOLUTION
    default_suggestions = [
        "Declare a read-only property named 'status' or flag one as status identifier",
        "Check the API returns the status property while the operation is in progress",
    ]


class PollingTimeoutError(ResourceEngineError):
    """The resource did not reach a target status before the timeout expired."""

    error_code = ErrorCode.POLLING_TIMEOUT
    recoverable = True

    def __init__(
        self,
        resource_name: str,
        timeout: float,
        pending_statuses: list[str],
        target_statuses: list[str],
        last_status: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.resource_name = resource_name
        self.timeout = timeout
        self.pending_statuses = list(pending_statuses)
        self.target_statuses = list(target_statuses)
        self.last_status = last_status
        message = (
            f"[resource='{resource_name}'] timeout after {timeout:.1f}s waiting for resource "
            f"to reach a completion status {self.target_statuses} "
            f"[valid pending statuses {self.pending_statuses}]"
        )
        if last_status is not None:
            message += f" (last status: {last_status})"
        super().__init__(message=message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["pending_statuses"] = self.pending_statuses
        result["target_statuses"] = self.target_statuses
        result["last_status"] = self.last_status
        return result


class ResourceConfigurationError(ResourceEngineError):
    """The resource descriptor is inconsistent or incomplete."""

    error_code = ErrorCode.RESOURCE_CONFIGURATION
    default_message = "Invalid resource configuration"


class ConfigValidationError(ResourceEngineError):
    """Engine configuration could not be loaded or validated."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check the configuration file syntax with a YAML linter",
        "Check APIRESOURCE_* environment variables hold valid values",
    ]
