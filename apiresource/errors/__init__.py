"""Error types raised by the resource lifecycle engine."""

from apiresource.errors.base import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    ImmutablePropertyViolationError,
    InvalidSingletonListError,
    MissingIdentifierError,
    NilPropertyValueError,
    ParentIDCountMismatchError,
    PathResolutionError,
    PollingTimeoutError,
    ResourceConfigurationError,
    ResourceEngineError,
    StatusFieldResolutionError,
    UnexpectedStatusError,
    UnknownRemotePropertyError,
    UnsupportedOperationError,
    UnsupportedValueTypeError,
)

__all__ = [
    "ErrorCode",
    "ErrorContext",
    "ResourceEngineError",
    "UnsupportedOperationError",
    "UnexpectedStatusError",
    "MissingIdentifierError",
    "UnknownRemotePropertyError",
    "UnsupportedValueTypeError",
    "NilPropertyValueError",
    "InvalidSingletonListError",
    "ImmutablePropertyViolationError",
    "ParentIDCountMismatchError",
    "PathResolutionError",
    "StatusFieldResolutionError",
    "PollingTimeoutError",
    "ResourceConfigurationError",
    "ConfigValidationError",
]
