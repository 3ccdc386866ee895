"""Declarative state store handed to the engine by its host.

The engine only talks to state through the StateAccessor protocol, so any
host-side state layer can be plugged in. DeclarativeState is the in-memory
implementation used by the CLI and the tests.

Example:
    >>> state = DeclarativeState({"label": "cdn-1"})
    >>> state.set_id("42")
    >>> state.get("label")
    'cdn-1'
"""

from __future__ import annotations

import copy
from typing import Any, Protocol


class StateAccessor(Protocol):
    """Protocol for the host's declarative state.

    Values are keyed by canonical property name. The identifier lives in a
    dedicated slot and is never stored as a regular property.
    """

    @property
    def id(self) -> str:
        """Identifier of the resource instance, empty when unknown."""
        ...

    def set_id(self, resource_id: str) -> None:
        """Set the identifier of the resource instance."""
        ...

    def get(self, name: str, default: Any = None) -> Any:
        """Get the value stored under a canonical property name."""
        ...

    def set(self, name: str, value: Any) -> None:
        """Store a value under a canonical property name."""
        ...

    def __contains__(self, name: object) -> bool:
        """Whether a value is stored under the canonical property name."""
        ...


class DeclarativeState:
    """In-memory key/value state keyed by canonical property name."""

    def __init__(self, values: dict[str, Any] | None = None, resource_id: str = "") -> None:
        self._values: dict[str, Any] = copy.deepcopy(values) if values else {}
        self._id = resource_id

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: str) -> None:
        self._id = resource_id

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the stored values."""
        return copy.deepcopy(self._values)

    def __repr__(self) -> str:
        return f"DeclarativeState(id={self._id!r}, values={self._values!r})"
