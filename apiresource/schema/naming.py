"""Canonical property naming."""

from __future__ import annotations

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


def to_snake_case(name: str) -> str:
    """Convert a wire property name into its lower-snake canonical form.

    Example:
        >>> to_snake_case("stringProperty")
        'string_property'
        >>> to_snake_case("HTTPCode")
        'http_code'
        >>> to_snake_case("some-prop name")
        'some_prop_name'
    """
    converted = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    converted = _WORD_BOUNDARY.sub(r"\1_\2", converted)
    converted = _SEPARATORS.sub("_", converted)
    return converted.strip("_").lower()
