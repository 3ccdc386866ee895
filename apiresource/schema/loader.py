"""Loading of already-analysed resource descriptors from YAML or JSON files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from apiresource.errors import ResourceConfigurationError
from apiresource.schema.models import ResourceDescriptor

logger = logging.getLogger(__name__)


def descriptor_from_dict(data: dict[str, Any]) -> ResourceDescriptor:
    """Build a ResourceDescriptor from its serialized form.

    Raises:
        ResourceConfigurationError: If the data does not describe a valid resource.
    """
    try:
        return ResourceDescriptor.model_validate(data)
    except ValidationError as e:
        raise ResourceConfigurationError(f"Invalid resource descriptor: {e}", cause=e) from e


def load_descriptor(path: str | Path) -> ResourceDescriptor:
    """Load a ResourceDescriptor from a YAML (or JSON) file.

    Raises:
        ResourceConfigurationError: If the file is missing, unparsable or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ResourceConfigurationError(f"Descriptor file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ResourceConfigurationError(f"Invalid YAML in {path}: {e}", cause=e) from e

    if not isinstance(data, dict):
        raise ResourceConfigurationError(f"Descriptor file {path} must contain a mapping")

    descriptor = descriptor_from_dict(data)
    logger.debug(f"Loaded descriptor for resource '{descriptor.name}' from {path}")
    return descriptor
