"""Engine configuration settings and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from apiresource.errors import ConfigValidationError


class ApiKeyConfig(BaseModel):
    """Value of an API key security scheme and where to send it."""

    location: Literal["header", "query"] = "header"
    name: str = Field(..., min_length=1)
    value: str


class EngineConfig(BaseSettings):
    """Configuration for the resource lifecycle engine and its HTTP client."""

    model_config = SettingsConfigDict(
        env_prefix="APIRESOURCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_timeout: float = Field(default=600.0, gt=0)
    poll_interval: float = Field(default=5.0, ge=0)
    poll_initial_delay: float = Field(default=1.0, ge=0)
    destroyed_status: str = "destroyed"
    max_error_body_length: int = Field(default=1000, ge=0)
    base_url: str = "http://localhost:8080"
    request_timeout: float = Field(default=30.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)
    api_keys: dict[str, ApiKeyConfig] = Field(default_factory=dict)
    verbose: bool = False

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("destroyed_status")
    @classmethod
    def validate_destroyed_status(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("destroyed_status must not be empty")
        return v


def load_config(config_path: str | Path | None = None) -> EngineConfig:
    """Load configuration from file and environment.

    Priority: env vars > config file > defaults

    Raises:
        ConfigValidationError: If the file can not be parsed or holds invalid values.
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            try:
                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigValidationError(f"Invalid YAML in {config_path}: {e}", cause=e) from e

    env_overrides = _get_env_overrides()
    config_data.update(env_overrides)

    try:
        return EngineConfig(**config_data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration: {e}", cause=e) from e


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "APIRESOURCE_BASE_URL": "base_url",
        "APIRESOURCE_DEFAULT_TIMEOUT": ("default_timeout", float),
        "APIRESOURCE_POLL_INTERVAL": ("poll_interval", float),
        "APIRESOURCE_VERBOSE": ("verbose", lambda x: x.lower() in ("true", "1", "yes")),
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                try:
                    overrides[key] = converter(value)
                except ValueError as e:
                    raise ConfigValidationError(f"Invalid value for {env_key}: {value}") from e
            else:
                overrides[config_key] = value

    return overrides
