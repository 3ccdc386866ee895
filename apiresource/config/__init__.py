"""Configuration management for the resource lifecycle engine."""

from apiresource.config.settings import ApiKeyConfig, EngineConfig, load_config

__all__ = [
    "ApiKeyConfig",
    "EngineConfig",
    "load_config",
]
