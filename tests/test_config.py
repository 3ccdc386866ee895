"""Tests for engine configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from apiresource.config import ApiKeyConfig, EngineConfig, load_config
from apiresource.errors import ConfigValidationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in (
        "APIRESOURCE_BASE_URL",
        "APIRESOURCE_DEFAULT_TIMEOUT",
        "APIRESOURCE_POLL_INTERVAL",
        "APIRESOURCE_VERBOSE",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


class TestEngineConfig:
    """Tests for EngineConfig defaults and validation."""

    def test_defaults(self) -> None:
        config = EngineConfig()

        assert config.default_timeout == 600
        assert config.poll_interval == 5
        assert config.poll_initial_delay == 1
        assert config.destroyed_status == "destroyed"
        assert config.max_error_body_length == 1000
        assert config.api_keys == {}

    def test_base_url_trailing_slash_is_removed(self) -> None:
        assert EngineConfig(base_url="https://api.example.com/").base_url == "https://api.example.com"

    def test_base_url_requires_http_scheme(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(base_url="ftp://api.example.com")

    def test_destroyed_status_must_not_be_empty(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(destroyed_status="  ")

    def test_default_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(default_timeout=0)

    def test_api_key_defaults_to_header(self) -> None:
        key = ApiKeyConfig(name="X-API-Key", value="secret")
        assert key.location == "header"


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "apiresource.yaml"
        path.write_text(
            "base_url: https://api.example.com\n"
            "default_timeout: 120\n"
            "headers:\n"
            "  X-Request-Source: cli\n"
            "api_keys:\n"
            "  apikey_auth:\n"
            "    name: X-API-Key\n"
            "    value: secret\n"
        )

        config = load_config(path)

        assert config.base_url == "https://api.example.com"
        assert config.default_timeout == 120
        assert config.headers == {"X-Request-Source": "cli"}
        assert config.api_keys["apikey_auth"].name == "X-API-Key"

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "missing.yaml")
        assert config.base_url == "http://localhost:8080"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "apiresource.yaml"
        path.write_text("base_url: https://file.example.com\npoll_interval: 10\n")
        monkeypatch.setenv("APIRESOURCE_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("APIRESOURCE_VERBOSE", "yes")

        config = load_config(path)

        assert config.base_url == "https://env.example.com"
        assert config.poll_interval == 10
        assert config.verbose is True

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "apiresource.yaml"
        path.write_text("base_url: [unterminated")
        with pytest.raises(ConfigValidationError, match="Invalid YAML"):
            load_config(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "apiresource.yaml"
        path.write_text("poll_interval: -1\n")
        with pytest.raises(ConfigValidationError, match="Invalid configuration"):
            load_config(path)

    def test_invalid_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APIRESOURCE_DEFAULT_TIMEOUT", "soon")
        with pytest.raises(ConfigValidationError, match="APIRESOURCE_DEFAULT_TIMEOUT"):
            load_config()
