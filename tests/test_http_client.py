"""Tests for the httpx-backed ApiClient."""

from __future__ import annotations

import json

import httpx
import pytest

from apiresource.client import HttpApiClient
from apiresource.config import ApiKeyConfig, EngineConfig
from apiresource.schema import OperationDescriptor


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handles."""

    def __init__(self, response: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return response

        super().__init__(handler)


@pytest.fixture
def http_config() -> EngineConfig:
    return EngineConfig(
        base_url="https://api.example.com/",
        headers={"X-Request-Source": "tests"},
        api_keys={
            "apikey_auth": ApiKeyConfig(location="header", name="X-API-Key", value="secret"),
            "query_auth": ApiKeyConfig(location="query", name="token", value="abc"),
        },
    )


class TestHttpApiClient:
    """Tests for HttpApiClient."""

    def test_post_sends_json_and_decodes_response(self, http_config: EngineConfig) -> None:
        transport = RecordingTransport(httpx.Response(201, json={"id": "42"}))

        with HttpApiClient(http_config, transport=transport) as client:
            response = client.post("/v1/cdns", {"label": "cdn-1"})

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.example.com/v1/cdns"
        assert json.loads(request.content) == {"label": "cdn-1"}
        assert response.status_code == 201
        assert response.body == {"id": "42"}
        assert response.json_object() == {"id": "42"}

    def test_non_json_response_keeps_text(self, http_config: EngineConfig) -> None:
        transport = RecordingTransport(httpx.Response(500, text="internal error"))

        with HttpApiClient(http_config, transport=transport) as client:
            response = client.get("/v1/cdns/42")

        assert response.status_code == 500
        assert response.body is None
        assert response.text == "internal error"
        assert response.json_object() == {}

    def test_empty_response(self, http_config: EngineConfig) -> None:
        transport = RecordingTransport(httpx.Response(204))

        with HttpApiClient(http_config, transport=transport) as client:
            response = client.delete("/v1/cdns/42")

        assert transport.requests[0].method == "DELETE"
        assert response.status_code == 204
        assert response.body is None

    def test_security_schemes_are_injected(self, http_config: EngineConfig) -> None:
        transport = RecordingTransport(httpx.Response(200, json={}))
        operation = OperationDescriptor(
            security_schemes=("apikey_auth", "query_auth", "unconfigured"),
            header_parameters=("X-Request-Source", "X-Missing"),
        )

        with HttpApiClient(http_config, transport=transport) as client:
            client.put("/v1/cdns/42", {"label": "x"}, operation)

        request = transport.requests[0]
        assert request.headers["X-API-Key"] == "secret"
        assert request.headers["X-Request-Source"] == "tests"
        assert "X-Missing" not in request.headers
        assert request.url.params["token"] == "abc"

    def test_no_credentials_without_operation(self, http_config: EngineConfig) -> None:
        transport = RecordingTransport(httpx.Response(200, json={}))

        with HttpApiClient(http_config, transport=transport) as client:
            client.get("/v1/cdns/42")

        request = transport.requests[0]
        assert "X-API-Key" not in request.headers
        assert "token" not in request.url.params

    def test_transport_error_propagates(self, http_config: EngineConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with HttpApiClient(http_config, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(httpx.ConnectError):
                client.get("/v1/cdns/42")
