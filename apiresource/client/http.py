"""httpx-backed implementation of the ApiClient capability."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from apiresource.client.base import ApiResponse
from apiresource.config import EngineConfig
from apiresource.schema import OperationDescriptor

logger = logging.getLogger(__name__)


class HttpApiClient:
    """Synchronous JSON client for the remote API.

    Each call adds the headers and API keys the operation asks for, taking
    their values from the configuration. No retries are performed.

    Example:
        >>> config = EngineConfig(base_url="https://api.example.com")
        >>> with HttpApiClient(config) as client:
        ...     response = client.get("/v1/cdns/42")
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.config.request_timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    def post(
        self, path: str, payload: dict[str, Any], operation: OperationDescriptor | None = None
    ) -> ApiResponse:
        return self.request("POST", path, payload, operation)

    def get(self, path: str, operation: OperationDescriptor | None = None) -> ApiResponse:
        return self.request("GET", path, None, operation)

    def put(
        self, path: str, payload: dict[str, Any], operation: OperationDescriptor | None = None
    ) -> ApiResponse:
        return self.request("PUT", path, payload, operation)

    def delete(self, path: str, operation: OperationDescriptor | None = None) -> ApiResponse:
        return self.request("DELETE", path, None, operation)

    def request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None,
        operation: OperationDescriptor | None,
    ) -> ApiResponse:
        """Send one request and decode the response.

        Raises:
            httpx.HTTPError: On transport failures.
        """
        headers, params = self._prepare_authentication(operation)
        start = time.perf_counter()
        resp = self._client.request(method, path, json=payload, headers=headers, params=params)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"{method} {path} -> {resp.status_code} ({duration_ms:.0f}ms)")

        body: Any = None
        if resp.content and resp.headers.get("content-type", "").startswith("application/json"):
            try:
                body = resp.json()
            except ValueError:
                logger.warning(f"{method} {path} returned an invalid JSON body")
        return ApiResponse(status_code=resp.status_code, body=body, text=resp.text)

    def _prepare_authentication(
        self, operation: OperationDescriptor | None
    ) -> tuple[dict[str, str], dict[str, str]]:
        """Collect the headers and query parameters an operation requires."""
        headers: dict[str, str] = {}
        params: dict[str, str] = {}
        if operation is None:
            return headers, params

        for scheme_name in operation.security_schemes:
            api_key = self.config.api_keys.get(scheme_name)
            if api_key is None:
                logger.warning(f"No API key configured for security scheme '{scheme_name}'")
                continue
            if api_key.location == "header":
                headers[api_key.name] = api_key.value
            else:
                params[api_key.name] = api_key.value

        for header_name in operation.header_parameters:
            value = self.config.headers.get(header_name)
            if value is not None:
                headers[header_name] = value
        return headers, params

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpApiClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
