"""API clients the engine issues its calls through."""

from apiresource.client.base import ApiClient, ApiResponse
from apiresource.client.http import HttpApiClient

__all__ = [
    "ApiClient",
    "ApiResponse",
    "HttpApiClient",
]
