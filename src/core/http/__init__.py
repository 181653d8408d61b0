"""
Async HTTP transport for the backend REST API.

Provides the request/response models shared by the authenticated pipeline
and the aiohttp-based transport that sends them.
"""

from core.http.models import ApiRequest, ApiResponse, Transport
from core.http.transport import DEFAULT_TIMEOUT_SECONDS, HttpTransport, create_session

__all__ = [
    "ApiRequest",
    "ApiResponse",
    "Transport",
    "HttpTransport",
    "create_session",
    "DEFAULT_TIMEOUT_SECONDS",
]
