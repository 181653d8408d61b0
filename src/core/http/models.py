"""
Data models for requests flowing through the authenticated pipeline.

Defines the request/response pair exchanged between the interceptor,
the transport and the retry machinery:
- ApiRequest: a single logical call, replayable as-is
- ApiResponse: decoded result of a successful call
- Transport: anything that can send an ApiRequest
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol


@dataclass
class ApiRequest:
    """
    A single logical API call.

    The same instance is reused when the call is replayed after a credential
    refresh, so the retry marker travels with the call.

    Attributes:
        method: HTTP method (GET, POST, PUT, DELETE, ...)
        path: Path relative to the configured base URL (e.g. /api/v1/locations)
        params: Optional query parameters
        json_body: Optional JSON-serializable request body
        headers: Per-call headers; Authorization is managed by the interceptor
        retried: Retry marker, set the first time this call enters a refresh cycle
        request_id: Correlation id for logs
    """

    method: str
    path: str
    params: Optional[Dict[str, Any]] = None
    json_body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    retried: bool = False
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not self.path.startswith("/"):
            self.path = f"/{self.path}"

    def mark_retried(self) -> None:
        """Set the retry marker. A marked call is never refreshed for again."""
        self.retried = True

    @property
    def has_auth_header(self) -> bool:
        return "Authorization" in self.headers


@dataclass
class ApiResponse:
    """
    Decoded response of a successful call.

    Attributes:
        status: HTTP status code (2xx)
        data: Decoded JSON body, None for empty bodies
        headers: Response headers
    """

    status: int
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)



class Transport(Protocol):
    """
    Sends one request and returns its decoded response.

    Implementations raise ApiError (or a subclass) for non-2xx responses and
    transport failures. HttpTransport is the production implementation.
    """

    async def send(self, request: ApiRequest) -> ApiResponse:
        ...


__all__ = ["ApiRequest", "ApiResponse", "Transport"]
