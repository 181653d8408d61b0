"""
Core HTTP transport using aiohttp.

Sends one ApiRequest and returns its decoded ApiResponse, or raises the typed
ApiError for the failure. Knows nothing about credentials or refresh: those
live in core.auth and wrap this transport.
"""

import asyncio
import json
import logging
from typing import Any

import aiohttp

from core.errors.classifiers import classify_api_error
from core.errors.exceptions import ApiError, wrap_exception
from core.http.models import ApiRequest, ApiResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10


def create_session(
    timeout_total: float = DEFAULT_TIMEOUT_SECONDS,
    max_connections: int = 100,
    max_connections_per_host: int = 10,
    enable_ssl: bool = True,
    cookie_jar: aiohttp.abc.AbstractCookieJar | None = None,
) -> aiohttp.ClientSession:
    """
    Create aiohttp ClientSession for the backend API.

    The session's cookie jar carries the long-lived session cookie set by the
    backend at login, so the refresh call is authenticated without any header.

    Args:
        timeout_total: Total timeout per request in seconds (default: 10)
        max_connections: Total connection pool size (default: 100)
        max_connections_per_host: Per-host connection limit (default: 10)
        enable_ssl: Enable SSL verification (default: True)
        cookie_jar: Cookie jar to use; defaults to one that accepts IP hosts

    Returns:
        Configured aiohttp.ClientSession

    Note:
        Caller is responsible for session lifecycle management.
    """
    connector = aiohttp.TCPConnector(
        limit=max_connections,
        limit_per_host=max_connections_per_host,
        ssl=enable_ssl,
        ttl_dns_cache=300,
    )

    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout_total),
        cookie_jar=cookie_jar or aiohttp.CookieJar(unsafe=True),
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
    )


class HttpTransport:
    """
    Sends ApiRequests over a shared aiohttp session.

    Usage:
        transport = HttpTransport("http://localhost:8080")
        try:
            response = await transport.send(ApiRequest("GET", "/api/v1/locations"))
        finally:
            await transport.close()
    """

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_connections: int = 100,
        max_connections_per_host: int = 10,
        enable_ssl: bool = True,
    ):
        self.base_url = base_url.rstrip("/") if base_url else ""

        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"HttpTransport base_url must start with http:// or https://, got: {base_url!r}"
            )

        self.timeout_seconds = timeout_seconds
        self.max_connections = max_connections
        self.max_connections_per_host = max_connections_per_host
        self.enable_ssl = enable_ssl
        self._session = session
        self._owns_session = session is None
        self._closed = False

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise RuntimeError("HttpTransport is closed, cannot create new session")
        if self._session is None or self._session.closed:
            self._session = create_session(
                timeout_total=self.timeout_seconds,
                max_connections=self.max_connections,
                max_connections_per_host=self.max_connections_per_host,
                enable_ssl=self.enable_ssl,
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        self._closed = True
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    def url_for(self, request: ApiRequest) -> str:
        return f"{self.base_url}{request.path}"

    @staticmethod
    def _decode_body(text: str) -> Any:
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def _handle_error_response(
        self, response, request: ApiRequest, url: str, duration: float
    ) -> None:
        """Read error body, classify error, and raise."""
        try:
            response_body = await response.text()
        except Exception:
            response_body = "<unable to read response body>"

        error = classify_api_error(response.status, url, response_body)
        logger.warning(
            "API request failed",
            extra={
                "request_id": request.request_id,
                "api_endpoint": request.path,
                "api_method": request.method,
                "api_url": url,
                "http_status": response.status,
                "error_category": error.category.value,
                "has_auth_header": request.has_auth_header,
                "duration_ms": round(duration * 1000, 2),
            },
        )
        raise error

    async def send(self, request: ApiRequest) -> ApiResponse:
        """
        Send a request and decode its JSON body.

        Raises:
            ApiError: typed by status (AuthExpiredError for 401, ...)
            TransportError: no response received
        """
        session = await self._ensure_session()
        url = self.url_for(request)
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        logger.debug(
            "API request starting",
            extra={
                "request_id": request.request_id,
                "api_endpoint": request.path,
                "api_method": request.method,
                "has_auth_header": request.has_auth_header,
            },
        )

        try:
            async with session.request(
                request.method,
                url,
                params=request.params,
                json=request.json_body,
                headers=request.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                duration = loop.time() - start_time
                if response.status >= 400:
                    await self._handle_error_response(response, request, url, duration)

                body = self._decode_body(await response.text())

                logger.debug(
                    "API request succeeded",
                    extra={
                        "request_id": request.request_id,
                        "api_endpoint": request.path,
                        "api_method": request.method,
                        "http_status": response.status,
                        "duration_ms": round(duration * 1000, 2),
                    },
                )
                return ApiResponse(
                    status=response.status,
                    data=body,
                    headers=dict(response.headers),
                )

        except ApiError:
            raise
        except (asyncio.TimeoutError, aiohttp.ClientError, OSError) as e:
            error = wrap_exception(
                e, context={"api_endpoint": request.path, "api_method": request.method}
            )
            logger.warning(
                "API request got no response",
                extra={
                    "request_id": request.request_id,
                    "api_endpoint": request.path,
                    "api_method": request.method,
                    "error_type": error.context.get("error_type"),
                    "error_message": str(e)[:200],
                },
            )
            raise error from e


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "HttpTransport", "create_session"]
