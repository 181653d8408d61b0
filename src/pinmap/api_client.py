"""Async client for the bookmarking backend REST API.

Every call goes through the authenticated pipeline, so an expired access
credential is refreshed once, shared across concurrent calls, and the
original call replayed transparently.
"""

import logging
from typing import Any, Dict, Optional

import aiohttp
from pydantic import ValidationError

from config.config import ClientConfig, get_config
from core.auth.coordinator import RefreshCoordinator
from core.auth.credentials import CredentialStore
from core.auth.pipeline import AuthenticatedPipeline
from core.auth.terminator import SessionTerminator
from core.errors.exceptions import RefreshFailedError
from core.http.models import ApiRequest, ApiResponse
from core.http.transport import HttpTransport
from core.types import CredentialProvider
from pinmap.endpoints import LOGOUT_PATH, TOKEN_REFRESH_PATH
from pinmap.models import ApiEnvelope, RefreshTokenResponse

logger = logging.getLogger(__name__)


def parse_refresh_response(response: ApiResponse) -> str:
    """Extract the new access credential from a refresh response.

    Accepts the bare `{accessToken}` body as well as the same body wrapped in
    the standard envelope's `data` field.
    """
    body = response.data
    if isinstance(body, dict) and "accessToken" not in body and isinstance(body.get("data"), dict):
        body = body["data"]

    try:
        return RefreshTokenResponse.model_validate(body).access_token
    except ValidationError as e:
        raise RefreshFailedError(
            "Refresh response did not contain an access credential",
            reason="invalid_response",
            status_code=response.status,
            cause=e,
        ) from e


class PinmapApiClient:
    """
    Async client for the backend with automatic credential refresh.

    Usage:
        async with PinmapApiClient(config) as client:
            client.credentials.set(token)
            envelope = await client.get("/api/v1/locations")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        credentials: Optional[CredentialProvider] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or get_config()
        self.credentials = credentials if credentials is not None else CredentialStore()

        self.transport = HttpTransport(
            self.config.api_base_url,
            session=session,
            timeout_seconds=self.config.timeout_seconds,
            max_connections=self.config.max_connections,
            max_connections_per_host=self.config.max_connections_per_host,
            enable_ssl=self.config.verify_ssl,
        )
        self.pipeline = AuthenticatedPipeline(
            self.transport,
            self.credentials,
            refresh_path=TOKEN_REFRESH_PATH,
            passthrough_paths=(LOGOUT_PATH,),
            token_parser=parse_refresh_response,
            refresh_timeout_seconds=self.config.refresh_timeout_seconds,
        )

        logger.info(
            "PinmapApiClient initialized",
            extra={
                "api_url": self.config.api_base_url,
                "timeout_seconds": self.config.timeout_seconds,
            },
        )

    @property
    def terminator(self) -> SessionTerminator:
        return self.pipeline.terminator

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self.pipeline.coordinator

    async def __aenter__(self) -> "PinmapApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.pipeline.close()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiResponse:
        request = ApiRequest(
            method,
            path,
            params=params,
            json_body=data,
            headers=dict(headers or {}),
        )
        return await self.pipeline.send(request)

    async def _envelope(self, method: str, path: str, **kwargs: Any) -> ApiEnvelope:
        response = await self.request(method, path, **kwargs)
        return ApiEnvelope.from_body(response.data)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiEnvelope:
        return await self._envelope("GET", path, params=params)

    async def post(self, path: str, data: Any = None) -> ApiEnvelope:
        return await self._envelope("POST", path, data=data)

    async def put(self, path: str, data: Any = None) -> ApiEnvelope:
        return await self._envelope("PUT", path, data=data)

    async def delete(self, path: str) -> ApiEnvelope:
        return await self._envelope("DELETE", path)


__all__ = ["PinmapApiClient", "parse_refresh_response"]
