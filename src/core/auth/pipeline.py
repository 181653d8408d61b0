"""
Authenticated request pipeline.

Wires the credential store, interceptor, failure classifier, refresh
coordinator, retry dispatcher and session terminator around one transport:

    send(request)
      -> interceptor.apply      attach Bearer credential
      -> transport.send         2xx: return response
      -> classifier.classify    on ApiError
           PROPAGATE -> raise the original error
           TERMINAL  -> terminate session, raise RefreshFailedError
           REFRESH   -> coordinator.handle_auth_failure, dispatcher.replay
"""

import logging
from typing import Any, Callable, Iterable, Optional

from core.auth.coordinator import (
    DEFAULT_REFRESH_TIMEOUT_SECONDS,
    RefreshCall,
    RefreshCoordinator,
)
from core.auth.dispatcher import RetryDispatcher
from core.auth.interceptor import RequestInterceptor
from core.auth.terminator import SessionTerminator
from core.errors.classifiers import FailureClassifier, FailureDecision
from core.errors.exceptions import ApiError, RefreshFailedError
from core.http.models import ApiRequest, ApiResponse, Transport
from core.logging.context_managers import LogContext
from core.types import CredentialProvider

logger = logging.getLogger(__name__)

TokenParser = Callable[[ApiResponse], str]


def extract_access_token(response: ApiResponse) -> str:
    """Read `accessToken` from a refresh response body."""
    data: Any = response.data
    token = data.get("accessToken") if isinstance(data, dict) else None
    if not token or not isinstance(token, str):
        raise RefreshFailedError(
            "Refresh response did not contain an access credential",
            reason="invalid_response",
            status_code=response.status,
        )
    return token


class AuthenticatedPipeline:
    """
    Sends requests with automatic, single-flight credential refresh.

    Args:
        transport: Object with `async send(ApiRequest) -> ApiResponse` raising
            ApiError on failure (normally core.http.HttpTransport)
        credentials: Credential provider shared with the rest of the client
        refresh_path: Endpoint that issues a new access credential
        passthrough_paths: Endpoints whose 401 is returned to the caller
            without a refresh (e.g. logout)
        refresh_call: Override for the refresh operation; defaults to POSTing
            refresh_path through this pipeline
        token_parser: Extracts the credential from the refresh response
        refresh_timeout_seconds: Upper bound for one refresh; None disables it
        terminator: Existing SessionTerminator to reuse
    """

    def __init__(
        self,
        transport: Transport,
        credentials: CredentialProvider,
        refresh_path: str,
        passthrough_paths: Iterable[str] = (),
        refresh_call: Optional[RefreshCall] = None,
        token_parser: TokenParser = extract_access_token,
        refresh_timeout_seconds: Optional[float] = DEFAULT_REFRESH_TIMEOUT_SECONDS,
        terminator: Optional[SessionTerminator] = None,
    ):
        self.transport = transport
        self.credentials = credentials
        self.refresh_path = refresh_path
        self.token_parser = token_parser

        self.interceptor = RequestInterceptor(credentials)
        self.classifier = FailureClassifier(refresh_path, passthrough_paths)
        self.terminator = terminator or SessionTerminator(credentials)
        self.coordinator = RefreshCoordinator(
            refresh_call or self.request_refresh,
            credentials,
            self.terminator,
            timeout_seconds=refresh_timeout_seconds,
        )
        self.dispatcher = RetryDispatcher(self.send)

    async def request_refresh(self) -> str:
        """POST the refresh endpoint and return the new access credential."""
        response = await self.send(ApiRequest("POST", self.refresh_path))
        return self.token_parser(response)

    async def send(self, request: ApiRequest) -> ApiResponse:
        with LogContext(request_id=request.request_id):
            self.interceptor.apply(request)

            try:
                return await self.transport.send(request)
            except ApiError as error:
                decision = self.classifier.classify(request, error)

                if decision is FailureDecision.PROPAGATE:
                    raise

                if decision is FailureDecision.TERMINAL:
                    await self.terminator.terminate("refresh_rejected")
                    raise RefreshFailedError(
                        "Session rejected by refresh endpoint",
                        reason="refresh_rejected",
                        status_code=error.status_code,
                        cause=error,
                    ) from error

            await self.coordinator.handle_auth_failure(request)
            return await self.dispatcher.replay(request)

    async def close(self) -> None:
        self.coordinator.reset()
        close = getattr(self.transport, "close", None)
        if close is not None:
            await close()


__all__ = ["AuthenticatedPipeline", "TokenParser", "extract_access_token"]
