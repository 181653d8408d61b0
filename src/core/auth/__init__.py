"""
Authentication module.

Bearer-credential handling for the backend API with single-flight refresh.

Components:
    - CredentialStore: in-memory access credential
    - RequestInterceptor: attaches the Authorization header
    - RefreshCoordinator: at most one refresh in flight, waiters settled together
    - RetryDispatcher: replays a refreshed call exactly once
    - SessionTerminator: idempotent local logout with listeners
    - AuthenticatedPipeline: wires the above around an HTTP transport
"""

from .credentials import CredentialStore
from .interceptor import AUTHORIZATION_HEADER, RequestInterceptor
from .terminator import SessionTerminator
from .coordinator import (
    DEFAULT_REFRESH_TIMEOUT_SECONDS,
    PendingWaiter,
    RefreshCoordinator,
    RefreshOutcome,
    RefreshState,
)
from .dispatcher import RetryDispatcher
from .pipeline import AuthenticatedPipeline, extract_access_token

__all__ = [
    "CredentialStore",
    "AUTHORIZATION_HEADER",
    "RequestInterceptor",
    "SessionTerminator",
    "DEFAULT_REFRESH_TIMEOUT_SECONDS",
    "PendingWaiter",
    "RefreshCoordinator",
    "RefreshOutcome",
    "RefreshState",
    "RetryDispatcher",
    "AuthenticatedPipeline",
    "extract_access_token",
]
