"""
Client for the map-bookmarking backend.

Modules:
    endpoints    - Backend endpoint paths and defaults
    models       - Pydantic payload schemas (envelope, refresh response, user)
    api_client   - PinmapApiClient: REST calls through the authenticated pipeline
    auth_service - AuthService / AuthSession: sign-in state and auth endpoints
    cli          - `pinmap` command line entry point
"""

from pinmap.api_client import PinmapApiClient
from pinmap.auth_service import AuthService, AuthSession
from pinmap.models import ApiEnvelope, RefreshTokenResponse, User

__all__ = [
    "PinmapApiClient",
    "AuthService",
    "AuthSession",
    "ApiEnvelope",
    "RefreshTokenResponse",
    "User",
]
