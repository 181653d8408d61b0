"""Attaches the current access credential to outgoing requests."""

import logging

from core.http.models import ApiRequest
from core.types import CredentialProvider

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"


class RequestInterceptor:
    """
    Stamps `Authorization: Bearer <token>` on every outgoing request.

    Reads the credential at send time, so a replayed request picks up the
    refreshed value. With no credential held the request goes out without the
    header, and any stale header from a previous attempt is removed.
    """

    def __init__(self, credentials: CredentialProvider):
        self.credentials = credentials

    def apply(self, request: ApiRequest) -> ApiRequest:
        token = self.credentials.get()

        if token:
            request.headers[AUTHORIZATION_HEADER] = f"Bearer {token}"
        else:
            request.headers.pop(AUTHORIZATION_HEADER, None)

        logger.debug(
            "Request prepared",
            extra={
                "request_id": request.request_id,
                "api_method": request.method,
                "api_endpoint": request.path,
                "has_auth_header": request.has_auth_header,
            },
        )
        return request


__all__ = ["AUTHORIZATION_HEADER", "RequestInterceptor"]
