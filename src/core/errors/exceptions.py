"""
Unified exception hierarchy for the pinmap client.

Provides typed exceptions with category classification so the request
pipeline can decide between propagating, refreshing and terminating.
"""

import asyncio

import aiohttp

# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class ApiError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status of the failed response, None if no response
        category: Error classification for recovery decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthExpiredError(ApiError):
    """
    401 from the backend: the access credential is missing, invalid or expired.

    Recoverable on an ordinary call that has not been retried yet; propagated
    as-is when the call was already replayed once.
    """

    category = ErrorCategory.AUTH

    def __init__(
        self,
        message: str,
        status_code: int | None = 401,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, status_code, cause, context)


class RefreshFailedError(ApiError):
    """
    The access credential could not be refreshed.

    Raised when the refresh endpoint rejects the session, returns an unusable
    body, errors out, or exceeds the refresh timeout. Terminal: credentials are
    cleared before this error reaches callers.
    """

    category = ErrorCategory.TERMINAL

    def __init__(
        self,
        message: str,
        reason: str = "refresh_failed",
        status_code: int | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, status_code, cause, context)
        self.reason = reason


# =============================================================================
# Network/Connection Errors (Transient)
# =============================================================================


class TransientError(ApiError):
    """Server-side or rate-limit failure that may succeed later."""

    category = ErrorCategory.TRANSIENT


class TransportError(TransientError):
    """No response was received (connection refused, DNS, timeout)."""

    pass


# =============================================================================
# Permanent Errors (Don't Retry)
# =============================================================================


class PermanentError(ApiError):
    """Client error that will not change on retry (400, 403, 404, ...)."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Exception Wrapping
# =============================================================================


def wrap_exception(exc: Exception, context: dict | None = None) -> ApiError:
    """
    Wrap a transport-level exception in the ApiError hierarchy.

    ApiError instances pass through with the extra context merged in.
    """
    if isinstance(exc, ApiError):
        if context:
            exc.context.update(context)
        return exc

    context = dict(context or {})

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        context["error_type"] = "timeout"
        return TransportError("Request timed out", cause=exc, context=context)

    if isinstance(exc, (aiohttp.ClientError, OSError)):
        context["error_type"] = "connection"
        return TransportError(f"Connection error: {exc}", cause=exc, context=context)

    return ApiError(str(exc), cause=exc, context=context)


__all__ = [
    "ErrorCategory",
    "ApiError",
    "AuthExpiredError",
    "RefreshFailedError",
    "TransientError",
    "TransportError",
    "PermanentError",
    "wrap_exception",
]
