"""
Centralized error classification for API responses.

Two layers:
- status classification: maps an HTTP status onto the typed ApiError
  hierarchy (used by the transport when a response is not 2xx)
- failure classification: decides what the authenticated pipeline does with
  a failed call (propagate, refresh the credential, or terminate the session)
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

from core.errors.exceptions import (
    ApiError,
    AuthExpiredError,
    ErrorCategory,
    PermanentError,
    TransientError,
)

if TYPE_CHECKING:
    from core.http.models import ApiRequest

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401

# (label, error class) per status code
_STATUS_MAP: dict[int, tuple[str, type[ApiError]]] = {
    400: ("Bad request", PermanentError),
    401: ("Unauthorized", AuthExpiredError),
    403: ("Forbidden", PermanentError),
    404: ("Not found", PermanentError),
    409: ("Conflict", PermanentError),
    422: ("Unprocessable entity", PermanentError),
    429: ("Rate limited", TransientError),
    500: ("Server error", TransientError),
    502: ("Bad gateway", TransientError),
    503: ("Service unavailable", TransientError),
    504: ("Gateway timeout", TransientError),
}


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == UNAUTHORIZED:
        return ErrorCategory.AUTH

    if status_code == 429:
        return ErrorCategory.TRANSIENT

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def classify_api_error(status: int, url: str, body: Optional[str] = None) -> ApiError:
    """Build the typed ApiError for a non-2xx response."""
    context = {"url": url}
    if body:
        context["response_body"] = body[:500]

    entry = _STATUS_MAP.get(status)
    if entry:
        label, error_class = entry
        return error_class(f"{label} ({status}): {url}", status_code=status, context=context)

    # Unmapped statuses fall back to their category
    if classify_http_status(status) == ErrorCategory.PERMANENT:
        return PermanentError(f"Client error ({status}): {url}", status_code=status, context=context)

    return TransientError(f"HTTP error ({status}): {url}", status_code=status, context=context)


class FailureDecision(Enum):
    """What the pipeline does with a failed call."""

    PROPAGATE = "propagate"
    TERMINAL = "terminal"
    REFRESH = "refresh"


class FailureClassifier:
    """
    Decides how the authenticated pipeline reacts to a failed call.

    Decision table:
        no response / status != 401            -> PROPAGATE
        401 on the refresh endpoint            -> TERMINAL
        401 on a passthrough endpoint (logout) -> PROPAGATE
        401 on a call already retried once     -> PROPAGATE
        401 on an ordinary, unretried call     -> REFRESH

    Usage:
        classifier = FailureClassifier(
            refresh_path="/api/v1/auth/token/refresh",
            passthrough_paths=["/api/v1/auth/logout"],
        )
        decision = classifier.classify(request, error)
    """

    def __init__(self, refresh_path: str, passthrough_paths: Iterable[str] = ()):
        self.refresh_path = self._normalize(refresh_path)
        self.passthrough_paths = frozenset(self._normalize(p) for p in passthrough_paths)

    @staticmethod
    def _normalize(path: str) -> str:
        path = path.split("?", 1)[0]
        return "/" + path.strip("/")

    def is_refresh_call(self, request: "ApiRequest") -> bool:
        return self._normalize(request.path) == self.refresh_path

    def is_passthrough_call(self, request: "ApiRequest") -> bool:
        return self._normalize(request.path) in self.passthrough_paths

    def classify(self, request: "ApiRequest", error: Exception) -> FailureDecision:
        status = getattr(error, "status_code", None)

        if status != UNAUTHORIZED:
            return FailureDecision.PROPAGATE

        if self.is_refresh_call(request):
            logger.warning(
                "Refresh endpoint rejected the session",
                extra={"request_id": request.request_id, "http_status": status},
            )
            return FailureDecision.TERMINAL

        if self.is_passthrough_call(request):
            logger.debug(
                "401 on passthrough endpoint, not refreshing",
                extra={"request_id": request.request_id, "api_endpoint": request.path},
            )
            return FailureDecision.PROPAGATE

        if request.retried:
            logger.warning(
                "401 on already retried call, giving up",
                extra={
                    "request_id": request.request_id,
                    "api_endpoint": request.path,
                    "api_method": request.method,
                },
            )
            return FailureDecision.PROPAGATE

        return FailureDecision.REFRESH


__all__ = [
    "UNAUTHORIZED",
    "FailureDecision",
    "FailureClassifier",
    "classify_http_status",
    "classify_api_error",
]
