"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- ApiError hierarchy for typed exceptions
- Status classification for non-2xx responses
- FailureClassifier deciding propagate / refresh / terminate for failed calls
"""

from core.errors.classifiers import (
    UNAUTHORIZED,
    FailureClassifier,
    FailureDecision,
    classify_api_error,
    classify_http_status,
)
from core.errors.exceptions import (
    # Base classes
    ApiError,
    # Auth errors
    AuthExpiredError,
    # Enums
    ErrorCategory,
    PermanentError,
    RefreshFailedError,
    TransientError,
    TransportError,
    # Classification utilities
    wrap_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "ApiError",
    "AuthExpiredError",
    "RefreshFailedError",
    "TransientError",
    "TransportError",
    "PermanentError",
    # Classification utilities
    "wrap_exception",
    "classify_http_status",
    "classify_api_error",
    # Failure classification
    "UNAUTHORIZED",
    "FailureDecision",
    "FailureClassifier",
]
