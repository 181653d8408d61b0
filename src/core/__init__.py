"""
Core library: Reusable, backend-agnostic client components.

Modules:
    auth        - Bearer credential store, interceptor, single-flight refresh
    http        - Async aiohttp transport and request/response models
    logging     - Structured JSON logging with request correlation IDs
    errors      - Error classification and exception hierarchy

Design Principles:
    - No dependencies on a specific backend's endpoints or payloads
    - All modules are independently testable
    - Async-first, single event loop
"""

from .types import CredentialProvider, ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "CredentialProvider",
    "ErrorCategory",
]
