"""Context managers for structured logging."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from core.logging.context import get_log_context, set_log_context


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(request_id=request.request_id):
            # All logs in this block carry the request id
            await send(request)
    """

    def __init__(
        self,
        request_id: Optional[str] = None,
        session_id: Optional[str] = None,
        component: Optional[str] = None,
    ):
        self.new_context = {
            "request_id": request_id,
            "session_id": session_id,
            "component": component,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        for key, value in self.new_context.items():
            if value is not None:
                set_log_context(**{key: value})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Restore old context
        set_log_context(
            request_id=self.old_context.get("request_id", ""),
            session_id=self.old_context.get("session_id", ""),
            component=self.old_context.get("component", ""),
        )
        return False


@contextmanager
def log_phase(
    logger: logging.Logger,
    phase: str,
    level: int = logging.DEBUG,
    **context: Any,
):
    """
    Context manager for timing a phase and logging its duration.

    Args:
        logger: Logger instance
        phase: Phase name
        level: Log level for completion message
        **context: Additional context fields

    Example:
        with log_phase(logger, "token_refresh"):
            token = await refresh_call()
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.warning(
            f"Phase {phase} failed",
            extra={
                "operation": phase,
                "duration_ms": round(duration_ms, 2),
                "error_message": str(e)[:200],
                **context,
            },
        )
        raise
    else:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.log(
            level,
            f"Phase {phase} completed",
            extra={"operation": phase, "duration_ms": round(duration_ms, 2), **context},
        )
