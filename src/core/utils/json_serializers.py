"""Shared JSON serialization utilities for log output."""

from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any


def json_serializer(obj: Any) -> Any:
    """
    Fallback serializer for json.dumps in structured log records.

    - datetime/date -> ISO 8601 string
    - Enum -> value
    - Path -> string
    - pydantic models -> their dict dump
    - Everything else -> string
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    return str(obj)


__all__ = ["json_serializer"]
