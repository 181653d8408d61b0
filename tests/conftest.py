"""
pytest configuration for pinmap client tests.

Adds src directory to Python path for imports and keeps developer
environment variables from leaking into configuration tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

PINMAP_ENV_VARS = (
    "PINMAP_API_BASE_URL",
    "PINMAP_TIMEOUT_SECONDS",
    "PINMAP_REFRESH_TIMEOUT_SECONDS",
    "PINMAP_LOG_LEVEL",
    "PINMAP_ACCESS_TOKEN",
)


@pytest.fixture(autouse=True)
def clean_pinmap_env(monkeypatch):
    """Remove PINMAP_* variables so tests see the file/default values."""
    for name in PINMAP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
