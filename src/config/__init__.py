"""Configuration loading for the pinmap client.

Configuration is read from config/config.yaml next to this package.

Main Functions
--------------

    - load_config(): Load client configuration from YAML + environment
    - get_config(): Get or load singleton config instance
    - set_config(): Replace the singleton (tests)
    - reset_config(): Reset singleton config instance

Usage Examples
--------------

    >>> from config import get_config
    >>> config = get_config()
    >>> config.api_base_url
    'http://localhost:8080'

    >>> from pathlib import Path
    >>> config = load_config(config_path=Path("/custom/path/config.yaml"))

Configuration Priority
---------------------

1. Explicit overrides passed to load_config()
2. PINMAP_* environment variables
3. YAML configuration file
4. Dataclass defaults
"""

from config.config import (
    ClientConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
)

__all__ = [
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
    "ClientConfig",
]
