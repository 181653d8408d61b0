"""Client configuration from YAML file.

Loads from config/config.yaml with all settings in one place:
- Backend API base URL and request timeout
- Credential refresh timeout
- Connection pool and logging settings

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files,
and the PINMAP_* variables below override the file directly.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_REFRESH_TIMEOUT_SECONDS = 10.0

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# env var -> config key
ENV_OVERRIDES = {
    "PINMAP_API_BASE_URL": "api_base_url",
    "PINMAP_TIMEOUT_SECONDS": "timeout_seconds",
    "PINMAP_REFRESH_TIMEOUT_SECONDS": "refresh_timeout_seconds",
    "PINMAP_LOG_LEVEL": "log_level",
}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _optional_seconds(value: Any) -> Optional[float]:
    """Parse a timeout; empty, 'none' and 0 disable it."""
    if value is None:
        return None
    if isinstance(value, str):
        if value.strip().lower() in ("", "none", "null", "off"):
            return None
    seconds = float(value)
    return seconds if seconds > 0 else None


# Default config file: config/config.yaml next to this module
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"


@dataclass
class ClientConfig:
    """Backend client configuration.

    Configuration structure:
        client:
          api_base_url: http://localhost:8080
          timeout_seconds: 10
          refresh_timeout_seconds: 10   # null disables the refresh timeout
          max_connections: 100
          max_connections_per_host: 10
          verify_ssl: true
        logging:
          level: INFO
          json: false
          file: null
    """

    api_base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    refresh_timeout_seconds: Optional[float] = DEFAULT_REFRESH_TIMEOUT_SECONDS
    max_connections: int = 100
    max_connections_per_host: int = 10
    verify_ssl: bool = True

    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None

    def validate(self) -> None:
        """Validate configuration for correctness and constraints."""
        if not self.api_base_url:
            raise ValueError("api_base_url is required in client section")

        if not self.api_base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"api_base_url must start with http:// or https://, got '{self.api_base_url}'"
            )

        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

        if self.refresh_timeout_seconds is not None and self.refresh_timeout_seconds <= 0:
            raise ValueError(
                f"refresh_timeout_seconds must be > 0 or null, got {self.refresh_timeout_seconds}"
            )

        if self.max_connections < 1:
            raise ValueError(f"max_connections must be >= 1, got {self.max_connections}")

        if not (1 <= self.max_connections_per_host <= self.max_connections):
            raise ValueError(
                f"max_connections_per_host must be between 1 and {self.max_connections}, "
                f"got {self.max_connections_per_host}"
            )

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{self.log_level}'"
            )

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper())


def _apply_env_overrides(settings: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(settings)
    for env_var, key in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            logger.debug(f"Config override from environment: {env_var}")
            result[key] = value
    return result


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ClientConfig:
    """Load client configuration from config.yaml file.

    Priority (highest to lowest): overrides, PINMAP_* environment variables,
    YAML file, dataclass defaults. A missing file is not an error: the
    defaults match a local development backend.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if config_path.exists():
        logger.info(f"Loading configuration from file: {config_path}")
    else:
        logger.debug(f"No configuration file at {config_path}, using defaults")

    yaml_data = _expand_env_vars(load_yaml(config_path))

    client = yaml_data.get("client", {}) or {}
    log_section = yaml_data.get("logging", {}) or {}

    settings: Dict[str, Any] = dict(client)
    if "level" in log_section:
        settings["log_level"] = log_section["level"]
    if "json" in log_section:
        settings["log_json"] = log_section["json"]
    if "file" in log_section:
        settings["log_file"] = log_section["file"]

    settings = _apply_env_overrides(settings)

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        settings = _deep_merge(settings, overrides)

    config = ClientConfig(
        api_base_url=str(settings.get("api_base_url") or DEFAULT_BASE_URL).rstrip("/"),
        timeout_seconds=float(settings.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        refresh_timeout_seconds=_optional_seconds(
            settings.get("refresh_timeout_seconds", DEFAULT_REFRESH_TIMEOUT_SECONDS)
        ),
        max_connections=int(settings.get("max_connections", 100)),
        max_connections_per_host=int(settings.get("max_connections_per_host", 10)),
        verify_ssl=bool(settings.get("verify_ssl", True)),
        log_level=str(settings.get("log_level", "INFO")).upper(),
        log_json=bool(settings.get("log_json", False)),
        log_file=settings.get("log_file") or None,
    )

    logger.debug(f"  - API base URL: {config.api_base_url}")
    logger.debug(f"  - Refresh timeout: {config.refresh_timeout_seconds}")

    config.validate()
    return config


_client_config: Optional[ClientConfig] = None


def get_config() -> ClientConfig:
    """Get or load the singleton client config instance."""
    global _client_config
    if _client_config is None:
        _client_config = load_config()
    return _client_config


def set_config(config: ClientConfig) -> None:
    """Set the singleton client config instance (useful for testing)."""
    global _client_config
    _client_config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _client_config
    _client_config = None
