"""
Application settings.

Typed view over the environment (see config/env.py) used by the API server,
main entrypoint and deploy tool. Values are read once and cached; tests call
reset_settings_cache() after changing the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from identity_registry.config.env import (
    DEFAULT_EVENT_HISTORY,
    DEFAULT_REGISTRY_KEY,
    DEFAULT_REGISTRY_NAME,
    DEFAULT_REGISTRY_SYMBOL,
    env_str,
    get_admin_address,
    get_database_url,
    load_registry_env,
)
from identity_registry.core.exceptions import ConfigError


@dataclass(frozen=True)
class Settings:
    """Registry, server and logging configuration."""

    registry_name: str = DEFAULT_REGISTRY_NAME
    registry_symbol: str = DEFAULT_REGISTRY_SYMBOL
    admin_address: str = ""
    """Issuer (issuer store) and operator (open store) for stores created by the server."""
    registry_key: str = DEFAULT_REGISTRY_KEY
    database_url: str = ""
    """SQLAlchemy URL for snapshots; empty disables persistence."""
    event_history: int = DEFAULT_EVENT_HISTORY
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def persistence_enabled(self) -> bool:
        return bool(self.database_url)


def _env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer", value=raw) from e
    if value < 0:
        raise ConfigError(f"{name} must be non-negative", value=raw)
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Raises:
        ConfigError: if a numeric variable is not a non-negative integer.
    """
    load_registry_env()
    return Settings(
        registry_name=env_str("REGISTRY_NAME", DEFAULT_REGISTRY_NAME),
        registry_symbol=env_str("REGISTRY_SYMBOL", DEFAULT_REGISTRY_SYMBOL),
        admin_address=get_admin_address(),
        registry_key=env_str("REGISTRY_KEY", DEFAULT_REGISTRY_KEY),
        database_url=get_database_url(),
        event_history=_env_int("REGISTRY_EVENT_HISTORY", DEFAULT_EVENT_HISTORY),
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=_env_int("API_PORT", 8000),
        log_level=env_str("LOG_LEVEL", "INFO").upper(),
        log_format=env_str("LOG_FORMAT", "json").lower(),
    )


def reset_settings_cache() -> None:
    """Drop cached settings. For tests that change the environment."""
    get_settings.cache_clear()
