"""
Configuration management for the identity registry.

Loads settings from environment variables and the project .env file.
Exposes a single source of truth for server, database and logging configuration.
"""

from identity_registry.config.settings import Settings, get_settings, reset_settings_cache  # noqa: F401

__all__ = ["Settings", "get_settings", "reset_settings_cache"]
