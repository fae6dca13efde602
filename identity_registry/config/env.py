"""
Environment variable loading for the identity registry.

- REGISTRY_NAME / REGISTRY_SYMBOL: display strings for newly deployed stores
- REGISTRY_ADMIN: issuer/operator address used by the API server
- REGISTRY_KEY: snapshot key in the database
- REGISTRY_DB_URL (or DATABASE_URL): SQLAlchemy URL; unset means no persistence
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is identity_registry/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_REGISTRY_NAME = "Identity Tokens"
DEFAULT_REGISTRY_SYMBOL = "IDT"
DEFAULT_REGISTRY_KEY = "default"
DEFAULT_EVENT_HISTORY = 1000


def load_registry_env() -> None:
    """Load .env from project root. Existing environment variables win; safe to call repeatedly."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str = "") -> str:
    """Return a stripped env value, or default when unset or blank."""
    return (os.getenv(name) or "").strip() or default


def get_database_url() -> str:
    """
    Return the snapshot database URL.
    Order: REGISTRY_DB_URL > DATABASE_URL > "" (persistence disabled).
    """
    load_registry_env()
    return env_str("REGISTRY_DB_URL") or env_str("DATABASE_URL")


def get_admin_address() -> str:
    """Return REGISTRY_ADMIN (unvalidated), or "" when not configured."""
    load_registry_env()
    return env_str("REGISTRY_ADMIN")
