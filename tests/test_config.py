"""Tests for env-driven settings."""

from __future__ import annotations

import pytest

from identity_registry.config import get_settings, reset_settings_cache
from identity_registry.core.exceptions import ConfigError

ADMIN = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for name in (
        "REGISTRY_NAME",
        "REGISTRY_SYMBOL",
        "REGISTRY_ADMIN",
        "REGISTRY_KEY",
        "REGISTRY_DB_URL",
        "DATABASE_URL",
        "REGISTRY_EVENT_HISTORY",
        "API_HOST",
        "API_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_defaults():
    s = get_settings()
    assert s.registry_name == "Identity Tokens"
    assert s.registry_symbol == "IDT"
    assert s.registry_key == "default"
    assert s.persistence_enabled is False
    assert s.api_port == 8000


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("REGISTRY_NAME", "KYC Registry")
    monkeypatch.setenv("REGISTRY_ADMIN", ADMIN)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("REGISTRY_DB_URL", "sqlite:///registry.db")
    monkeypatch.setenv("API_PORT", "9001")
    s = get_settings()
    assert s.registry_name == "KYC Registry"
    assert s.admin_address == ADMIN
    # REGISTRY_DB_URL wins over DATABASE_URL
    assert s.database_url == "sqlite:///registry.db"
    assert s.persistence_enabled is True
    assert s.api_port == 9001


def test_settings_are_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("REGISTRY_NAME", "Changed")
    assert get_settings() is first
    reset_settings_cache()
    assert get_settings().registry_name == "Changed"


def test_bad_integer(monkeypatch):
    monkeypatch.setenv("API_PORT", "eighty")
    with pytest.raises(ConfigError, match="API_PORT"):
        get_settings()
