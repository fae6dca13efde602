"""
Pytest fixtures for identity registry tests. Fresh stores per test; temporary
SQLite database for snapshot tests.
"""

from __future__ import annotations

import pytest

# Valid Solana pubkeys (base58, 32 bytes)
ADMIN = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
USER1 = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
USER2 = "So11111111111111111111111111111111111111112"
USER3 = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


@pytest.fixture
def issuer_store():
    from identity_registry.ledger import IssuerGatedStore

    return IssuerGatedStore("Identity Token", "IDT", ADMIN)


@pytest.fixture
def open_store():
    from identity_registry.ledger import OpenCreateStore

    return OpenCreateStore("Identity Token", "IDT", ADMIN)


@pytest.fixture
def registry_db_url(tmp_path, monkeypatch):
    """
    Point snapshots at a temporary SQLite DB and create tables.
    Unset REGISTRY_DB_URL / DATABASE_URL so nothing leaks in from the environment.
    """
    monkeypatch.delenv("REGISTRY_DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    url = f"sqlite:///{tmp_path / 'registry.db'}"

    from identity_registry import database

    database.reset_engine_for_test()
    database.init_db(url)
    yield url
    database.reset_engine_for_test()


@pytest.fixture
def client(issuer_store, open_store):
    """FastAPI TestClient over the fixture stores (no persistence)."""
    from fastapi.testclient import TestClient

    from identity_registry.api_server.server import create_app
    from identity_registry.config import Settings

    app = create_app(Settings(admin_address=ADMIN), issuer_store=issuer_store, open_store=open_store)
    return TestClient(app)
