"""
Pytest tests for the registry HTTP API (FastAPI TestClient over in-memory stores).
"""

from __future__ import annotations

ADMIN = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
USER1 = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
USER2 = "So11111111111111111111111111111111111111112"

ALICE = {
    "subject_label": "Alice",
    "reference_url": "https://a.example",
    "reference_number": 101,
    "last_updated": 1_700_000_000,
}
ALICE2 = {
    "subject_label": "Alice2",
    "reference_url": "https://a2.example",
    "reference_number": 202,
    "last_updated": 1_700_086_400,
}
PROFILE = {"label": "Alice", "url": "https://google.com", "score": 92, "timestamp": 1_700_000_400}


def _as(address: str) -> dict[str, str]:
    return {"X-Caller-Address": address}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_registry_info(client):
    data = client.get("/issuer").json()
    assert data == {"variant": "issuer", "name": "Identity Token", "symbol": "IDT", "admin": ADMIN, "records": 0}
    assert client.get("/open").json()["variant"] == "open"


def test_issuer_token_flow(client):
    r = client.post(f"/issuer/tokens/{USER1}", json=ALICE, headers=_as(ADMIN))
    assert r.status_code == 201
    assert r.json()["event"]["event_type"] == "Created"

    assert client.get(f"/issuer/tokens/{USER1}/exists").json() == {"subject": USER1, "exists": True}

    r = client.put(f"/issuer/tokens/{USER1}", json=ALICE2, headers=_as(ADMIN))
    assert r.status_code == 200
    got = client.get(f"/issuer/tokens/{USER1}").json()
    assert got == {"subject": USER1, **ALICE2}

    r = client.delete(f"/issuer/tokens/{USER1}", headers=_as(USER1))
    assert r.status_code == 200
    assert client.get(f"/issuer/tokens/{USER1}/exists").json()["exists"] is False
    assert client.get(f"/issuer/tokens/{USER1}").status_code == 404


def test_error_kinds_map_to_status(client):
    # missing caller header
    assert client.post(f"/issuer/tokens/{USER1}", json=ALICE).status_code == 401
    # wrong role
    r = client.post(f"/issuer/tokens/{USER1}", json=ALICE, headers=_as(USER2))
    assert r.status_code == 403
    assert r.json()["error"] == "unauthorized"
    # update before create
    r = client.put(f"/issuer/tokens/{USER1}", json=ALICE, headers=_as(ADMIN))
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"
    # duplicate create
    client.post(f"/issuer/tokens/{USER1}", json=ALICE, headers=_as(ADMIN))
    r = client.post(f"/issuer/tokens/{USER1}", json=ALICE2, headers=_as(ADMIN))
    assert r.status_code == 409
    assert r.json()["error"] == "already_exists"
    # bad address
    r = client.get("/issuer/tokens/not-a-pubkey/exists")
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_address"


def test_negative_number_rejected_by_schema(client):
    bad = dict(ALICE, reference_number=-1)
    assert client.post(f"/issuer/tokens/{USER1}", json=bad, headers=_as(ADMIN)).status_code == 422


def test_open_profile_flow(client):
    r = client.post(f"/open/profiles/{USER2}", json=PROFILE, headers=_as(USER1))
    assert r.status_code == 404
    assert r.json()["error"] == "subject_not_found"

    assert client.post(f"/open/tokens/{USER2}", json=ALICE, headers=_as(ADMIN)).status_code == 201
    r = client.post(f"/open/profiles/{USER2}", json=PROFILE, headers=_as(USER1))
    assert r.status_code == 201
    event = r.json()["event"]
    assert event["event_type"] == "ProfileCreated"
    assert (event["profiler"], event["subject"]) == (USER1, USER2)

    assert client.get(f"/open/profiles/{USER2}").json() == {"subject": USER2, "profilers": [USER1]}
    assert client.get(f"/open/profiles/{USER2}/{USER1}/exists").json()["exists"] is True
    got = client.get(f"/open/profiles/{USER2}/{USER1}").json()
    assert got["score"] == 92 and got["profiler"] == USER1

    # the subject may not remove someone else's profile
    assert client.delete(f"/open/profiles/{USER2}/{USER1}", headers=_as(USER2)).status_code == 403
    assert client.delete(f"/open/profiles/{USER2}/{USER1}", headers=_as(USER1)).status_code == 200
    assert client.get(f"/open/profiles/{USER2}/{USER1}").status_code == 404
    assert client.delete(f"/open/profiles/{USER2}/{USER1}", headers=_as(USER1)).status_code == 404


def test_open_delete_token_cascades(client, open_store):
    client.post(f"/open/tokens/{USER2}", json=ALICE, headers=_as(ADMIN))
    client.post(f"/open/profiles/{USER2}", json=PROFILE, headers=_as(USER1))
    assert client.delete(f"/open/tokens/{USER2}", headers=_as(USER2)).status_code == 403
    assert client.delete(f"/open/tokens/{USER2}", headers=_as(ADMIN)).status_code == 200
    assert client.get(f"/open/profiles/{USER2}").json()["profilers"] == []
    assert open_store.profile_exists(USER1, USER2) is False


def test_events_endpoint(client):
    client.post(f"/open/tokens/{USER2}", json=ALICE, headers=_as(ADMIN))
    client.put(f"/open/tokens/{USER2}", json=ALICE2, headers=_as(ADMIN))
    events = client.get("/open/events", params={"limit": 1}).json()
    assert len(events) == 1
    assert events[0]["event_type"] == "Updated"
    assert client.get("/issuer/events").json() == []


def test_create_app_requires_admin():
    import pytest

    from identity_registry.api_server.server import create_app
    from identity_registry.config import Settings
    from identity_registry.core.exceptions import ConfigError

    with pytest.raises(ConfigError, match="REGISTRY_ADMIN"):
        create_app(Settings(admin_address=""))


def test_lifespan_persists_stores(tmp_path, monkeypatch):
    """With a database URL, stores are saved on shutdown and loaded on next startup."""
    from fastapi.testclient import TestClient

    from identity_registry import database
    from identity_registry.api_server.server import create_app
    from identity_registry.config import Settings

    database.reset_engine_for_test()
    settings = Settings(admin_address=ADMIN, database_url=f"sqlite:///{tmp_path / 'api.db'}")

    with TestClient(create_app(settings)) as c1:
        assert c1.post(f"/open/tokens/{USER2}", json=ALICE, headers=_as(ADMIN)).status_code == 201
        assert c1.post(f"/open/profiles/{USER2}", json=PROFILE, headers=_as(USER1)).status_code == 201

    with TestClient(create_app(settings)) as c2:
        assert c2.get(f"/open/tokens/{USER2}").json()["subject_label"] == "Alice"
        assert c2.get(f"/open/profiles/{USER2}").json()["profilers"] == [USER1]
        assert c2.get(f"/issuer/tokens/{USER2}/exists").json()["exists"] is False
    database.reset_engine_for_test()


def test_mutations_saved_before_shutdown(tmp_path):
    """With a database URL, each committed mutation is in the database while the app is still running."""
    from fastapi.testclient import TestClient

    from identity_registry import database
    from identity_registry.api_server.server import create_app
    from identity_registry.config import Settings

    database.reset_engine_for_test()
    url = f"sqlite:///{tmp_path / 'live.db'}"
    settings = Settings(admin_address=ADMIN, database_url=url)

    with TestClient(create_app(settings)) as c:
        assert c.post(f"/issuer/tokens/{USER1}", json=ALICE, headers=_as(ADMIN)).status_code == 201
        saved = database.load_registry("default:issuer", url=url)
        assert saved.is_identity_exists(USER1) is True

        assert c.delete(f"/issuer/tokens/{USER1}", headers=_as(USER1)).status_code == 200
        saved = database.load_registry("default:issuer", url=url)
        assert saved.is_identity_exists(USER1) is False
    database.reset_engine_for_test()


def test_module_app_built_once(monkeypatch):
    from identity_registry.api_server import server
    from identity_registry.config import reset_settings_cache

    monkeypatch.setenv("REGISTRY_ADMIN", ADMIN)
    monkeypatch.delenv("REGISTRY_DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setattr(server, "_app", None)
    reset_settings_cache()
    try:
        first = server.app
        assert server.app is first
        assert first.state.issuer_store is server.app.state.issuer_store
    finally:
        reset_settings_cache()
