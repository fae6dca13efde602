"""
Database layer — registry snapshots persisted with SQLAlchemy.

SQLite by default; any SQLAlchemy URL (e.g. PostgreSQL) via REGISTRY_DB_URL.
"""

from identity_registry.database.snapshot import (
    delete_registry,
    init_db,
    list_registries,
    load_registry,
    load_snapshot,
    registry_exists,
    reset_engine_for_test,
    save_registry,
    save_snapshot,
)

__all__ = [
    "delete_registry",
    "init_db",
    "list_registries",
    "load_registry",
    "load_snapshot",
    "registry_exists",
    "reset_engine_for_test",
    "save_registry",
    "save_snapshot",
]
