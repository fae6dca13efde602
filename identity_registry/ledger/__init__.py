"""
Identity ledgers: record table, profile index and the two store variants.

In-memory and synchronous; every store operation is serialized by the store's
lock. Persistence and transport live in the database and api_server packages.
"""

from identity_registry.ledger.base import RegistryStore
from identity_registry.ledger.events import EventLog, EventType, RegistryEvent
from identity_registry.ledger.issuer_store import IssuerGatedStore
from identity_registry.ledger.models import (
    EMPTY_IDENTITY,
    EMPTY_PROFILE,
    IdentityRecord,
    ProfileRecord,
    RegistrySnapshot,
)
from identity_registry.ledger.open_store import OpenCreateStore
from identity_registry.ledger.profile_index import ProfileIndex
from identity_registry.ledger.record_table import RecordTable
from identity_registry.ledger.variants import STORE_VARIANTS, create_store, restore_store

__all__ = [
    "EMPTY_IDENTITY",
    "EMPTY_PROFILE",
    "EventLog",
    "EventType",
    "IdentityRecord",
    "IssuerGatedStore",
    "OpenCreateStore",
    "ProfileIndex",
    "ProfileRecord",
    "RecordTable",
    "RegistryEvent",
    "RegistrySnapshot",
    "RegistryStore",
    "STORE_VARIANTS",
    "create_store",
    "restore_store",
]
