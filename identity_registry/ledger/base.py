"""
Shared store machinery: construction-time metadata, the record table, the
serializing lock and event emission.

Every public operation runs under one re-entrant lock and validates all of its
preconditions before mutating, so each call either commits entirely or leaves
the store untouched.
"""

from __future__ import annotations

import threading

from identity_registry.core.exceptions import InvalidRecord
from identity_registry.ledger.access import require_caller
from identity_registry.ledger.events import DEFAULT_HISTORY_SIZE, EventLog, EventType, RegistryEvent
from identity_registry.ledger.models import EMPTY_IDENTITY, IdentityRecord, RegistrySnapshot
from identity_registry.ledger.record_table import RecordTable
from identity_registry.registry_logging import bind_subject, get_logger
from identity_registry.utils.address_utils import normalize_address

logger = get_logger(__name__)


def _require_identity(record: object) -> IdentityRecord:
    if not isinstance(record, IdentityRecord):
        raise InvalidRecord(f"Expected IdentityRecord, got {type(record).__name__}")
    return record


class RegistryStore:
    """Base for both store variants. The privileged address is fixed at construction."""

    variant = "base"

    def __init__(
        self,
        name: str,
        symbol: str,
        admin: str,
        *,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        self._name = name
        self._symbol = symbol
        self._admin = normalize_address(admin, "admin")
        self._lock = threading.RLock()
        self._records: RecordTable[IdentityRecord] = RecordTable(EMPTY_IDENTITY)
        self.events = EventLog(history_size)
        logger.info("registry_deployed", variant=self.variant, name=name, symbol=symbol, admin=self._admin)

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def ticker(self) -> str:
        return self._symbol

    @property
    def admin(self) -> str:
        return self._admin

    # ------------------------------------------------------------------
    # Record operations shared by both variants
    # ------------------------------------------------------------------

    def _record_exists(self, subject: str) -> bool:
        subject = normalize_address(subject, "subject")
        with self._lock:
            return self._records.exists(subject)

    def _record_get(self, subject: str) -> IdentityRecord:
        subject = normalize_address(subject, "subject")
        with self._lock:
            return self._records.get(subject)

    def _record_create(self, caller: str, subject: str, record: IdentityRecord, action: str) -> RegistryEvent:
        caller = normalize_address(caller, "caller")
        subject = normalize_address(subject, "subject")
        record = _require_identity(record)
        with self._lock:
            require_caller(caller, [self._admin], action)
            self._records.create(subject, record)
            bind_subject(logger, subject).info("token_created", caller=caller)
            return self.events.emit(EventType.CREATED, subject)

    def _record_update(self, caller: str, subject: str, record: IdentityRecord, action: str) -> RegistryEvent:
        caller = normalize_address(caller, "caller")
        subject = normalize_address(subject, "subject")
        record = _require_identity(record)
        with self._lock:
            require_caller(caller, [self._admin], action)
            self._records.update(subject, record)
            bind_subject(logger, subject).info("token_updated", caller=caller)
            return self.events.emit(EventType.UPDATED, subject)

    def _record_delete(self, caller: str, subject: str, action: str, *, subject_may_delete: bool) -> RegistryEvent:
        caller = normalize_address(caller, "caller")
        subject = normalize_address(subject, "subject")
        with self._lock:
            allowed = [self._admin, subject] if subject_may_delete else [self._admin]
            require_caller(caller, allowed, action)
            self._records.delete(subject)
            cascaded = self._after_delete(subject)
            bind_subject(logger, subject).info("token_deleted", caller=caller, profiles_removed=cascaded)
            return self.events.emit(EventType.DELETED, subject)

    def _after_delete(self, subject: str) -> int:
        """Hook for dependent cleanup once the record is gone; returns entries removed."""
        return 0

    # ------------------------------------------------------------------
    # Snapshot lifecycle
    # ------------------------------------------------------------------

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            return RegistrySnapshot(
                variant=self.variant,
                name=self._name,
                symbol=self._symbol,
                admin=self._admin,
                records=dict(self._records.items()),
            )

    def _restore_records(self, snapshot: RegistrySnapshot) -> None:
        for subject, record in snapshot.records.items():
            self._records.create(normalize_address(subject, "subject"), _require_identity(record))

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, symbol={self._symbol!r}, records={len(self._records)})"
