"""
Issuer-gated identity store.

Only the issuer creates and updates records; the issuer or the subject itself
may remove a subject's record.
"""

from __future__ import annotations

from identity_registry.core.exceptions import ConfigError
from identity_registry.ledger.base import RegistryStore
from identity_registry.ledger.events import DEFAULT_HISTORY_SIZE, RegistryEvent
from identity_registry.ledger.models import IdentityRecord, RegistrySnapshot


class IssuerGatedStore(RegistryStore):
    """Identity records written by a single issuer address."""

    variant = "issuer"

    @property
    def issuer(self) -> str:
        return self.admin

    def create_token(self, caller: str, subject: str, record: IdentityRecord) -> RegistryEvent:
        """Create the record for subject. Issuer only; AlreadyExists if live."""
        return self._record_create(caller, subject, record, "create_token")

    def update_identity_data(self, caller: str, subject: str, record: IdentityRecord) -> RegistryEvent:
        """Replace subject's record wholesale. Issuer only; NotFound if absent."""
        return self._record_update(caller, subject, record, "update_identity_data")

    def remove_token(self, caller: str, subject: str) -> RegistryEvent:
        """Delete subject's record. Issuer or the subject itself; NotFound if absent."""
        return self._record_delete(caller, subject, "remove_token", subject_may_delete=True)

    def is_identity_exists(self, subject: str) -> bool:
        return self._record_exists(subject)

    def get_identity_data(self, subject: str) -> IdentityRecord:
        """Stored record, or EMPTY_IDENTITY when absent. Check is_identity_exists first."""
        return self._record_get(subject)

    @classmethod
    def from_snapshot(
        cls,
        snapshot: RegistrySnapshot,
        *,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> IssuerGatedStore:
        if snapshot.variant != cls.variant:
            raise ConfigError(
                f"Snapshot variant {snapshot.variant!r} is not {cls.variant!r}", variant=snapshot.variant
            )
        store = cls(snapshot.name, snapshot.symbol, snapshot.admin, history_size=history_size)
        store._restore_records(snapshot)
        return store
