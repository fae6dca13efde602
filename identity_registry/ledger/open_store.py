"""
Open-create identity store with third-party profiles.

The operator creates, updates and deletes identity records for any subject.
Any caller may attach a profile to a subject that has a record, and may delete
only its own profiles; the operator may delete any profile. Deleting a subject
removes every profile on it, at a cost linear in the number of its profilers,
paid by the caller of delete_token.
"""

from __future__ import annotations

from identity_registry.core.exceptions import ConfigError, InvalidRecord, SubjectNotFound
from identity_registry.ledger.access import require_caller
from identity_registry.ledger.base import RegistryStore
from identity_registry.ledger.events import DEFAULT_HISTORY_SIZE, EventType, RegistryEvent
from identity_registry.ledger.models import IdentityRecord, ProfileRecord, RegistrySnapshot
from identity_registry.ledger.profile_index import ProfileIndex
from identity_registry.registry_logging import bind_subject, get_logger
from identity_registry.utils.address_utils import normalize_address

logger = get_logger(__name__)


class OpenCreateStore(RegistryStore):
    """Operator-managed identity records plus per-profiler annotations."""

    variant = "open"

    def __init__(
        self,
        name: str,
        symbol: str,
        operator: str,
        *,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        super().__init__(name, symbol, operator, history_size=history_size)
        self._profiles = ProfileIndex()

    @property
    def operator(self) -> str:
        return self.admin

    # ------------------------------------------------------------------
    # Identity records
    # ------------------------------------------------------------------

    def create_token(self, caller: str, subject: str, record: IdentityRecord) -> RegistryEvent:
        """Create the record for subject. Operator only; AlreadyExists if live."""
        return self._record_create(caller, subject, record, "create_token")

    def update_token(self, caller: str, subject: str, record: IdentityRecord) -> RegistryEvent:
        """Replace subject's record wholesale. Operator only; NotFound if absent."""
        return self._record_update(caller, subject, record, "update_token")

    def delete_token(self, caller: str, subject: str) -> RegistryEvent:
        """Delete subject's record and every profile on it. Operator only."""
        return self._record_delete(caller, subject, "delete_token", subject_may_delete=False)

    def token_exists(self, subject: str) -> bool:
        return self._record_exists(subject)

    def get_token_data(self, subject: str) -> IdentityRecord:
        return self._record_get(subject)

    def _after_delete(self, subject: str) -> int:
        return len(self._profiles.drop_subject(subject))

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def create_profile(self, caller: str, subject: str, record: ProfileRecord) -> RegistryEvent:
        """
        Attach caller's profile to subject, overwriting caller's previous one.

        Raises:
            SubjectNotFound: subject has no identity record.
        """
        profiler = normalize_address(caller, "caller")
        subject = normalize_address(subject, "subject")
        if not isinstance(record, ProfileRecord):
            raise InvalidRecord(f"Expected ProfileRecord, got {type(record).__name__}")
        with self._lock:
            if not self._records.exists(subject):
                logger.warning("profile_create_rejected", subject=subject, profiler=profiler)
                raise SubjectNotFound(f"No identity record for {subject}", subject=subject)
            is_new = self._profiles.create(profiler, subject, record)
            bind_subject(logger, subject).info("profile_created", profiler=profiler, replaced=not is_new)
            return self.events.emit(EventType.PROFILE_CREATED, subject, profiler=profiler)

    def delete_profile(self, caller: str, profiler: str, subject: str) -> RegistryEvent:
        """Remove profiler's profile on subject. Profiler or operator; NotFound if absent."""
        caller = normalize_address(caller, "caller")
        profiler = normalize_address(profiler, "profiler")
        subject = normalize_address(subject, "subject")
        with self._lock:
            require_caller(caller, [self.admin, profiler], "delete_profile")
            self._profiles.delete(profiler, subject)
            bind_subject(logger, subject).info("profile_deleted", profiler=profiler, caller=caller)
            return self.events.emit(EventType.PROFILE_DELETED, subject, profiler=profiler)

    def get_profile_data(self, profiler: str, subject: str) -> ProfileRecord:
        """Stored profile, or EMPTY_PROFILE when absent."""
        profiler = normalize_address(profiler, "profiler")
        subject = normalize_address(subject, "subject")
        with self._lock:
            return self._profiles.get(profiler, subject)

    def list_profiles(self, subject: str) -> list[str]:
        """Profilers currently holding a profile on subject (order not meaningful)."""
        subject = normalize_address(subject, "subject")
        with self._lock:
            return self._profiles.profilers(subject)

    def profile_exists(self, profiler: str, subject: str) -> bool:
        profiler = normalize_address(profiler, "profiler")
        subject = normalize_address(subject, "subject")
        with self._lock:
            return self._profiles.exists(profiler, subject)

    # ------------------------------------------------------------------
    # Snapshot lifecycle
    # ------------------------------------------------------------------

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            snap = super().snapshot()
            snap.profiles = dict(self._profiles.items())
            snap.profilers = self._profiles.listings()
            return snap

    @classmethod
    def from_snapshot(
        cls,
        snapshot: RegistrySnapshot,
        *,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> OpenCreateStore:
        if snapshot.variant != cls.variant:
            raise ConfigError(
                f"Snapshot variant {snapshot.variant!r} is not {cls.variant!r}", variant=snapshot.variant
            )
        store = cls(snapshot.name, snapshot.symbol, snapshot.admin, history_size=history_size)
        store._restore_records(snapshot)
        # profiles on subjects without a record cannot be reached; drop them
        profiles = {
            (profiler, subject): record
            for (profiler, subject), record in snapshot.profiles.items()
            if store._records.exists(subject)
        }
        store._profiles.load(profiles, snapshot.profilers)
        return store
