"""
Registry snapshots — SQLAlchemy-backed save/load of whole stores.

Uses REGISTRY_DB_URL or DATABASE_URL (see config/env.py); falls back to a local
SQLite file when neither is set and a caller asks for persistence explicitly.
Saving replaces every row for the registry key in one transaction, so a
snapshot in the database is always complete.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Column, ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from identity_registry.config.env import get_database_url
from identity_registry.ledger import (
    IdentityRecord,
    ProfileRecord,
    RegistrySnapshot,
    RegistryStore,
    restore_store,
)
from identity_registry.ledger.events import DEFAULT_HISTORY_SIZE
from identity_registry.registry_logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

DEFAULT_SQLITE_PATH = "identity_registry.db"

# -----------------------------------------------------------------------------
# SQLAlchemy models
# -----------------------------------------------------------------------------


class RegistryRow(Base):
    """One deployed store: variant, display strings and privileged address."""

    __tablename__ = "registries"

    key = Column(String(128), primary_key=True)
    variant = Column(String(16), nullable=False)
    name = Column(String(256), nullable=False)
    symbol = Column(String(64), nullable=False)
    admin = Column(String(64), nullable=False)
    saved_at = Column(Integer, nullable=False)  # Unix timestamp

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "variant": self.variant,
            "name": self.name,
            "symbol": self.symbol,
            "admin": self.admin,
            "saved_at": self.saved_at,
        }


class IdentityRow(Base):
    __tablename__ = "identity_records"

    registry_key = Column(String(128), ForeignKey("registries.key", ondelete="CASCADE"), primary_key=True)
    subject = Column(String(64), primary_key=True)
    subject_label = Column(Text, nullable=False)
    reference_url = Column(Text, nullable=False)
    # Strings: unsigned values may exceed 64-bit integer columns
    reference_number = Column(String(80), nullable=False)
    last_updated = Column(String(80), nullable=False)


class ProfileRow(Base):
    __tablename__ = "profile_records"

    registry_key = Column(String(128), ForeignKey("registries.key", ondelete="CASCADE"), primary_key=True)
    profiler = Column(String(64), primary_key=True)
    subject = Column(String(64), primary_key=True, index=True)
    label = Column(Text, nullable=False)
    url = Column(Text, nullable=False)
    score = Column(String(80), nullable=False)
    timestamp = Column(String(80), nullable=False)


class ProfilerEntryRow(Base):
    """Reverse index entry; position keeps the subject's list order."""

    __tablename__ = "profiler_entries"

    registry_key = Column(String(128), ForeignKey("registries.key", ondelete="CASCADE"), primary_key=True)
    subject = Column(String(64), primary_key=True)
    position = Column(Integer, primary_key=True)
    profiler = Column(String(64), nullable=False)


# -----------------------------------------------------------------------------
# Engine and session
# -----------------------------------------------------------------------------

_engines: dict[str, Any] = {}
_session_factories: dict[str, sessionmaker] = {}


def _resolve_url(url: str | None) -> str:
    return (url or "").strip() or get_database_url() or f"sqlite:///{DEFAULT_SQLITE_PATH}"


def _get_engine(url: str | None = None):
    """Create or return the cached engine for url."""
    resolved = _resolve_url(url)
    engine = _engines.get(resolved)
    if engine is None:
        connect_args = {}
        if resolved.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        engine = create_engine(resolved, connect_args=connect_args, pool_pre_ping=True)
        _engines[resolved] = engine
        logger.info("registry_db_engine", url=resolved.split("?")[0].split("//")[-1])
    return engine


def _get_session_factory(url: str | None = None) -> sessionmaker:
    resolved = _resolve_url(url)
    factory = _session_factories.get(resolved)
    if factory is None:
        factory = sessionmaker(autocommit=False, autoflush=False, bind=_get_engine(resolved))
        _session_factories[resolved] = factory
    return factory


@contextmanager
def _session_scope(url: str | None = None) -> Iterator[Session]:
    """Context manager for a single session. Commits on success, rolls back on error."""
    session = _get_session_factory(url)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(url: str | None = None) -> None:
    """Create snapshot tables if they do not exist. Safe to call on every startup."""
    try:
        Base.metadata.create_all(bind=_get_engine(url))
        logger.info("registry_db_init", url=_resolve_url(url).split("?")[0].split("//")[-1])
    except Exception as e:
        logger.exception("registry_db_init_failed", error=str(e))
        raise


def reset_engine_for_test() -> None:
    """Dispose and forget cached engines. For tests that switch database URLs."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
    _session_factories.clear()


# -----------------------------------------------------------------------------
# Save / load
# -----------------------------------------------------------------------------


def _delete_rows(session: Session, key: str) -> None:
    session.query(ProfilerEntryRow).filter(ProfilerEntryRow.registry_key == key).delete()
    session.query(ProfileRow).filter(ProfileRow.registry_key == key).delete()
    session.query(IdentityRow).filter(IdentityRow.registry_key == key).delete()
    session.query(RegistryRow).filter(RegistryRow.key == key).delete()


def save_snapshot(snapshot: RegistrySnapshot, key: str, *, url: str | None = None) -> None:
    """Replace the stored snapshot for key with snapshot."""
    try:
        with _session_scope(url) as session:
            _delete_rows(session, key)
            session.add(
                RegistryRow(
                    key=key,
                    variant=snapshot.variant,
                    name=snapshot.name,
                    symbol=snapshot.symbol,
                    admin=snapshot.admin,
                    saved_at=int(time.time()),
                )
            )
            session.flush()
            for subject, record in snapshot.records.items():
                session.add(
                    IdentityRow(
                        registry_key=key,
                        subject=subject,
                        subject_label=record.subject_label,
                        reference_url=record.reference_url,
                        reference_number=str(record.reference_number),
                        last_updated=str(record.last_updated),
                    )
                )
            for (profiler, subject), profile in snapshot.profiles.items():
                session.add(
                    ProfileRow(
                        registry_key=key,
                        profiler=profiler,
                        subject=subject,
                        label=profile.label,
                        url=profile.url,
                        score=str(profile.score),
                        timestamp=str(profile.timestamp),
                    )
                )
            for subject, profilers in snapshot.profilers.items():
                for position, profiler in enumerate(profilers):
                    session.add(
                        ProfilerEntryRow(
                            registry_key=key,
                            subject=subject,
                            position=position,
                            profiler=profiler,
                        )
                    )
        logger.info(
            "registry_saved",
            key=key,
            variant=snapshot.variant,
            records=len(snapshot.records),
            profiles=len(snapshot.profiles),
        )
    except Exception as e:
        logger.exception("registry_save_failed", key=key, error=str(e))
        raise


def load_snapshot(key: str, *, url: str | None = None) -> RegistrySnapshot | None:
    """Return the stored snapshot for key, or None if no registry is saved under it."""
    try:
        with _session_scope(url) as session:
            row = session.query(RegistryRow).filter(RegistryRow.key == key).first()
            if row is None:
                return None
            snapshot = RegistrySnapshot(
                variant=row.variant,
                name=row.name,
                symbol=row.symbol,
                admin=row.admin,
            )
            for r in session.query(IdentityRow).filter(IdentityRow.registry_key == key):
                snapshot.records[r.subject] = IdentityRecord(
                    subject_label=r.subject_label,
                    reference_url=r.reference_url,
                    reference_number=int(r.reference_number),
                    last_updated=int(r.last_updated),
                )
            for p in session.query(ProfileRow).filter(ProfileRow.registry_key == key):
                snapshot.profiles[(p.profiler, p.subject)] = ProfileRecord(
                    label=p.label,
                    url=p.url,
                    score=int(p.score),
                    timestamp=int(p.timestamp),
                )
            entries = (
                session.query(ProfilerEntryRow)
                .filter(ProfilerEntryRow.registry_key == key)
                .order_by(ProfilerEntryRow.subject, ProfilerEntryRow.position)
            )
            for e in entries:
                snapshot.profilers.setdefault(e.subject, []).append(e.profiler)
            return snapshot
    except Exception as e:
        logger.exception("registry_load_failed", key=key, error=str(e))
        raise


def save_registry(store: RegistryStore, key: str, *, url: str | None = None) -> None:
    """Persist the current state of store under key."""
    save_snapshot(store.snapshot(), key, url=url)


def load_registry(
    key: str,
    *,
    url: str | None = None,
    history_size: int = DEFAULT_HISTORY_SIZE,
) -> RegistryStore | None:
    """Rebuild the store saved under key, or None when nothing is saved there."""
    snapshot = load_snapshot(key, url=url)
    if snapshot is None:
        return None
    store = restore_store(snapshot, history_size=history_size)
    logger.info("registry_loaded", key=key, variant=snapshot.variant, records=len(store))
    return store


def list_registries(*, url: str | None = None) -> list[dict[str, Any]]:
    """Return saved registries as dicts (key, variant, name, symbol, admin, saved_at)."""
    try:
        with _session_scope(url) as session:
            rows = session.query(RegistryRow).order_by(RegistryRow.key).all()
            return [r.to_dict() for r in rows]
    except Exception as e:
        logger.exception("registry_list_failed", error=str(e))
        raise


def registry_exists(key: str, *, url: str | None = None) -> bool:
    with _session_scope(url) as session:
        return session.query(RegistryRow.key).filter(RegistryRow.key == key).first() is not None


def delete_registry(key: str, *, url: str | None = None) -> bool:
    """Remove every row stored under key. Returns True if a registry was removed."""
    with _session_scope(url) as session:
        existed = session.query(RegistryRow.key).filter(RegistryRow.key == key).first() is not None
        _delete_rows(session, key)
    if existed:
        logger.info("registry_deleted", key=key)
    return existed
