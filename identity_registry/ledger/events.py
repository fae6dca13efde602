"""
Store notifications.

Each committed mutation emits one RegistryEvent. Events are for external
observability only: observers run after the change is committed, and an
observer failure is logged without affecting the store.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from identity_registry.registry_logging import get_logger

logger = get_logger(__name__)

DEFAULT_HISTORY_SIZE = 1000


class EventType(str, Enum):
    CREATED = "Created"
    UPDATED = "Updated"
    DELETED = "Deleted"
    PROFILE_CREATED = "ProfileCreated"
    PROFILE_DELETED = "ProfileDeleted"


@dataclass(frozen=True)
class RegistryEvent:
    """One state change: the affected subject and, for profile events, the profiler."""

    event_type: EventType
    subject: str
    sequence: int
    profiler: str | None = None
    emitted_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "event_type": self.event_type.value,
            "subject": self.subject,
            "sequence": self.sequence,
            "emitted_at": self.emitted_at,
        }
        if self.profiler is not None:
            out["profiler"] = self.profiler
        return out


Observer = Callable[[RegistryEvent], None]


class EventLog:
    """Ordered event emitter with a bounded in-memory history."""

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._history: deque[RegistryEvent] = deque(maxlen=history_size)
        self._observers: list[Observer] = []
        self._sequence = 0

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register observer; returns a function that unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def emit(self, event_type: EventType, subject: str, profiler: str | None = None) -> RegistryEvent:
        self._sequence += 1
        event = RegistryEvent(
            event_type=event_type,
            subject=subject,
            sequence=self._sequence,
            profiler=profiler,
        )
        self._history.append(event)
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception as e:
                logger.exception(
                    "event_observer_failed",
                    registry_event=event_type.value,
                    subject=subject,
                    error=str(e),
                )
        return event

    def recent(self, limit: int | None = None) -> list[RegistryEvent]:
        """Return retained events, oldest first; the last `limit` when given."""
        events = list(self._history)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    @property
    def last_sequence(self) -> int:
        return self._sequence
