"""
Data models for the identity ledgers.

IdentityRecord is a subject's own record; ProfileRecord is a third party's
claim about a subject. Both are replaced wholesale, never patched.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from identity_registry.core.exceptions import InvalidRecord


def _check_text(record: str, name: str, value: Any) -> None:
    if not isinstance(value, str):
        raise InvalidRecord(f"{record}.{name} must be a string", field=name)


def _check_unsigned(record: str, name: str, value: Any) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRecord(f"{record}.{name} must be an integer", field=name)
    if value < 0:
        raise InvalidRecord(f"{record}.{name} must be non-negative", field=name)


@dataclass(frozen=True)
class IdentityRecord:
    """Identity data stored for a subject address."""

    subject_label: str
    reference_url: str
    reference_number: int
    last_updated: int
    """Unix timestamp supplied by the writer."""

    def __post_init__(self) -> None:
        _check_text("IdentityRecord", "subject_label", self.subject_label)
        _check_text("IdentityRecord", "reference_url", self.reference_url)
        _check_unsigned("IdentityRecord", "reference_number", self.reference_number)
        _check_unsigned("IdentityRecord", "last_updated", self.last_updated)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IdentityRecord:
        try:
            return cls(
                subject_label=data["subject_label"],
                reference_url=data["reference_url"],
                reference_number=data["reference_number"],
                last_updated=data["last_updated"],
            )
        except KeyError as e:
            raise InvalidRecord(f"IdentityRecord missing field {e.args[0]}", field=e.args[0]) from e


@dataclass(frozen=True)
class ProfileRecord:
    """A profiler's annotation about a subject."""

    label: str
    url: str
    score: int
    timestamp: int

    def __post_init__(self) -> None:
        _check_text("ProfileRecord", "label", self.label)
        _check_text("ProfileRecord", "url", self.url)
        _check_unsigned("ProfileRecord", "score", self.score)
        _check_unsigned("ProfileRecord", "timestamp", self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProfileRecord:
        try:
            return cls(
                label=data["label"],
                url=data["url"],
                score=data["score"],
                timestamp=data["timestamp"],
            )
        except KeyError as e:
            raise InvalidRecord(f"ProfileRecord missing field {e.args[0]}", field=e.args[0]) from e


# Returned by no-throw reads for absent entries. Existence is tracked by the
# table itself, so a stored record equal to these still counts as present.
EMPTY_IDENTITY = IdentityRecord(subject_label="", reference_url="", reference_number=0, last_updated=0)
EMPTY_PROFILE = ProfileRecord(label="", url="", score=0, timestamp=0)


@dataclass
class RegistrySnapshot:
    """
    Plain-data copy of a store, used for persistence and restore.

    profilers keeps each subject's list in its current order.
    """

    variant: str
    name: str
    symbol: str
    admin: str
    records: dict[str, IdentityRecord] = field(default_factory=dict)
    profiles: dict[tuple[str, str], ProfileRecord] = field(default_factory=dict)
    """Keyed by (profiler, subject)."""
    profilers: dict[str, list[str]] = field(default_factory=dict)
