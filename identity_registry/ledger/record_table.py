"""
Record table: subject address -> identity record.

Presence is tracked by key membership, so any record (including one whose
label is empty) exists once created. Reads of absent subjects return the
table's empty record instead of raising. Authorization is the store's job;
the table only enforces existence preconditions.
"""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

from identity_registry.core.exceptions import AlreadyExists, NotFound

R = TypeVar("R")


class RecordTable(Generic[R]):
    """Mapping from subject to its current record."""

    def __init__(self, empty: R) -> None:
        self._empty = empty
        self._records: dict[str, R] = {}

    def exists(self, subject: str) -> bool:
        return subject in self._records

    def get(self, subject: str) -> R:
        """Return the stored record, or the empty record when absent."""
        return self._records.get(subject, self._empty)

    def create(self, subject: str, record: R) -> None:
        if subject in self._records:
            raise AlreadyExists(f"Record already exists for {subject}", subject=subject)
        self._records[subject] = record

    def update(self, subject: str, record: R) -> R:
        """Replace the record for subject; returns the previous one."""
        if subject not in self._records:
            raise NotFound(f"No record for {subject}", subject=subject)
        previous = self._records[subject]
        self._records[subject] = record
        return previous

    def delete(self, subject: str) -> R:
        """Remove the record for subject; returns the removed one."""
        if subject not in self._records:
            raise NotFound(f"No record for {subject}", subject=subject)
        return self._records.pop(subject)

    def subjects(self) -> list[str]:
        return list(self._records)

    def items(self) -> Iterator[tuple[str, R]]:
        return iter(list(self._records.items()))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, subject: object) -> bool:
        return subject in self._records
