"""Tests for RecordTable existence, no-throw reads and precondition errors."""

from __future__ import annotations

import pytest

from identity_registry.core.exceptions import AlreadyExists, NotFound
from identity_registry.ledger.models import EMPTY_IDENTITY, IdentityRecord
from identity_registry.ledger.record_table import RecordTable

SUBJECT = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
OTHER = "So11111111111111111111111111111111111111112"

R1 = IdentityRecord("Alice", "https://a.example", 101, 1)
R2 = IdentityRecord("Alice2", "https://a2.example", 202, 2)


@pytest.fixture
def table() -> RecordTable[IdentityRecord]:
    return RecordTable(EMPTY_IDENTITY)


def test_absent_subject_reads_empty(table):
    assert table.exists(SUBJECT) is False
    assert table.get(SUBJECT) == EMPTY_IDENTITY
    assert len(table) == 0


def test_create_then_get(table):
    table.create(SUBJECT, R1)
    assert table.exists(SUBJECT) is True
    assert table.get(SUBJECT) is R1
    assert SUBJECT in table
    assert table.exists(OTHER) is False


def test_create_twice_keeps_first(table):
    table.create(SUBJECT, R1)
    with pytest.raises(AlreadyExists):
        table.create(SUBJECT, R2)
    assert table.get(SUBJECT) == R1


def test_update_requires_existing(table):
    with pytest.raises(NotFound):
        table.update(SUBJECT, R2)
    assert table.exists(SUBJECT) is False


def test_update_replaces_and_returns_previous(table):
    table.create(SUBJECT, R1)
    assert table.update(SUBJECT, R2) == R1
    assert table.get(SUBJECT) == R2


def test_delete(table):
    table.create(SUBJECT, R1)
    assert table.delete(SUBJECT) == R1
    assert table.exists(SUBJECT) is False
    assert table.get(SUBJECT) == EMPTY_IDENTITY
    with pytest.raises(NotFound):
        table.delete(SUBJECT)


def test_empty_label_record_exists(table):
    """Presence is tracked by key, so an empty-label record is still present."""
    table.create(SUBJECT, EMPTY_IDENTITY)
    assert table.exists(SUBJECT) is True
    with pytest.raises(AlreadyExists):
        table.create(SUBJECT, R1)


def test_enumeration(table):
    table.create(SUBJECT, R1)
    table.create(OTHER, R2)
    assert sorted(table.subjects()) == sorted([SUBJECT, OTHER])
    assert dict(table.items()) == {SUBJECT: R1, OTHER: R2}
