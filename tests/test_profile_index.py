"""Tests for ProfileIndex: reverse index maintenance, swap-pop removal and cascade drop."""

from __future__ import annotations

import pytest

from identity_registry.core.exceptions import NotFound
from identity_registry.ledger.models import EMPTY_PROFILE, ProfileRecord
from identity_registry.ledger.profile_index import ProfileIndex

SUBJECT = "So11111111111111111111111111111111111111112"
P1 = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
P2 = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
P3 = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
OTHER_SUBJECT = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"

REC = ProfileRecord("Alice", "https://google.com", 92, 1)
REC2 = ProfileRecord("Alice (revised)", "https://google.com", 50, 2)


@pytest.fixture
def index() -> ProfileIndex:
    return ProfileIndex()


def test_absent_profile(index):
    assert index.exists(P1, SUBJECT) is False
    assert index.get(P1, SUBJECT) == EMPTY_PROFILE
    assert index.profilers(SUBJECT) == []


def test_create_lists_profiler(index):
    assert index.create(P1, SUBJECT, REC) is True
    assert index.exists(P1, SUBJECT) is True
    assert index.get(P1, SUBJECT) == REC
    assert index.profilers(SUBJECT) == [P1]
    # keyed by (profiler, subject): reversed pair is a different entry
    assert index.exists(SUBJECT, P1) is False


def test_recreate_overwrites_without_duplicate_listing(index):
    index.create(P1, SUBJECT, REC)
    assert index.create(P1, SUBJECT, REC2) is False
    assert index.get(P1, SUBJECT) == REC2
    assert index.profilers(SUBJECT) == [P1]
    index.delete(P1, SUBJECT)
    assert index.profilers(SUBJECT) == []
    assert index.exists(P1, SUBJECT) is False


def test_delete_swaps_last_into_place(index):
    for p in (P1, P2, P3):
        index.create(p, SUBJECT, REC)
    index.delete(P1, SUBJECT)
    # P3 moved into P1's slot
    assert index.profilers(SUBJECT) == [P3, P2]
    assert index.exists(P1, SUBJECT) is False
    assert len(index) == 2


def test_delete_missing_raises(index):
    with pytest.raises(NotFound):
        index.delete(P1, SUBJECT)
    index.create(P1, OTHER_SUBJECT, REC)
    with pytest.raises(NotFound):
        index.delete(P1, SUBJECT)
    assert index.exists(P1, OTHER_SUBJECT) is True


def test_profilers_returns_copy(index):
    index.create(P1, SUBJECT, REC)
    listed = index.profilers(SUBJECT)
    listed.append(P2)
    assert index.profilers(SUBJECT) == [P1]


def test_drop_subject_cascades_only_that_subject(index):
    index.create(P1, SUBJECT, REC)
    index.create(P2, SUBJECT, REC)
    index.create(P1, OTHER_SUBJECT, REC)
    removed = index.drop_subject(SUBJECT)
    assert sorted(removed) == sorted([P1, P2])
    assert index.exists(P1, SUBJECT) is False
    assert index.exists(P2, SUBJECT) is False
    assert index.profilers(SUBJECT) == []
    assert index.exists(P1, OTHER_SUBJECT) is True
    assert index.drop_subject(SUBJECT) == []


def test_load_rebuilds_consistent_listings(index):
    profiles = {(P1, SUBJECT): REC, (P2, SUBJECT): REC}
    # stale entry for P3 and a duplicate P1; P2 missing from the list
    index.load(profiles, {SUBJECT: [P1, P3, P1]})
    assert index.profilers(SUBJECT) == [P1, P2]
    assert index.listings() == {SUBJECT: [P1, P2]}
