"""
Profile index: (profiler, subject) -> profile record, plus the reverse index
subject -> profilers currently holding a profile on it.

A profiler is listed for a subject exactly when its profile on that subject is
live, and at most once. List order is not meaningful: removal swaps the entry
with the last one and pops.
"""

from __future__ import annotations

from typing import Iterator

from identity_registry.core.exceptions import NotFound
from identity_registry.ledger.models import EMPTY_PROFILE, ProfileRecord


class ProfileIndex:
    """Third-party profiles keyed by (profiler, subject)."""

    def __init__(self) -> None:
        self._profiles: dict[tuple[str, str], ProfileRecord] = {}
        self._profilers: dict[str, list[str]] = {}

    def exists(self, profiler: str, subject: str) -> bool:
        return (profiler, subject) in self._profiles

    def get(self, profiler: str, subject: str) -> ProfileRecord:
        """Return the stored profile, or EMPTY_PROFILE when absent."""
        return self._profiles.get((profiler, subject), EMPTY_PROFILE)

    def profilers(self, subject: str) -> list[str]:
        return list(self._profilers.get(subject, ()))

    def create(self, profiler: str, subject: str, record: ProfileRecord) -> bool:
        """
        Store a profile. Re-creating an existing one overwrites its content and
        leaves the reverse index untouched. Returns True if the profile is new.
        """
        key = (profiler, subject)
        is_new = key not in self._profiles
        self._profiles[key] = record
        if is_new:
            self._profilers.setdefault(subject, []).append(profiler)
        return is_new

    def delete(self, profiler: str, subject: str) -> ProfileRecord:
        key = (profiler, subject)
        if key not in self._profiles:
            raise NotFound(
                f"No profile by {profiler} on {subject}",
                profiler=profiler,
                subject=subject,
            )
        record = self._profiles.pop(key)
        self._remove_listing(profiler, subject)
        return record

    def drop_subject(self, subject: str) -> list[str]:
        """Remove every profile on subject and its profiler list; returns the removed profilers."""
        removed = self._profilers.pop(subject, [])
        for profiler in removed:
            self._profiles.pop((profiler, subject), None)
        return removed

    def items(self) -> Iterator[tuple[tuple[str, str], ProfileRecord]]:
        return iter(list(self._profiles.items()))

    def listings(self) -> dict[str, list[str]]:
        return {subject: list(profilers) for subject, profilers in self._profilers.items()}

    def load(self, profiles: dict[tuple[str, str], ProfileRecord], listings: dict[str, list[str]]) -> None:
        """
        Replace contents from a snapshot. Listings are rebuilt from the live
        profiles so a stale or duplicated list cannot break the index invariant.
        """
        self._profiles = dict(profiles)
        self._profilers = {}
        for subject, profilers in listings.items():
            for profiler in profilers:
                if (profiler, subject) in self._profiles and profiler not in self._profilers.get(subject, ()):
                    self._profilers.setdefault(subject, []).append(profiler)
        for profiler, subject in self._profiles:
            if profiler not in self._profilers.get(subject, ()):
                self._profilers.setdefault(subject, []).append(profiler)

    def __len__(self) -> int:
        return len(self._profiles)

    def _remove_listing(self, profiler: str, subject: str) -> None:
        # swap with last and pop; only the first occurrence
        listing = self._profilers.get(subject)
        if not listing:
            return
        for i, entry in enumerate(listing):
            if entry == profiler:
                listing[i] = listing[-1]
                listing.pop()
                break
        if not listing:
            del self._profilers[subject]
