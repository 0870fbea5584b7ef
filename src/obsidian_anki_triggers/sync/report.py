"""Aggregated outcome of a synchronization run."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class SyncReport:
    """Counts and messages accumulated while synchronizing cards.

    Counts only ever grow and errors are append-only. Each bucket builds its
    own report; the engine merges them afterwards in bucket order.
    """

    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    unattributed: int = 0
    errors: list[str] = field(default_factory=list)
    decks_created: set[str] = field(default_factory=set)

    def record_created(self, count: int = 1) -> None:
        self.created += count

    def record_updated(self, count: int = 1) -> None:
        self.updated += count

    def record_skipped(self, count: int = 1) -> None:
        self.skipped += count

    def record_failed(self, message: str | None = None, count: int = 1) -> None:
        self.failed += count
        if message:
            self.errors.append(message)

    def record_unattributed(self, count: int = 1) -> None:
        self.unattributed += count

    def record_deck_created(self, deck_name: str) -> None:
        self.decks_created.add(deck_name)

    def merge(self, other: SyncReport) -> SyncReport:
        """Fold ``other`` into this report and return self."""
        self.created += other.created
        self.updated += other.updated
        self.skipped += other.skipped
        self.failed += other.failed
        self.unattributed += other.unattributed
        self.errors.extend(other.errors)
        self.decks_created |= other.decks_created
        return self

    @classmethod
    def combine(cls, reports: Iterable[SyncReport]) -> SyncReport:
        total = cls()
        for report in reports:
            total.merge(report)
        return total

    @property
    def total_processed(self) -> int:
        return self.created + self.updated + self.skipped + self.failed

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "unattributed": self.unattributed,
            "errors": list(self.errors),
            "decks_created": sorted(self.decks_created),
        }
