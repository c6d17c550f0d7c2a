"""Mutable state threaded through every reconciliation cycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current UTC timestamp."""

    return datetime.now(tz=UTC)


@dataclass(slots=True)
class LoopState:
    """Counters owned by the reconciliation loop.

    ``tick`` resets to 0 whenever a request is created or updated and grows by
    one per finished cycle otherwise. ``assigned_total`` counts only
    assignments made after ``started_at``.
    """

    started_at: datetime = field(default_factory=utc_now)
    tick: int = 0
    assigned_count: int = 0
    assigned_total: int = 0
    last_error: str | None = None

    def reset_tick(self) -> None:
        self.tick = 0

    def advance_tick(self) -> None:
        self.tick += 1
