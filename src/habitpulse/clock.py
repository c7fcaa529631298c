"""Clock sources for the streak and statistics engines."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Supplies the current instant."""

    def now(self) -> datetime:  # pragma: no cover - interface
        """Return the current timezone-aware instant."""
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class FixedClock:
    """Clock pinned to a single instant.

    Used by tests and to snapshot "now" for the duration of one logical
    operation so every habit in a bulk pass sees the same day.
    """

    instant: datetime

    def now(self) -> datetime:
        if self.instant.tzinfo is None:
            return self.instant.replace(tzinfo=timezone.utc)
        return self.instant


def snapshot(clock: Clock) -> FixedClock:
    """Freeze ``clock`` at its current reading."""

    return FixedClock(clock.now())


__all__ = ["Clock", "FixedClock", "SystemClock", "snapshot"]
