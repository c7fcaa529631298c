"""Closed set of habit cadences and the shared due-day predicate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..dates import day_key, parse_day_key, validate_weekday, weekday_index
from .habit import Habit

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_CUSTOM = "custom"
FREQUENCY_CHOICES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCY_CUSTOM)


@dataclass(frozen=True, slots=True)
class Daily:
    """Due every day."""


@dataclass(frozen=True, slots=True)
class Weekly:
    """Due on the listed weekdays (0=Sunday .. 6=Saturday)."""

    target_days: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for day in self.target_days:
            validate_weekday(day)


@dataclass(frozen=True, slots=True)
class Custom:
    """Declared but not scheduled yet; evaluated like ``Daily``."""

    target_count: Optional[int] = None


Frequency = Union[Daily, Weekly, Custom]


def frequency_of(habit: Habit) -> Frequency:
    """Build the cadence variant stored on ``habit``."""

    tag = (habit.frequency or FREQUENCY_DAILY).strip().lower()
    if tag == FREQUENCY_DAILY:
        return Daily()
    if tag == FREQUENCY_WEEKLY:
        return Weekly(frozenset(habit.target_days or ()))
    if tag == FREQUENCY_CUSTOM:
        return Custom(habit.target_count)
    raise ValueError(f"Unknown habit frequency: {habit.frequency!r}")


def first_tracked_day(habit: Habit) -> str:
    """Day key of the first day ``habit`` can be tracked."""

    if habit.created_at is None:
        raise ValueError(f"Habit {habit.id!r} has no created_at")
    return day_key(habit.created_at)


def is_due(frequency: Frequency, day: str, *, created_on: Optional[str] = None) -> bool:
    """Return True when a habit with ``frequency`` expects completion on ``day``.

    Days before ``created_on`` are never due.
    """

    if created_on is not None and parse_day_key(day) < parse_day_key(created_on):
        return False
    if isinstance(frequency, (Daily, Custom)):
        return True
    if isinstance(frequency, Weekly):
        return weekday_index(day) in frequency.target_days
    raise TypeError(f"Unsupported frequency: {frequency!r}")


__all__ = [
    "Custom",
    "Daily",
    "FREQUENCY_CHOICES",
    "FREQUENCY_CUSTOM",
    "FREQUENCY_DAILY",
    "FREQUENCY_WEEKLY",
    "Frequency",
    "Weekly",
    "first_tracked_day",
    "frequency_of",
    "is_due",
]
