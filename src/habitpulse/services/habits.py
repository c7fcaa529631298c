"""Habit lifecycle orchestration: create, edit, delete and completion toggles."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..clock import Clock, snapshot
from ..dates import as_utc, day_key, parse_day_key
from ..domain.repositories import CompletionStore
from ..models.frequency import FREQUENCY_CHOICES, FREQUENCY_DAILY, frequency_of
from ..models.habit import Habit, HabitEntry, HabitStreak
from .streaks import recompute_all_streaks, recompute_streak

logger = logging.getLogger(__name__)


def _normalize_definition(habit: Habit) -> None:
    """Canonicalize the frequency tag and timestamps before a write.

    Tags are matched the way ``frequency_of`` reads them (trimmed, any case).
    """

    tag = (habit.frequency or FREQUENCY_DAILY).strip().lower()
    if tag not in FREQUENCY_CHOICES:
        raise ValueError(f"Unknown habit frequency: {habit.frequency!r}")
    habit.frequency = tag
    # Builds the variant, which rejects weekday indices outside 0..6.
    frequency_of(habit)
    if habit.created_at is not None:
        # SQLite keeps wall-clock time only; naive values are already UTC.
        habit.created_at = as_utc(habit.created_at)


def create_habit(store: CompletionStore, habit: Habit, clock: Clock) -> Habit:
    """Persist a new habit at the end of the user ordering with a zero streak."""

    _normalize_definition(habit)
    now = clock.now()
    if habit.created_at is None:
        habit.created_at = as_utc(now)
    existing = store.list_habits()
    habit.sort_order = max((h.sort_order for h in existing), default=-1) + 1

    created = store.add_habit(habit)
    store.upsert_streak(
        HabitStreak(habit_id=created.id, current_streak=0, longest_streak=0, last_updated=now)
    )
    logger.info("Created habit %s", created.id, extra={"frequency": created.frequency})
    return created


def update_habit(store: CompletionStore, habit: Habit, clock: Clock) -> Optional[Habit]:
    """Save an edited definition and rebuild its streak.

    Returns ``None`` if the habit was deleted in the meantime.
    """

    _normalize_definition(habit)
    if habit.id is None or store.get_habit(habit.id) is None:
        return None
    updated = store.update_habit(habit)
    recompute_streak(store, updated.id, clock)
    return updated


def delete_habit(store: CompletionStore, habit_id: int) -> None:
    """Remove a habit together with its entries and streak."""

    store.delete_habit_cascade(habit_id)
    logger.info("Deleted habit %s with its entries and streak", habit_id)


def reorder_habits(store: CompletionStore, habit_ids: Sequence[int]) -> None:
    store.reorder_habits(habit_ids)


def set_completion(
    store: CompletionStore,
    habit_id: int,
    completed: bool,
    clock: Clock,
    *,
    day: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[HabitStreak]:
    """Record ``completed`` for ``day`` (default today), then rebuild the streak.

    The entry is committed before the streak is recomputed so the recompute
    reads the new state. Returns the new streak, or ``None`` for a missing habit.
    """

    frozen = snapshot(clock)
    now = frozen.now()
    if day is None:
        day = day_key(now)
    else:
        parse_day_key(day)

    if store.get_habit(habit_id) is None:
        logger.debug("Ignoring completion for missing habit %s", habit_id)
        return None

    store.upsert_entry(
        HabitEntry(
            habit_id=habit_id,
            date=day,
            completed=completed,
            completed_at=now if completed else None,
            notes=notes,
        )
    )
    return recompute_streak(store, habit_id, frozen)


def toggle_completion(
    store: CompletionStore,
    habit_id: int,
    clock: Clock,
    *,
    day: Optional[str] = None,
) -> Optional[HabitStreak]:
    """Flip the completion state of ``day`` (default today)."""

    frozen = snapshot(clock)
    if day is None:
        day = day_key(frozen.now())
    existing = store.get_entry(habit_id, day)
    completed = not (existing is not None and existing.completed)
    notes = existing.notes if existing is not None else None
    return set_completion(store, habit_id, completed, frozen, day=day, notes=notes)


def repair_all_streaks(store: CompletionStore, clock: Clock) -> list[HabitStreak]:
    """Startup pass rebuilding every cached streak."""

    return recompute_all_streaks(store, clock)


def clear_all_data(store: CompletionStore) -> None:
    store.clear_all()
    logger.info("Cleared all habits, entries and streaks")


def streak_message(streak: int) -> str:
    """Short human label for a streak length in days."""

    if streak <= 0:
        return "Start your streak!"
    if streak == 1:
        return "1 day streak"
    if streak < 7:
        return f"{streak} days streak"
    if streak < 30:
        weeks, days = divmod(streak, 7)
        if days == 0:
            return f"{weeks} week{'s' if weeks > 1 else ''} streak"
        return f"{weeks}w {days}d streak"
    months, days = divmod(streak, 30)
    if days == 0:
        return f"{months} month{'s' if months > 1 else ''} streak"
    return f"{months}m {days}d streak"


__all__ = [
    "clear_all_data",
    "create_habit",
    "delete_habit",
    "reorder_habits",
    "repair_all_streaks",
    "set_completion",
    "streak_message",
    "toggle_completion",
    "update_habit",
]
