"""Streak engine.

Streaks are always rebuilt from the full entry history rather than patched
incrementally, so a repeated call with unchanged entries yields the same
figures and a frequency edit never leaves stale values behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable, Optional

from ..clock import Clock, snapshot
from ..dates import day_key, days_between, enumerate_target_days, shift_day
from ..domain.repositories import CompletionStore
from ..models.frequency import Custom, Daily, Frequency, Weekly, first_tracked_day, frequency_of
from ..models.habit import Habit, HabitEntry, HabitStreak

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreakResult:
    """Current and longest streak for one habit."""

    current: int = 0
    longest: int = 0


def completed_days(entries: Iterable[HabitEntry]) -> set[str]:
    """Day keys with a completed entry; stored-but-uncompleted entries are dropped."""

    return {entry.date for entry in entries if entry.completed}


def daily_streak(entries: Iterable[HabitEntry], *, today: str) -> StreakResult:
    """Consecutive-day streaks for a habit due every day.

    The current streak survives until the end of the day after the last
    completion: finishing yesterday but not yet today still counts.
    """

    days = sorted(completed_days(entries))
    if not days:
        return StreakResult()

    yesterday = shift_day(today, -1)
    run = longest = current = 0
    previous: Optional[str] = None
    for day in days:
        if previous is not None and days_between(previous, day) == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        if day in (today, yesterday):
            current = run
        previous = day

    # Nothing recent: the chain is broken regardless of earlier runs.
    if days[-1] not in (today, yesterday):
        current = 0

    return StreakResult(current=current, longest=longest)


def weekly_streak(
    entries: Iterable[HabitEntry],
    *,
    target_days: AbstractSet[int],
    created_on: str,
    today: str,
) -> StreakResult:
    """Streaks counted over due weekdays from ``created_on`` through ``today``.

    A missed due day resets the run. An uncompleted ``today`` counts as
    missed; there is no extra same-day adjustment beyond the scan.
    """

    if not target_days:
        return StreakResult()

    done = completed_days(entries)
    run = longest = current = 0
    for day in enumerate_target_days(created_on, today, target_days):
        if day > today:
            break
        if day in done:
            run += 1
            longest = max(longest, run)
            current = run
        else:
            run = 0
            current = 0

    return StreakResult(current=current, longest=longest)


def compute_streak(
    frequency: Frequency,
    entries: Iterable[HabitEntry],
    *,
    created_on: str,
    today: str,
) -> StreakResult:
    """Dispatch to the streak rule for ``frequency``."""

    if isinstance(frequency, (Daily, Custom)):
        return daily_streak(entries, today=today)
    if isinstance(frequency, Weekly):
        return weekly_streak(
            entries,
            target_days=frequency.target_days,
            created_on=created_on,
            today=today,
        )
    raise TypeError(f"Unsupported frequency: {frequency!r}")


def streak_for_habit(habit: Habit, entries: Iterable[HabitEntry], *, today: str) -> StreakResult:
    return compute_streak(
        frequency_of(habit),
        entries,
        created_on=first_tracked_day(habit),
        today=today,
    )


def recompute_streak(store: CompletionStore, habit_id: int, clock: Clock) -> Optional[HabitStreak]:
    """Rebuild and persist the streak for one habit.

    Returns the stored streak, or ``None`` when the habit no longer exists
    (a delete that raced the recomputation).
    """

    now = clock.now()
    habit = store.get_habit(habit_id)
    if habit is None:
        logger.debug("Skipping streak recompute for missing habit %s", habit_id)
        return None

    result = streak_for_habit(habit, store.list_entries(habit_id), today=day_key(now))
    streak = store.upsert_streak(
        HabitStreak(
            habit_id=habit_id,
            current_streak=result.current,
            longest_streak=result.longest,
            last_updated=now,
        )
    )
    logger.debug(
        "Recomputed streak for habit %s: current=%s longest=%s",
        habit_id,
        result.current,
        result.longest,
    )
    return streak


def recompute_all_streaks(store: CompletionStore, clock: Clock) -> list[HabitStreak]:
    """Recompute every habit's streak against a single reading of ``clock``.

    Intended for startup, to repair drift after the day has rolled over or
    entries were edited outside the normal toggle path.
    """

    frozen = snapshot(clock)
    streaks: list[HabitStreak] = []
    for habit in store.list_habits():
        if habit.id is None:
            continue
        streak = recompute_streak(store, habit.id, frozen)
        if streak is not None:
            streaks.append(streak)
    logger.info(
        "Recomputed streaks for %d habits", len(streaks), extra={"today": day_key(frozen.now())}
    )
    return streaks


__all__ = [
    "StreakResult",
    "completed_days",
    "compute_streak",
    "daily_streak",
    "recompute_all_streaks",
    "recompute_streak",
    "streak_for_habit",
    "weekly_streak",
]
