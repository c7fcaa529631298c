"""Completion-rate statistics and dashboard aggregates.

Due days are decided by ``models.frequency.is_due``, the same predicate the
streak engine's weekly scan is built on, so a displayed percentage never
disagrees with the displayed streak about which days counted.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..clock import Clock, snapshot
from ..config import BaseConfig, completion_window_days, top_streaks_limit
from ..dates import day_key, last_n_days
from ..domain.repositories import CompletionStore
from ..models.frequency import first_tracked_day, frequency_of, is_due
from ..models.habit import Habit, HabitStreak
from .streaks import completed_days

logger = logging.getLogger(__name__)

SERIES_DAYS = 30
WEEK_DAYS = 7
MONTH_DAYS = 30
WEEKS_PER_MONTH = 4


@dataclass(frozen=True, slots=True)
class TopStreak:
    habit_id: int
    habit_name: str
    streak: int
    color: str


@dataclass(frozen=True, slots=True)
class DashboardData:
    """Aggregates shown on the home screen."""

    total_habits: int
    active_habits: int
    today_completions: int
    today_target: int
    weekly_progress: float
    monthly_progress: float
    top_streaks: list[TopStreak] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class HabitStats:
    """Per-habit counters for the detail view."""

    habit_id: int
    total_completions: int
    weekly_completions: int
    monthly_completions: int
    completion_rate: float
    average_weekly_completions: float
    streak: HabitStreak


def whole_percentage(part: int, whole: int) -> int:
    """Integer percentage, rounding halves up; 0 when ``whole`` is 0."""

    if whole <= 0:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


def ratio_percentage(part: int, whole: int) -> float:
    """Percentage on the 0-100 scale rounded to two decimals; 0.0 when ``whole`` is 0."""

    if whole <= 0:
        return 0.0
    return round(100 * part / whole, 2)


def tally_due(habit: Habit, done: set[str], days: Iterable[str]) -> tuple[int, int]:
    """Return (due, completed_and_due) for ``habit`` over ``days``."""

    frequency = frequency_of(habit)
    first_day = first_tracked_day(habit)
    due = hit = 0
    for day in days:
        if not is_due(frequency, day, created_on=first_day):
            continue
        due += 1
        if day in done:
            hit += 1
    return due, hit


def _resolve_window(window_days: Optional[int], config: Optional[BaseConfig]) -> int:
    if window_days is not None:
        return window_days
    if config is not None:
        return config.COMPLETION_WINDOW_DAYS
    return completion_window_days()


def completion_percentage(
    store: CompletionStore,
    habit_id: int,
    clock: Clock,
    window_days: Optional[int] = None,
    *,
    config: Optional[BaseConfig] = None,
) -> int:
    """Share of due days completed over the last ``window_days`` days, as 0-100.

    ``window_days`` defaults to ``config.COMPLETION_WINDOW_DAYS``, or to the
    ``HABITPULSE_COMPLETION_WINDOW_DAYS`` setting when no config is given.
    A missing habit, or a window with no due days, yields 0.
    """

    window_days = _resolve_window(window_days, config)
    if window_days < 1:
        raise ValueError("window_days must be at least 1")

    days = last_n_days(day_key(clock.now()), window_days)
    habit = store.get_habit(habit_id)
    if habit is None:
        return 0

    due, hit = tally_due(habit, completed_days(store.list_entries(habit_id)), days)
    return whole_percentage(hit, due)


def dashboard(
    store: CompletionStore,
    clock: Clock,
    *,
    top_n: Optional[int] = None,
    config: Optional[BaseConfig] = None,
) -> DashboardData:
    """Aggregate today's progress, rolling ratios and the top streaks.

    ``top_n`` defaults to ``config.TOP_STREAKS`` (or ``HABITPULSE_TOP_STREAKS``).
    """

    if top_n is None:
        top_n = config.TOP_STREAKS if config is not None else top_streaks_limit()
    current_day = day_key(clock.now())
    habits = store.list_habits()
    active = [habit for habit in habits if habit.is_active]
    due_today = [
        habit
        for habit in active
        if is_due(frequency_of(habit), current_day, created_on=first_tracked_day(habit))
    ]

    completed_today = {
        entry.habit_id for entry in store.list_entries_for_date(current_day) if entry.completed
    }
    today_completions = sum(1 for habit in due_today if habit.id in completed_today)

    week = last_n_days(current_day, WEEK_DAYS)
    month = last_n_days(current_day, MONTH_DAYS)
    week_due = week_hit = month_due = month_hit = 0
    for habit in active:
        done = completed_days(store.list_entries(habit.id))
        due, hit = tally_due(habit, done, week)
        week_due += due
        week_hit += hit
        due, hit = tally_due(habit, done, month)
        month_due += due
        month_hit += hit

    current_by_habit = {streak.habit_id: streak.current_streak for streak in store.list_streaks()}
    # sorted() is stable, so equal streaks keep the user's habit order.
    ranked = sorted(habits, key=lambda habit: -current_by_habit.get(habit.id, 0))
    top_streaks = [
        TopStreak(
            habit_id=habit.id,
            habit_name=habit.name,
            streak=current_by_habit.get(habit.id, 0),
            color=habit.color,
        )
        for habit in ranked[: max(top_n, 0)]
    ]

    return DashboardData(
        total_habits=len(habits),
        active_habits=len(due_today),
        today_completions=today_completions,
        today_target=len(due_today),
        weekly_progress=ratio_percentage(week_hit, week_due),
        monthly_progress=ratio_percentage(month_hit, month_due),
        top_streaks=top_streaks,
    )


def habit_stats(store: CompletionStore, habit_id: int, clock: Clock) -> Optional[HabitStats]:
    """Completion counters and the cached streak for one habit."""

    now = clock.now()
    if store.get_habit(habit_id) is None:
        return None

    entries = store.list_entries(habit_id)
    done = completed_days(entries)
    current_day = day_key(now)
    weekly = len(done.intersection(last_n_days(current_day, WEEK_DAYS)))
    monthly = len(done.intersection(last_n_days(current_day, MONTH_DAYS)))

    streak = store.get_streak(habit_id)
    if streak is None:
        streak = HabitStreak(
            habit_id=habit_id, current_streak=0, longest_streak=0, last_updated=now
        )

    return HabitStats(
        habit_id=habit_id,
        total_completions=len(done),
        weekly_completions=weekly,
        monthly_completions=monthly,
        completion_rate=ratio_percentage(len(done), len(entries)),
        average_weekly_completions=round(monthly / WEEKS_PER_MONTH, 2),
        streak=streak,
    )


def completion_series(
    store: CompletionStore,
    habit_id: int,
    clock: Clock,
    days: int = SERIES_DAYS,
) -> list[tuple[str, bool]]:
    """``(day_key, completed)`` pairs for the last ``days`` days, oldest first."""

    window = last_n_days(day_key(clock.now()), days)
    done = completed_days(store.list_entries(habit_id))
    return [(day, day in done) for day in window]


def weekly_completion_data(store: CompletionStore, habit_id: int, clock: Clock) -> list[int]:
    """Seven 0/1 flags for the past week ending today, oldest first."""

    return [int(completed) for _, completed in completion_series(store, habit_id, clock, WEEK_DAYS)]


def refresh_completion_percentages(
    store: CompletionStore,
    clock: Clock,
    window_days: Optional[int] = None,
    *,
    config: Optional[BaseConfig] = None,
) -> list[Habit]:
    """Recompute and persist each habit's cached ``completion_percentage``."""

    window_days = _resolve_window(window_days, config)
    frozen = snapshot(clock)
    updated: list[Habit] = []
    for habit in store.list_habits():
        habit.completion_percentage = completion_percentage(store, habit.id, frozen, window_days)
        updated.append(store.update_habit(habit))
    logger.info("Refreshed completion percentages for %d habits", len(updated))
    return updated


__all__ = [
    "DashboardData",
    "HabitStats",
    "TopStreak",
    "completion_percentage",
    "completion_series",
    "dashboard",
    "habit_stats",
    "ratio_percentage",
    "refresh_completion_percentages",
    "tally_due",
    "weekly_completion_data",
    "whole_percentage",
]
