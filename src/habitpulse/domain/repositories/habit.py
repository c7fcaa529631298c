"""Completion store protocol consumed by the streak and statistics engines."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ...models.habit import Habit, HabitEntry, HabitStreak


class CompletionStore(Protocol):
    """Durable mapping of habits, their daily entries and cached streaks."""

    def get_habit(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_habits(self) -> list[Habit]:
        """List every habit in user order (``sort_order`` then id)."""
        ...

    def add_habit(self, habit: Habit) -> Habit:
        """Create a new habit."""
        ...

    def update_habit(self, habit: Habit) -> Habit:
        """Persist an edited habit definition."""
        ...

    def reorder_habits(self, habit_ids: Sequence[int]) -> None:
        """Store the given order as each habit's ``sort_order``."""
        ...

    def delete_habit_cascade(self, habit_id: int) -> None:
        """Delete a habit with its entries and streak in one transaction."""
        ...

    # Habit entry operations
    def get_entry(self, habit_id: int, day: str) -> Optional[HabitEntry]:
        """Get the entry for one habit on one day."""
        ...

    def list_entries(self, habit_id: int) -> list[HabitEntry]:
        """All entries for a habit, in no particular order."""
        ...

    def list_entries_for_date(self, day: str) -> list[HabitEntry]:
        """Entries of every habit recorded on ``day``."""
        ...

    def upsert_entry(self, entry: HabitEntry) -> HabitEntry:
        """Insert or replace the entry keyed by (habit_id, date)."""
        ...

    # Streak operations
    def get_streak(self, habit_id: int) -> Optional[HabitStreak]:
        """Cached streak for a habit."""
        ...

    def list_streaks(self) -> list[HabitStreak]:
        """Every cached streak."""
        ...

    def upsert_streak(self, streak: HabitStreak) -> HabitStreak:
        """Insert or replace the streak keyed by habit_id."""
        ...

    def clear_all(self) -> None:
        """Remove all habits, entries and streaks."""
        ...
