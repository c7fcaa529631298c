"""SQLModel implementation of the completion store."""

from __future__ import annotations

from typing import Callable, ContextManager, Optional, Sequence

from sqlmodel import Session, select

from ...dates import as_utc, parse_day_key
from ...models.habit import Habit, HabitEntry, HabitStreak

SessionFactory = Callable[[], ContextManager[Session]]


class SQLModelCompletionStore:
    """SQLModel-based completion store.

    Every method runs in its own session, so a write is committed before the
    call returns. Database errors propagate to the caller untouched.
    Datetimes are written as aware UTC values; naive ones are taken as UTC.
    """

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_habit(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_habits(self) -> list[Habit]:
        """List every habit in user order."""
        with self.session_factory() as session:
            statement = select(Habit).order_by(Habit.sort_order, Habit.id)  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def add_habit(self, habit: Habit) -> Habit:
        """Create a new habit."""
        if habit.created_at is not None:
            habit.created_at = as_utc(habit.created_at)
        with self.session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update_habit(self, habit: Habit) -> Habit:
        """Persist an edited habit definition."""
        if habit.created_at is not None:
            habit.created_at = as_utc(habit.created_at)
        with self.session_factory() as session:
            habit = session.merge(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def reorder_habits(self, habit_ids: Sequence[int]) -> None:
        """Store the given order as each habit's ``sort_order``."""
        with self.session_factory() as session:
            for position, habit_id in enumerate(habit_ids):
                habit = session.get(Habit, habit_id)
                if habit is None:
                    continue
                habit.sort_order = position
                session.add(habit)
            session.commit()

    def delete_habit_cascade(self, habit_id: int) -> None:
        """Delete a habit, its entries and its streak in one transaction."""
        with self.session_factory() as session:
            entries = session.exec(select(HabitEntry).where(HabitEntry.habit_id == habit_id)).all()
            for entry in entries:
                session.delete(entry)
            streak = session.get(HabitStreak, habit_id)
            if streak:
                session.delete(streak)
            habit = session.get(Habit, habit_id)
            if habit:
                session.delete(habit)
            session.commit()

    # Habit entry operations
    def get_entry(self, habit_id: int, day: str) -> Optional[HabitEntry]:
        """Get the entry for one habit on one day."""
        with self.session_factory() as session:
            statement = (
                select(HabitEntry)
                .where(HabitEntry.habit_id == habit_id)
                .where(HabitEntry.date == day)
            )
            obj = session.exec(statement).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_entries(self, habit_id: int) -> list[HabitEntry]:
        """All entries for a habit."""
        with self.session_factory() as session:
            rows = list(
                session.exec(select(HabitEntry).where(HabitEntry.habit_id == habit_id)).all()
            )
            session.expunge_all()
            return rows

    def list_entries_for_date(self, day: str) -> list[HabitEntry]:
        """Entries of every habit recorded on ``day``."""
        with self.session_factory() as session:
            rows = list(session.exec(select(HabitEntry).where(HabitEntry.date == day)).all())
            session.expunge_all()
            return rows

    def upsert_entry(self, entry: HabitEntry) -> HabitEntry:
        """Insert or replace the entry keyed by (habit_id, date)."""
        parse_day_key(entry.date)
        if entry.completed_at is not None:
            entry.completed_at = as_utc(entry.completed_at)
        with self.session_factory() as session:
            existing = session.exec(
                select(HabitEntry)
                .where(HabitEntry.habit_id == entry.habit_id)
                .where(HabitEntry.date == entry.date)
            ).first()

            if existing:
                existing.completed = entry.completed
                existing.completed_at = entry.completed_at
                existing.notes = entry.notes
                entry = existing
            session.add(entry)
            session.commit()
            session.refresh(entry)
            session.expunge(entry)
            return entry

    # Streak operations
    def get_streak(self, habit_id: int) -> Optional[HabitStreak]:
        """Cached streak for a habit."""
        with self.session_factory() as session:
            obj = session.get(HabitStreak, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_streaks(self) -> list[HabitStreak]:
        """Every cached streak."""
        with self.session_factory() as session:
            rows = list(session.exec(select(HabitStreak)).all())
            session.expunge_all()
            return rows

    def upsert_streak(self, streak: HabitStreak) -> HabitStreak:
        """Insert or replace the streak keyed by habit_id."""
        streak.last_updated = as_utc(streak.last_updated)
        with self.session_factory() as session:
            existing = session.get(HabitStreak, streak.habit_id)
            if existing:
                existing.current_streak = streak.current_streak
                existing.longest_streak = streak.longest_streak
                existing.last_updated = streak.last_updated
                streak = existing
            session.add(streak)
            session.commit()
            session.refresh(streak)
            session.expunge(streak)
            return streak

    def clear_all(self) -> None:
        """Remove all habits, entries and streaks."""
        with self.session_factory() as session:
            for model in (HabitEntry, HabitStreak, Habit):
                for row in session.exec(select(model)).all():
                    session.delete(row)
            session.commit()
