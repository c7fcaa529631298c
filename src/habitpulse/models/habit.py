"""Habit tracking data structures."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Habit(SQLModel, table=True):
    """A user-defined habit and its cadence."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    color: str = Field(default="#26A69A", max_length=16)
    icon: str = Field(default="check-circle", max_length=40)
    category: str = Field(default="other", max_length=40)
    frequency: str = Field(default="daily", max_length=16)
    # Weekday indices, 0=Sunday .. 6=Saturday. Only read for weekly habits.
    target_days: list[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    target_count: Optional[int] = Field(default=None)
    reminder_time: Optional[str] = Field(default=None, max_length=5)
    # Stamped from the caller's clock by services.habits.create_habit when unset.
    created_at: Optional[datetime] = Field(default=None, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    sort_order: int = Field(default=0, nullable=False, index=True)
    completion_percentage: int = Field(default=0, nullable=False)


class HabitEntry(SQLModel, table=True):
    """Completion record for one habit on one UTC calendar day."""

    __tablename__: ClassVar[str] = "habit_entry"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_entry_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    date: str = Field(nullable=False, max_length=10, index=True)
    completed: bool = Field(default=False, nullable=False)
    completed_at: Optional[datetime] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=500)


class HabitStreak(SQLModel, table=True):
    """Cached streak figures, always reproducible from the entry history."""

    __tablename__: ClassVar[str] = "habit_streak"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    current_streak: int = Field(default=0, nullable=False)
    longest_streak: int = Field(default=0, nullable=False)
    last_updated: datetime = Field(default_factory=_utcnow, nullable=False)
