"""Pytest configuration and shared fixtures for HabitPulse tests.

This module provides database fixtures, a pinned clock and test data factories
for exercising the streak and statistics engines against a throwaway SQLite
database.
"""

from __future__ import annotations

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import pytest
from sqlmodel import SQLModel, create_engine

from habitpulse.clock import FixedClock
from habitpulse.infra.database import create_session_factory
from habitpulse.infra.repositories import SQLModelCompletionStore

# Import all models to ensure they're registered with SQLModel metadata
from habitpulse.models import Habit, HabitEntry, HabitStreak  # noqa: F401
from habitpulse.services.habits import create_habit

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one used outside tests."""
    return create_session_factory(db_engine)


@pytest.fixture(scope="function")
def store(session_factory) -> SQLModelCompletionStore:
    return SQLModelCompletionStore(session_factory)


# =============================================================================
# Clock
# =============================================================================


def utc(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to noon UTC on Wednesday 2024-01-10."""
    return FixedClock(utc(2024, 1, 10))


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(store, clock):
    """Factory for creating persisted habits through the lifecycle service.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Test Habit",
        frequency: str = "daily",
        target_days: Iterable[int] = (),
        created_at: datetime | None = None,
        is_active: bool = True,
        color: str = "#26A69A",
    ) -> Habit:
        habit = Habit(
            name=name,
            frequency=frequency,
            target_days=list(target_days),
            created_at=created_at or utc(2024, 1, 1, 0, 0),
            is_active=is_active,
            color=color,
        )
        return create_habit(store, habit, clock)

    return _create_habit


@pytest.fixture
def mark_days(store):
    """Upsert entries for a habit on the given day keys.

    Returns:
        Callable: ``mark(habit_id, *days, completed=True)``
    """

    def _mark(habit_id: int, *days: str, completed: bool = True) -> None:
        for day in days:
            store.upsert_entry(HabitEntry(habit_id=habit_id, date=day, completed=completed))

    return _mark


def entries_for(*days: str, completed: bool = True, habit_id: int = 1) -> list[HabitEntry]:
    """Build unsaved entries for pure-function tests."""
    return [HabitEntry(habit_id=habit_id, date=day, completed=completed) for day in days]
