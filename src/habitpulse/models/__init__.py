"""SQLModel table exports."""

from .frequency import Custom, Daily, Frequency, Weekly, first_tracked_day, frequency_of, is_due
from .habit import Habit, HabitEntry, HabitStreak

__all__ = [
    "Custom",
    "Daily",
    "Frequency",
    "Habit",
    "HabitEntry",
    "HabitStreak",
    "Weekly",
    "first_tracked_day",
    "frequency_of",
    "is_due",
]
