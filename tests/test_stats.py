"""Tests for completion percentages, per-habit stats and the dashboard."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from habitpulse.clock import FixedClock
from habitpulse.config import TestConfig
from habitpulse.dates import last_n_days
from habitpulse.models import Habit
from habitpulse.services.stats import (
    completion_percentage,
    completion_series,
    dashboard,
    habit_stats,
    ratio_percentage,
    refresh_completion_percentages,
    tally_due,
    weekly_completion_data,
    whole_percentage,
)
from habitpulse.services.streaks import recompute_all_streaks
from tests.conftest import utc


class TestRounding:
    @pytest.mark.parametrize(
        ("part", "whole", "expected"),
        [(0, 0, 0), (2, 3, 67), (1, 8, 13), (1, 3, 33), (5, 5, 100)],
    )
    def test_whole_percentage(self, part, whole, expected):
        assert whole_percentage(part, whole) == expected

    def test_ratio_percentage_two_decimals(self):
        assert ratio_percentage(1, 3) == 33.33
        assert ratio_percentage(3, 8) == 37.5
        assert ratio_percentage(4, 0) == 0.0


class TestTallyDue:
    def test_weekly_one_day_counts_only_due_days(self):
        habit = Habit(
            name="Long run",
            frequency="weekly",
            target_days=[1],
            created_at=datetime(2023, 1, 1, tzinfo=timezone.utc),
        )
        window = last_n_days("2024-01-30", 30)
        due, hit = tally_due(habit, {"2024-01-08", "2024-01-09"}, window)
        # Mondays 01, 08, 15, 22, 29
        assert due == 5
        assert hit == 1

    def test_days_before_creation_are_not_due(self):
        habit = Habit(name="New", created_at=datetime(2024, 1, 28, tzinfo=timezone.utc))
        due, _ = tally_due(habit, set(), last_n_days("2024-01-30", 30))
        assert due == 3


class TestCompletionPercentage:
    def test_daily_half_completed(self, store, habit_factory, mark_days):
        habit = habit_factory(name="Read", created_at=utc(2023, 12, 1))
        window = last_n_days("2024-01-30", 30)
        mark_days(habit.id, *window[::2])

        assert completion_percentage(store, habit.id, FixedClock(utc(2024, 1, 30))) == 50

    def test_uncompleted_entries_do_not_count(self, store, habit_factory, mark_days):
        habit = habit_factory(name="Read", created_at=utc(2023, 12, 1))
        mark_days(habit.id, *last_n_days("2024-01-10", 30), completed=False)

        assert completion_percentage(store, habit.id, FixedClock(utc(2024, 1, 10))) == 0

    def test_window_clamped_to_creation(self, store, habit_factory, mark_days, clock):
        habit = habit_factory(name="Fresh", created_at=utc(2024, 1, 6, 0, 0))
        mark_days(habit.id, "2024-01-06", "2024-01-07", "2024-01-08", "2024-01-09", "2024-01-10")

        assert completion_percentage(store, habit.id, clock) == 100

    def test_weekly_uses_target_days(self, store, habit_factory, mark_days, clock):
        habit = habit_factory(name="Gym", frequency="weekly", target_days=[1, 3])
        # Due: 01, 03, 08, 10. Completed two of them plus an off day.
        mark_days(habit.id, "2024-01-01", "2024-01-08", "2024-01-09")

        assert completion_percentage(store, habit.id, clock) == 50

    def test_weekly_without_target_days_is_zero(self, store, habit_factory, mark_days, clock):
        habit = habit_factory(name="Unscheduled", frequency="weekly", target_days=[])
        mark_days(habit.id, "2024-01-09", "2024-01-10")

        assert completion_percentage(store, habit.id, clock) == 0

    def test_custom_window(self, store, habit_factory, mark_days, clock):
        habit = habit_factory(name="Water")
        mark_days(habit.id, "2024-01-10")

        assert completion_percentage(store, habit.id, clock, window_days=4) == 25

    def test_missing_habit_is_zero(self, store, clock):
        assert completion_percentage(store, 404, clock) == 0

    def test_window_must_be_positive(self, store, habit_factory, clock):
        habit = habit_factory()
        with pytest.raises(ValueError):
            completion_percentage(store, habit.id, clock, window_days=0)


class TestDashboard:
    @pytest.fixture
    def seeded(self, store, habit_factory, mark_days, clock):
        """Three habits: daily, Monday-only weekly, and an inactive daily."""
        daily = habit_factory(name="Meditate", color="#42A5F5")
        weekly = habit_factory(name="Budget review", frequency="weekly", target_days=[1])
        inactive = habit_factory(name="Old habit", is_active=False)

        mark_days(daily.id, "2024-01-09", "2024-01-10")
        mark_days(weekly.id, "2024-01-08")
        mark_days(inactive.id, "2024-01-10")
        recompute_all_streaks(store, clock)
        return daily, weekly, inactive

    def test_today_counts_only_active_and_due(self, store, seeded, clock):
        data = dashboard(store, clock)

        assert data.total_habits == 3
        # Wednesday: the Monday habit is not due and the inactive one is excluded.
        assert data.active_habits == 1
        assert data.today_target == 1
        assert data.today_completions == 1

    def test_rolling_ratios(self, store, seeded, clock):
        data = dashboard(store, clock)

        # Week: daily 2/7, weekly 1/1. Month (from creation on 01-01): daily 2/10, weekly 1/2.
        assert data.weekly_progress == 37.5
        assert data.monthly_progress == 25.0

    def test_top_streaks_ranked_with_stable_ties(self, store, seeded, clock):
        daily, weekly, inactive = seeded

        data = dashboard(store, clock, top_n=2)

        assert [(t.habit_id, t.streak) for t in data.top_streaks] == [(daily.id, 2), (weekly.id, 1)]
        assert data.top_streaks[0].habit_name == "Meditate"
        assert data.top_streaks[0].color == "#42A5F5"

    def test_empty_store(self, store, clock):
        data = dashboard(store, clock)

        assert data.total_habits == 0
        assert data.today_target == 0
        assert data.weekly_progress == 0.0
        assert data.monthly_progress == 0.0
        assert data.top_streaks == []


class TestHabitStats:
    def test_counters(self, store, habit_factory, mark_days, clock):
        habit = habit_factory(name="Journal")
        mark_days(habit.id, "2024-01-02", "2024-01-05", "2024-01-10")
        mark_days(habit.id, "2024-01-09", completed=False)
        recompute_all_streaks(store, clock)

        stats = habit_stats(store, habit.id, clock)

        assert stats.total_completions == 3
        assert stats.weekly_completions == 2
        assert stats.monthly_completions == 3
        assert stats.completion_rate == 75.0
        assert stats.average_weekly_completions == 0.75
        assert stats.streak.current_streak == 1

    def test_missing_habit(self, store, clock):
        assert habit_stats(store, 12, clock) is None

    def test_weekly_completion_data(self, store, habit_factory, mark_days, clock):
        habit = habit_factory(name="Stretch")
        mark_days(habit.id, "2024-01-08", "2024-01-10")

        assert weekly_completion_data(store, habit.id, clock) == [0, 0, 0, 0, 1, 0, 1]

    def test_completion_series(self, store, habit_factory, mark_days, clock):
        habit = habit_factory(name="Stretch")
        mark_days(habit.id, "2024-01-10")

        series = completion_series(store, habit.id, clock, days=3)

        assert series == [("2024-01-08", False), ("2024-01-09", False), ("2024-01-10", True)]

    def test_refresh_completion_percentages(self, store, habit_factory, mark_days, clock):
        habit = habit_factory(name="Walk")
        mark_days(habit.id, "2024-01-06", "2024-01-07", "2024-01-08", "2024-01-09", "2024-01-10")

        refresh_completion_percentages(store, clock)

        assert store.get_habit(habit.id).completion_percentage == 50


class TestConfiguredDefaults:
    def test_window_from_config(self, store, habit_factory, mark_days, clock, tmp_path):
        config = TestConfig(tmp_path)
        config.COMPLETION_WINDOW_DAYS = 2
        habit = habit_factory(name="Water")
        mark_days(habit.id, "2024-01-10")

        assert completion_percentage(store, habit.id, clock, config=config) == 50

    def test_window_from_environment(self, store, habit_factory, mark_days, clock, monkeypatch):
        monkeypatch.setenv("HABITPULSE_COMPLETION_WINDOW_DAYS", "5")
        habit = habit_factory(name="Water")
        mark_days(habit.id, "2024-01-10")

        assert completion_percentage(store, habit.id, clock) == 20

    def test_explicit_window_wins_over_config(
        self, store, habit_factory, mark_days, clock, tmp_path
    ):
        config = TestConfig(tmp_path)
        config.COMPLETION_WINDOW_DAYS = 2
        habit = habit_factory(name="Water")
        mark_days(habit.id, "2024-01-10")

        assert completion_percentage(store, habit.id, clock, 4, config=config) == 25

    def test_top_streaks_from_config(self, store, habit_factory, clock, tmp_path):
        config = TestConfig(tmp_path)
        config.TOP_STREAKS = 1
        for name in ("A", "B", "C"):
            habit_factory(name=name)

        assert len(dashboard(store, clock, config=config).top_streaks) == 1

    def test_top_streaks_from_environment(self, store, habit_factory, clock, monkeypatch):
        monkeypatch.setenv("HABITPULSE_TOP_STREAKS", "2")
        for name in ("A", "B", "C"):
            habit_factory(name=name)

        assert len(dashboard(store, clock).top_streaks) == 2

    def test_refresh_uses_configured_window(self, store, habit_factory, mark_days, clock, tmp_path):
        config = TestConfig(tmp_path)
        config.COMPLETION_WINDOW_DAYS = 2
        habit = habit_factory(name="Walk")
        mark_days(habit.id, "2024-01-09", "2024-01-10")

        refresh_completion_percentages(store, clock, config=config)

        assert store.get_habit(habit.id).completion_percentage == 100
