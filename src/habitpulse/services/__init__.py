"""Service module exports."""

from . import habits, stats, streaks

__all__ = ["habits", "stats", "streaks"]
