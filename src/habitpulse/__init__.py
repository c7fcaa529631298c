"""HabitPulse: streak and completion statistics for habit tracking."""

from __future__ import annotations

from .clock import Clock, FixedClock, SystemClock
from .config import BaseConfig, DevConfig, TestConfig

__all__ = ["BaseConfig", "Clock", "DevConfig", "FixedClock", "SystemClock", "TestConfig"]
