"""Calendar-day helpers shared by the streak and statistics engines.

Every helper here works on UTC calendar days expressed as ``YYYY-MM-DD`` keys,
the same format stored on ``HabitEntry.date``. Local offsets are normalized to
UTC before a key is taken, so "today", "yesterday" and enumerated target days
always agree on where midnight falls.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator

from .clock import Clock

DAY_KEY_FORMAT = "%Y-%m-%d"

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


def day_key(instant: datetime | date) -> str:
    """Return the UTC calendar-day key for ``instant``.

    Naive datetimes are taken to already be in UTC (SQLite drops tzinfo on
    round-trip). Plain ``date`` values are formatted as-is.
    """

    if isinstance(instant, datetime):
        if instant.tzinfo is not None:
            instant = instant.astimezone(timezone.utc)
        return instant.date().isoformat()
    return instant.isoformat()


def parse_day_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` key into a date."""

    try:
        parsed = datetime.strptime(key, DAY_KEY_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid day key: {key!r}") from exc
    # strptime also accepts unpadded fields such as "2024-1-7".
    if parsed.isoformat() != key:
        raise ValueError(f"Invalid day key: {key!r}")
    return parsed


def as_utc(instant: datetime) -> datetime:
    """Return ``instant`` as an aware UTC datetime; naive values are taken as UTC."""

    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def today(clock: Clock) -> str:
    """Current day key according to ``clock``."""

    return day_key(clock.now())


def shift_day(key: str, days: int) -> str:
    """Move a day key forwards (or backwards for negative ``days``)."""

    return (parse_day_key(key) + timedelta(days=days)).isoformat()


def days_between(start: str, end: str) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if reversed)."""

    return (parse_day_key(end) - parse_day_key(start)).days


def validate_weekday(index: int) -> int:
    """Reject weekday indices outside 0 (Sunday) .. 6 (Saturday)."""

    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= 6:
        raise ValueError(f"Weekday index must be an integer in 0..6, got {index!r}")
    return index


def weekday_name(index: int) -> str:
    return WEEKDAY_NAMES[validate_weekday(index)]


def weekday_index(key: str) -> int:
    """Weekday of a day key with 0=Sunday .. 6=Saturday."""

    return parse_day_key(key).isoweekday() % 7


def iter_days(start: str, end: str) -> Iterator[str]:
    """Yield every day key from ``start`` to ``end`` inclusive."""

    cursor = parse_day_key(start)
    stop = parse_day_key(end)
    step = timedelta(days=1)
    while cursor <= stop:
        yield cursor.isoformat()
        cursor += step


def last_n_days(end: str, count: int) -> list[str]:
    """The ``count`` day keys ending at ``end``, oldest first."""

    if count < 1:
        raise ValueError("count must be at least 1")
    return list(iter_days(shift_day(end, -(count - 1)), end))


def enumerate_target_days(start: str, end: str, target_days: Iterable[int]) -> list[str]:
    """Chronological day keys in ``[start, end]`` falling on one of ``target_days``."""

    wanted = {validate_weekday(day) for day in target_days}
    if not wanted:
        return []
    return [key for key in iter_days(start, end) if weekday_index(key) in wanted]


__all__ = [
    "as_utc",
    "DAY_KEY_FORMAT",
    "WEEKDAY_NAMES",
    "day_key",
    "days_between",
    "enumerate_target_days",
    "iter_days",
    "last_n_days",
    "parse_day_key",
    "shift_day",
    "today",
    "validate_weekday",
    "weekday_index",
    "weekday_name",
]
