"""Helpers for "HH:MM" time-of-day strings and half-open intervals."""

from __future__ import annotations

import re

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: str) -> int:
    """Convert a 24-hour ``"HH:MM"`` string to minutes after midnight.

    Raises ``ValueError`` if the string is not a valid time of day.
    """
    m = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if m is None:
        raise ValueError(f"invalid time of day {value!r}, expected HH:MM")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"time of day out of range: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range for a single day: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open overlap test: ``[start1, end1)`` vs ``[start2, end2)``.

    Touching intervals (end1 == start2) do NOT overlap.
    """
    return start1 < end2 and start2 < end1


def duration_minutes(start_time: str, end_time: str) -> int:
    return time_to_minutes(end_time) - time_to_minutes(start_time)


def format_time_display(value: str) -> str:
    """``"13:05"`` -> ``"1:05 PM"``; midnight renders as 12 AM."""
    total = time_to_minutes(value)
    hours, minutes = divmod(total, 60)
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"
