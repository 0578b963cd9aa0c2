# meeting_scheduler/services/time_grid.py
"""
Week-grid geometry: time arithmetic, weekday derivation and block placement.

Everything here is pure. Positions are expressed in minutes and column
fractions; turning them into pixels is the renderer's job.
"""

from __future__ import annotations

from datetime import date as date_type, time, timedelta

from meeting_scheduler.schemas.user import Weekday
from meeting_scheduler.schemas.week_view import GridBox

DEFAULT_START = time(9, 0)
DEFAULT_END = time(10, 0)

_WEEKDAYS = list(Weekday)


class InvalidTimeRangeError(ValueError):
    """
    Raised when a time range does not end strictly after it starts.
    """


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    """
    Convert minutes since midnight to a time. 24:00 is clamped to 23:59.
    """
    if minutes < 0:
        raise ValueError("minutes must be >= 0")
    minutes = min(minutes, 24 * 60 - 1)
    return time(minutes // 60, minutes % 60)


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def ensure_valid_range(start: time, end: time) -> None:
    if start >= end:
        raise InvalidTimeRangeError(
            f"end time {format_time(end)} must be after start time {format_time(start)}"
        )


def ranges_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """
    Half-open overlap test: touching ranges (a_end == b_start) do not overlap.
    """
    return a_start < b_end and a_end > b_start


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------

def weekday_of(day: date_type) -> int:
    """
    Monday-start weekday index (Monday = 0 ... Sunday = 6).

    This is the only place weekday indices are derived; availability lookups
    and the week view both go through it.
    """
    return day.weekday()


def weekday_key(day: date_type) -> Weekday:
    return _WEEKDAYS[weekday_of(day)]


def monday_of(day: date_type) -> date_type:
    return day - timedelta(days=weekday_of(day))


def week_days(monday: date_type) -> list[date_type]:
    return [monday + timedelta(days=offset) for offset in range(7)]


def shift_week(monday: date_type, weeks: int) -> date_type:
    return monday_of(monday) + timedelta(weeks=weeks)


# ---------------------------------------------------------------------------
# Grid helpers
# ---------------------------------------------------------------------------

def hour_slots(hour_start: int, hour_end: int) -> list[int]:
    """
    Hours with a clickable cell on the grid: [hour_start, hour_end).
    """
    if hour_start >= hour_end:
        raise ValueError("grid must end after it starts")
    return list(range(hour_start, hour_end))


def prefill_range(hour: int | None, hour_end: int) -> tuple[time, time]:
    """
    One-hour range anchored at a clicked hour, clamped to the end of the grid.

    Without a clicked hour the form opens at 09:00-10:00.
    """
    if hour is None:
        return DEFAULT_START, DEFAULT_END
    if not 0 <= hour < 24:
        raise ValueError(f"hour out of range: {hour}")
    end_hour = min(hour + 1, hour_end)
    if end_hour <= hour:
        end_hour = hour + 1
    return time(hour, 0), minutes_to_time(end_hour * 60)


def grid_box(
    start: time,
    end: time,
    column: int,
    total_columns: int,
    *,
    hour_start: int,
    min_block_minutes: int = 0,
) -> GridBox:
    """
    Position of a meeting block inside its day column.
    """
    ensure_valid_range(start, end)
    if total_columns < 1 or not 0 <= column < total_columns:
        raise ValueError(f"invalid column {column} of {total_columns}")

    start_minutes = time_to_minutes(start)
    duration = time_to_minutes(end) - start_minutes
    width = 1.0 / total_columns

    return GridBox(
        top=start_minutes - hour_start * 60,
        height=max(min_block_minutes, duration),
        left=column * width,
        width=width,
    )
