# tests/test_time_grid.py
from datetime import date, time

import pytest

from meeting_scheduler.schemas.user import Weekday
from meeting_scheduler.services.time_grid import (
    InvalidTimeRangeError,
    format_time,
    grid_box,
    hour_slots,
    minutes_to_time,
    monday_of,
    prefill_range,
    ranges_overlap,
    shift_week,
    time_to_minutes,
    week_days,
    weekday_key,
    weekday_of,
)


def test_minutes_round_trip_and_clamp():
    assert time_to_minutes(time(9, 30)) == 570
    assert minutes_to_time(570) == time(9, 30)
    # 24:00 does not exist; clamp to the last minute of the day
    assert minutes_to_time(24 * 60) == time(23, 59)
    assert format_time(time(7, 5)) == "07:05"


def test_weekday_of_is_monday_start():
    # 2025-06-09 is a Monday, 2025-06-15 a Sunday
    assert weekday_of(date(2025, 6, 9)) == 0
    assert weekday_of(date(2025, 6, 15)) == 6
    assert weekday_key(date(2025, 6, 10)) == Weekday.TUESDAY


def test_week_navigation():
    monday = monday_of(date(2025, 6, 12))
    assert monday == date(2025, 6, 9)

    days = week_days(monday)
    assert len(days) == 7
    assert days[0] == date(2025, 6, 9)
    assert days[-1] == date(2025, 6, 15)

    assert shift_week(monday, 1) == date(2025, 6, 16)
    assert shift_week(monday, -1) == date(2025, 6, 2)


def test_ranges_overlap_is_half_open():
    assert ranges_overlap(time(9), time(10), time(9, 30), time(10, 30))
    assert not ranges_overlap(time(9), time(10), time(10), time(11))
    assert not ranges_overlap(time(10), time(11), time(9), time(10))


def test_hour_slots_cover_the_grid():
    assert hour_slots(7, 22) == list(range(7, 22))
    with pytest.raises(ValueError):
        hour_slots(10, 10)


def test_prefill_range_defaults_and_clamps():
    assert prefill_range(None, 22) == (time(9, 0), time(10, 0))
    assert prefill_range(14, 22) == (time(14, 0), time(15, 0))
    # the last grid hour still gets a one-hour range
    assert prefill_range(21, 22) == (time(21, 0), time(22, 0))


def test_grid_box_geometry():
    box = grid_box(time(9, 30), time(10, 30), 1, 2, hour_start=7, min_block_minutes=20)
    assert box.top == 150
    assert box.height == 60
    assert box.left == pytest.approx(0.5)
    assert box.width == pytest.approx(0.5)


def test_grid_box_enforces_minimum_height():
    box = grid_box(time(9, 0), time(9, 10), 0, 1, hour_start=7, min_block_minutes=20)
    assert box.height == 20


def test_grid_box_rejects_inverted_range():
    with pytest.raises(InvalidTimeRangeError):
        grid_box(time(10), time(9), 0, 1, hour_start=7)
