# tests/test_availability_resolver.py
from datetime import date, time

import pytest

from meeting_scheduler.schemas.meeting import Participant
from meeting_scheduler.schemas.user import (
    AvailabilityException,
    AvailabilityProfile,
    DaySlot,
    Weekday,
    default_weekly_schedule,
)
from meeting_scheduler.services.availability_resolver import (
    is_available,
    unavailable_participants,
)

MONDAY = date(2025, 6, 9)
TUESDAY = date(2025, 6, 10)
SATURDAY = date(2025, 6, 14)


def _office_hours() -> AvailabilityProfile:
    return AvailabilityProfile(weekly_schedule=default_weekly_schedule())


def test_inside_weekly_window():
    assert is_available(_office_hours(), MONDAY, time(9), time(10)) is True
    # window bounds are inclusive
    assert is_available(_office_hours(), MONDAY, time(17), time(18)) is True


def test_outside_weekly_window():
    assert is_available(_office_hours(), MONDAY, time(7), time(8)) is False
    assert is_available(_office_hours(), MONDAY, time(17, 30), time(18, 30)) is False


def test_inactive_or_missing_day_is_unavailable():
    assert is_available(_office_hours(), SATURDAY, time(10), time(11)) is False

    partial = AvailabilityProfile(
        weekly_schedule={Weekday.MONDAY: DaySlot(active=True, start=time(9), end=time(12))}
    )
    assert is_available(partial, TUESDAY, time(10), time(11)) is False


def test_unavailable_exception_blocks_the_whole_day():
    """
    2025-06-10 is a Tuesday with an active 09:00-18:00 window, but the
    exception says unavailable: every range that day is rejected.
    """
    profile = AvailabilityProfile(
        weekly_schedule=default_weekly_schedule(),
        exceptions={TUESDAY: AvailabilityException(available=False, reason="Vacation")},
    )
    for start, end in [(time(7), time(8)), (time(9), time(10)), (time(12), time(13))]:
        assert is_available(profile, TUESDAY, start, end) is False

    # the next day falls back to the weekly schedule
    assert is_available(profile, date(2025, 6, 11), time(9), time(10)) is True


def test_available_exception_clears_the_whole_day():
    profile = AvailabilityProfile(
        weekly_schedule=default_weekly_schedule(),
        exceptions={SATURDAY: AvailabilityException(available=True)},
    )
    assert is_available(profile, SATURDAY, time(6), time(23)) is True


def test_no_weekly_schedule_means_available():
    assert is_available(AvailabilityProfile(), MONDAY, time(6), time(7)) is True


def test_active_slot_must_end_after_start():
    with pytest.raises(ValueError):
        DaySlot(active=True, start=time(18), end=time(9))


def test_unavailable_participants_skips_unknown_profiles():
    ana = Participant(id="ana", name="Ana")
    bruno = Participant(id="bruno", name="Bruno")
    ghost = Participant(id="ghost", name="Ghost")

    profiles = {
        "ana": _office_hours(),
        "bruno": AvailabilityProfile(
            weekly_schedule=default_weekly_schedule(),
            exceptions={MONDAY: AvailabilityException(available=False)},
        ),
    }

    result = unavailable_participants([ana, bruno, ghost], profiles, MONDAY, time(9), time(10))
    assert [p.id for p in result] == ["bruno"]
