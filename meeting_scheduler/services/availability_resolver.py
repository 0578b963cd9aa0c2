# meeting_scheduler/services/availability_resolver.py
from __future__ import annotations

from datetime import date as date_type, time
from typing import Iterable, List, Mapping

from meeting_scheduler.schemas.meeting import Participant
from meeting_scheduler.schemas.user import AvailabilityProfile
from meeting_scheduler.services.time_grid import weekday_key


def is_available(
    profile: AvailabilityProfile,
    day: date_type,
    start: time,
    end: time,
) -> bool:
    """
    Decide whether a user is available on `day` between `start` and `end`.

    Rules, in order
    ---------------
    1) A dated exception decides alone. `available=False` blocks the whole day;
       `available=True` clears the whole day, whatever the requested range.
    2) A user who never configured a weekly schedule is treated as available.
    3) Otherwise the weekday's slot must be active and contain the range:
       start >= slot.start and end <= slot.end. Missing days are unavailable.
    """
    exception = profile.exceptions.get(day)
    if exception is not None:
        return exception.available

    if profile.weekly_schedule is None:
        return True

    slot = profile.weekly_schedule.get(weekday_key(day))
    if slot is None or not slot.active:
        return False

    return start >= slot.start and end <= slot.end


def unavailable_participants(
    participants: Iterable[Participant],
    profiles: Mapping[str, AvailabilityProfile],
    day: date_type,
    start: time,
    end: time,
) -> List[Participant]:
    """
    Participants whose declared availability does not cover the range.

    Participants without a known profile (e.g. users no longer in the
    directory) are not reported.
    """
    result: List[Participant] = []
    for participant in participants:
        profile = profiles.get(participant.id)
        if profile is None:
            continue
        if not is_available(profile, day, start, end):
            result.append(participant)
    return result
