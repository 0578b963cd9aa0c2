# meeting_scheduler/services/conflict_checker.py
from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from meeting_scheduler.schemas.conflict import ConflictReport
from meeting_scheduler.schemas.meeting import Meeting, MeetingDraft, MeetingType
from meeting_scheduler.schemas.user import AvailabilityProfile
from meeting_scheduler.services.availability_resolver import unavailable_participants
from meeting_scheduler.services.time_grid import format_time, ranges_overlap


def check_conflicts(
    proposed: MeetingDraft,
    existing_on_date: Sequence[Meeting],
    profiles: Mapping[str, AvailabilityProfile],
    exclude_id: Optional[str] = None,
    room_name: Optional[str] = None,
) -> ConflictReport:
    """
    Classify the conflicts of a proposed meeting.

    Parameters
    ----------
    proposed:
        Draft being saved. Its time range is assumed valid (start < end).
    existing_on_date:
        Meetings already booked; entries on other dates are ignored.
    profiles:
        Availability profiles by user id, used for the soft warnings.
    exclude_id:
        Id of the meeting being edited, so it never conflicts with itself.
    room_name:
        Display name of the proposed room for the messages.

    Rules
    -----
    - Hard: an in-person draft whose room is used by an overlapping meeting
      (first clash reported).
    - Hard: a participant already in an overlapping meeting (first clash per
      participant reported).
    - Soft: a participant outside their declared availability.
    """
    overlapping = [
        meeting
        for meeting in existing_on_date
        if meeting.id != exclude_id
        and meeting.date == proposed.date
        and ranges_overlap(
            meeting.start_time,
            meeting.end_time,
            proposed.start_time,
            proposed.end_time,
        )
    ]

    hard: List[str] = []

    if proposed.type == MeetingType.IN_PERSON and proposed.room_id:
        clash = next((m for m in overlapping if m.room_id == proposed.room_id), None)
        if clash is not None:
            name = room_name or clash.room_name or "The room"
            hard.append(f"{name} is already booked: {_describe(clash)}")

    for participant in proposed.participants:
        clash = next(
            (m for m in overlapping if participant.id in m.participant_ids()),
            None,
        )
        if clash is not None:
            hard.append(f"{participant.name} already has a meeting: {_describe(clash)}")

    unavailable = unavailable_participants(
        proposed.participants,
        profiles,
        proposed.date,
        proposed.start_time,
        proposed.end_time,
    )
    soft = [f"{p.name} is outside their usual availability." for p in unavailable]

    return ConflictReport(
        hard=hard,
        soft=soft,
        unavailable_participant_ids=[p.id for p in unavailable],
    )


def _describe(meeting: Meeting) -> str:
    return (
        f'"{meeting.title}" '
        f"({format_time(meeting.start_time)}-{format_time(meeting.end_time)})"
    )
