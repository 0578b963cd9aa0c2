# meeting_scheduler/schemas/meeting.py
from __future__ import annotations

from datetime import date as date_type, datetime, time
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class MeetingType(str, Enum):
    """
    How a meeting takes place. In-person meetings must book a room.
    """

    IN_PERSON = "in_person"
    VIRTUAL = "virtual"


class Participant(BaseModel):
    """
    A user invited to a meeting, denormalized at booking time.
    """

    id: str = Field(..., description="Identifier of the participating user.", examples=["u-42"])
    name: str = Field(..., description="Display name at booking time.", examples=["Ana Pérez"])
    avatar_url: str | None = Field(
        None,
        description="Optional avatar reference for the participant chip.",
    )


def _truncate_to_minute(value: time) -> time:
    return value.replace(second=0, microsecond=0)


class MeetingDraft(BaseModel):
    """
    Editable fields of a meeting, as filled in by the edit form.

    A draft is not validated for `start_time < end_time` or for a missing room:
    those checks happen at save time so the form can hold intermediate states.
    """

    title: str = Field("", description="Meeting title.", examples=["Weekly team sync"])
    description: str | None = Field(None, description="Agenda / free-text description.")
    notes: str | None = Field(None, description="Free-text notes.")
    link: str | None = Field(
        None,
        description="Conferencing link.",
        examples=["https://meet.google.com/abc-defg-hij"],
    )
    type: MeetingType = Field(MeetingType.IN_PERSON, description="in_person or virtual.")
    room_id: str | None = Field(
        None,
        description="Room booked by the meeting. Required iff type is in_person.",
    )
    date: date_type = Field(..., description="Local calendar day.", examples=["2025-06-10"])
    start_time: time = Field(..., description="Local start time (HH:MM).", examples=["09:00"])
    end_time: time = Field(..., description="Local end time (HH:MM).", examples=["10:00"])
    participants: list[Participant] = Field(
        default_factory=list,
        description="Invited users. Duplicates (by id) are collapsed.",
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def _minute_precision(cls, value: time) -> time:
        return _truncate_to_minute(value)

    @field_validator("participants")
    @classmethod
    def _unique_participants(cls, value: list[Participant]) -> list[Participant]:
        seen: set[str] = set()
        unique: list[Participant] = []
        for participant in value:
            if participant.id in seen:
                continue
            seen.add(participant.id)
            unique.append(participant)
        return unique

    def participant_ids(self) -> set[str]:
        return {p.id for p in self.participants}


class Meeting(MeetingDraft):
    """
    A booked meeting as stored in the `meetings` collection.
    """

    id: str = Field(..., description="Store-assigned identifier.")
    room_name: str | None = Field(
        None,
        description="Room name copied at booking time; survives room deletion.",
    )
    organizer_id: str = Field(..., description="User id of the organizer.")
    organizer_name: str = Field(..., description="Display name of the organizer.")
    created_at: datetime | None = Field(None, description="Creation timestamp.")


class MeetingPrefill(BaseModel):
    """
    Initial values of the edit form when creating a meeting from the week grid.
    """

    date: date_type = Field(..., description="Pre-selected day.")
    start_time: time = Field(..., description="Pre-selected start time.")
    end_time: time = Field(..., description="Pre-selected end time (one hour later).")
