# meeting_scheduler/schemas/user.py
from __future__ import annotations

from datetime import date as date_type, time
from enum import Enum

from pydantic import BaseModel, Field, model_validator


# Roles with full scheduling rights: edit/delete any meeting, administer rooms.
MANAGEMENT_ROLES = frozenset({"superadmin", "coordinator", "director"})


class Weekday(str, Enum):
    """
    Weekday keys in Monday-start order; the enum position is the weekday index.
    """

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class DaySlot(BaseModel):
    """
    Recurring availability window for one weekday.
    """

    active: bool = Field(False, description="Whether the user takes meetings that day.")
    start: time = Field(time(9, 0), description="Start of the availability window.")
    end: time = Field(time(18, 0), description="End of the availability window.")

    @model_validator(mode="after")
    def _check_window(self) -> "DaySlot":
        if self.active and self.start >= self.end:
            raise ValueError("availability window must end after it starts")
        return self


class AvailabilityException(BaseModel):
    """
    Whole-day override of the weekly schedule for a single date.
    """

    available: bool = Field(..., description="Verdict for the whole day.")
    reason: str | None = Field(None, description="Optional free-text reason.", examples=["Vacation"])


class AvailabilityProfile(BaseModel):
    """
    Declared availability of a user, embedded in the user record.

    `weekly_schedule` is None for users who never configured it.
    """

    weekly_schedule: dict[Weekday, DaySlot] | None = Field(
        None,
        description="Recurring availability per weekday; missing days are unavailable.",
    )
    exceptions: dict[date_type, AvailabilityException] = Field(
        default_factory=dict,
        description="Date-specific overrides, at most one per date.",
    )


def default_weekly_schedule() -> dict[Weekday, DaySlot]:
    """
    Monday to Friday, 09:00-18:00. Offered when a user first edits their profile.
    """
    return {
        day: DaySlot(active=day not in (Weekday.SATURDAY, Weekday.SUNDAY))
        for day in Weekday
    }


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, description="Display name.", examples=["Ana Pérez"])
    username: str | None = Field(None, description="Login handle.", examples=["aperez"])
    email: str | None = Field(None, description="Address used for e-mail notifications.")
    avatar_url: str | None = Field(None, description="Avatar reference.")
    role: str = Field("member", description="Role key; management roles act as admins.")
    active: bool = Field(True, description="Inactive users are hidden from the directory.")


class UserCreate(UserBase):
    weekly_schedule: dict[Weekday, DaySlot] | None = None
    exceptions: dict[date_type, AvailabilityException] = Field(default_factory=dict)


class User(UserBase):
    id: str = Field(..., description="Store-assigned identifier.")
    weekly_schedule: dict[Weekday, DaySlot] | None = None
    exceptions: dict[date_type, AvailabilityException] = Field(default_factory=dict)

    @property
    def profile(self) -> AvailabilityProfile:
        return AvailabilityProfile(
            weekly_schedule=self.weekly_schedule,
            exceptions=self.exceptions,
        )


class AvailabilityExceptionEntry(AvailabilityException):
    date: date_type = Field(..., description="Day the override applies to.")


class AvailabilityUpdate(BaseModel):
    """
    Payload of the profile screen. Exceptions arrive as a list; when a date
    repeats, the last entry wins.
    """

    weekly_schedule: dict[Weekday, DaySlot] = Field(default_factory=default_weekly_schedule)
    exceptions: list[AvailabilityExceptionEntry] = Field(default_factory=list)

    def to_profile(self) -> AvailabilityProfile:
        exceptions: dict[date_type, AvailabilityException] = {}
        for entry in self.exceptions:
            exceptions[entry.date] = AvailabilityException(
                available=entry.available,
                reason=entry.reason,
            )
        return AvailabilityProfile(weekly_schedule=self.weekly_schedule, exceptions=exceptions)


class SessionUser(BaseModel):
    """
    The signed-in user, as supplied by the identity context.
    """

    id: str
    name: str
    avatar_url: str | None = None
    role: str = "member"

    @property
    def is_admin(self) -> bool:
        return self.role in MANAGEMENT_ROLES

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(id=user.id, name=user.name, avatar_url=user.avatar_url, role=user.role)
