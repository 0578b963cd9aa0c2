# meeting_scheduler/schemas/room.py
from __future__ import annotations

from pydantic import BaseModel, Field, PositiveInt, field_validator

DEFAULT_ROOM_COLOR = "#462829"


class RoomBase(BaseModel):
    """
    Shared fields used by RoomCreate and Room.
    """

    name: str = Field(..., min_length=1, description="Room name.", examples=["Sala A"])
    capacity: PositiveInt | None = Field(None, description="Seats available.", examples=[8])
    description: str | None = Field(None, description="Optional description.")
    color: str = Field(
        DEFAULT_ROOM_COLOR,
        description="Display color used for in-person meetings booked in this room.",
        examples=["#3b82f6"],
    )
    active: bool = Field(
        True,
        description="Inactive rooms are not offered for new bookings.",
    )


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    """
    Partial update; only provided fields are changed.
    """

    name: str | None = Field(default=None, min_length=1)
    capacity: PositiveInt | None = Field(default=None)
    description: str | None = Field(default=None)
    color: str | None = Field(default=None)
    active: bool | None = Field(default=None)

    @field_validator("name", "color", "active")
    @classmethod
    def _not_null(cls, value):
        # these columns are required; omit the field to leave it unchanged
        if value is None:
            raise ValueError("must not be null")
        return value


class Room(RoomBase):
    id: str = Field(..., description="Store-assigned identifier.")
