# meeting_scheduler/schemas/week_view.py
from __future__ import annotations

from datetime import date as date_type

from pydantic import BaseModel, Field

from meeting_scheduler.schemas.meeting import Meeting
from meeting_scheduler.schemas.room import Room


class Placement(BaseModel):
    """
    Column assigned to a meeting inside its overlap cluster.
    """

    column: int = Field(..., ge=0, description="Zero-based column inside the day.")
    total_columns: int = Field(..., ge=1, description="Columns shared by the cluster.")


class GridBox(BaseModel):
    """
    Pixel-free position of a meeting block on the day column.

    `top` and `height` are minutes measured from the first grid hour; `left`
    and `width` are fractions of the day column width.
    """

    top: int = Field(..., description="Minutes from the grid start to the block top.")
    height: int = Field(..., description="Block height in minutes (never below the minimum).")
    left: float = Field(..., ge=0.0, le=1.0)
    width: float = Field(..., gt=0.0, le=1.0)


class PlacedMeeting(BaseModel):
    meeting: Meeting
    placement: Placement
    box: GridBox
    color: str = Field(..., description="Room color for in-person meetings, blue for virtual.")


class DayView(BaseModel):
    date: date_type
    weekday: int = Field(..., ge=0, le=6, description="Monday-start weekday index.")
    is_today: bool = False
    meeting_count: int = 0
    meetings: list[PlacedMeeting] = Field(default_factory=list)


class WeekView(BaseModel):
    """
    Everything the week grid needs to render one Monday..Sunday range.
    """

    week_start: date_type
    week_end: date_type
    hours: list[int] = Field(..., description="Clickable grid hours.")
    days: list[DayView]
    rooms: list[Room] = Field(
        default_factory=list,
        description="Active rooms, offered in the booking picker.",
    )
