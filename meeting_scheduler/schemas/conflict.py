# meeting_scheduler/schemas/conflict.py
from pydantic import BaseModel, Field, computed_field


class ConflictReport(BaseModel):
    """
    Outcome of checking a proposed meeting against the meetings already booked
    on the same date.
    """

    hard: list[str] = Field(
        default_factory=list,
        description=(
            "Room or participant double-bookings. Any entry here blocks the save."
        ),
        examples=[['Sala A is already booked: "Planning" (09:00-10:00)']],
    )
    soft: list[str] = Field(
        default_factory=list,
        description="Availability warnings. Advisory only; saving is still allowed.",
        examples=[["Ana Pérez is outside their usual availability."]],
    )
    unavailable_participant_ids: list[str] = Field(
        default_factory=list,
        description="Ids of participants behind the soft warnings.",
    )

    @computed_field  # type: ignore[misc]
    @property
    def blocking(self) -> bool:
        return bool(self.hard)
