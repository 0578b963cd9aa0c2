# meeting_scheduler/schemas/scheduling.py
from enum import Enum

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    """
    States of a meeting edit session.
    """

    IDLE = "idle"
    EDITING = "editing"
    VALIDATING = "validating"
    BLOCKED = "blocked"
    SAVING = "saving"
    SAVED = "saved"
    SAVE_FAILED = "save_failed"


class EditTab(str, Enum):
    INFO = "info"
    PARTICIPANTS = "participants"


class SaveOutcome(str, Enum):
    SAVED = "saved"
    INVALID = "invalid"
    BLOCKED = "blocked"
    FAILED = "failed"


class SaveResult(BaseModel):
    """
    Result of a checked save attempt.
    """

    outcome: SaveOutcome = Field(..., description="What happened to the save attempt.")
    meeting_id: str | None = Field(None, description="Id of the stored meeting when saved.")
    created: bool = Field(False, description="True if the save created a new meeting.")
    hard_conflicts: list[str] = Field(default_factory=list)
    soft_warnings: list[str] = Field(default_factory=list)
    message: str | None = Field(
        None,
        description="User-facing message for invalid input or store failures.",
    )


class NotificationPayload(BaseModel):
    """
    Content of a notification sent to meeting participants.
    """

    kind: str = Field("meeting", description="Notification kind.")
    title: str = Field(..., description="Title of the meeting the notification is about.")
    message: str = Field(..., description="Human-readable body.")
    reference_id: str | None = Field(None, description="Id of the referenced meeting.")
    created_by: str | None = Field(
        None,
        description="Name of the author, shown to recipients.",
    )
