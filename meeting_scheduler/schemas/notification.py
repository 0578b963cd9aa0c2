# meeting_scheduler/schemas/notification.py
from datetime import datetime

from pydantic import BaseModel, Field


class Notification(BaseModel):
    """
    In-app notification as stored in the `notifications` collection.
    """

    id: str
    user_name: str = Field(..., description="Display name of the recipient.")
    kind: str = Field("meeting", description="Notification kind.")
    title: str
    message: str
    reference_id: str | None = Field(None, description="Id of the referenced meeting.")
    read: bool = False
    created_at: datetime | None = None
