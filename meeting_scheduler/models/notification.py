# meeting_scheduler/models/notification.py
from sqlalchemy import Boolean, Column, DateTime, String, Text

from meeting_scheduler.db.base import Base


class NotificationRecord(Base):
    """
    In-app notification addressed to a user by display name.
    """

    __tablename__ = "notifications"

    id = Column(String(32), primary_key=True)
    user_name = Column(String(255), nullable=False, index=True)
    kind = Column(String(32), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    reference_id = Column(String(32), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=True)
