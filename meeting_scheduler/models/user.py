# meeting_scheduler/models/user.py
from sqlalchemy import JSON, Boolean, Column, String

from meeting_scheduler.db.base import Base


class UserRecord(Base):
    """
    Directory entry (`users` collection) with its embedded availability profile.
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    username = Column(String(255), nullable=True)
    email = Column(String(320), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    role = Column(String(32), nullable=False, default="member")
    active = Column(Boolean, nullable=False, default=True)

    # {"monday": {"active": true, "start": "09:00:00", "end": "18:00:00"}, ...}
    weekly_schedule = Column(JSON, nullable=True)
    # {"2025-06-10": {"available": false, "reason": "Vacation"}, ...}
    exceptions = Column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<UserRecord id={self.id} name={self.name} role={self.role}>"
