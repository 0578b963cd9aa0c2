# meeting_scheduler/models/room.py
from sqlalchemy import Boolean, Column, Integer, String, Text

from meeting_scheduler.db.base import Base


class RoomRecord(Base):
    """
    A bookable physical space (`rooms` collection).
    """

    __tablename__ = "rooms"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    capacity = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    color = Column(String(16), nullable=False, default="#462829")
    active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<RoomRecord id={self.id} name={self.name} active={self.active}>"
