# meeting_scheduler/models/meeting.py
from sqlalchemy import JSON, Column, Date, DateTime, String, Text, Time

from meeting_scheduler.db.base import Base


class MeetingRecord(Base):
    """
    A booked meeting (`meetings` collection).

    `room_id` is a soft reference: rooms can be deleted or deactivated without
    touching the meetings that booked them, which keep `room_name` as well.
    """

    __tablename__ = "meetings"

    id = Column(String(32), primary_key=True)

    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    link = Column(String(512), nullable=True)

    type = Column(String(16), nullable=False, default="in_person")
    room_id = Column(String(32), nullable=True, index=True)
    room_name = Column(String(255), nullable=True)

    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    participants = Column(JSON, nullable=False, default=list)

    organizer_id = Column(String(32), nullable=False)
    organizer_name = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<MeetingRecord id={self.id} date={self.date} "
            f"{self.start_time}-{self.end_time} room={self.room_id}>"
        )
