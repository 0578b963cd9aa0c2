# meeting_scheduler/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models backing the record store.

    Models register themselves on import; the SQL record store imports
    all of them.
    """
    pass
