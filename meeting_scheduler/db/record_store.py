# meeting_scheduler/db/record_store.py
from __future__ import annotations

import uuid
from datetime import date, datetime, time
from typing import Any, Dict, Optional, Sequence, Type

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python
from sqlalchemy import Date, DateTime, Time, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from meeting_scheduler.core.logging import get_logger
from meeting_scheduler.db.base import Base
from meeting_scheduler.models.meeting import MeetingRecord
from meeting_scheduler.models.notification import NotificationRecord
from meeting_scheduler.models.room import RoomRecord
from meeting_scheduler.models.user import UserRecord
from meeting_scheduler.services.record_store import (
    MEETINGS,
    NOTIFICATIONS,
    OPERATORS,
    ROOMS,
    USERS,
    Filter,
    Record,
    RecordStore,
    Snapshot,
    StoreError,
    to_document,
    validate_filters,
)

logger = get_logger(__name__)

MODELS: Dict[str, Type[Base]] = {
    MEETINGS: MeetingRecord,
    ROOMS: RoomRecord,
    USERS: UserRecord,
    NOTIFICATIONS: NotificationRecord,
}


class SqlRecordStore(RecordStore):
    """
    Record store backed by SQLAlchemy's async ORM.

    Documents travel in their JSON form; values are converted to the column
    types (dates, times, timestamps) on the way in and back to JSON on the
    way out. Unknown fields are ignored.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__()
        self._session_factory = session_factory

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        ordering: Optional[str] = None,
    ) -> Snapshot:
        model = self._model(collection)
        validate_filters(filters)

        stmt = select(model)
        for field_name, op, value in filters:
            column = self._column(model, field_name)
            stmt = stmt.where(OPERATORS[op](column, _coerce(column, value)))
        if ordering:
            stmt = stmt.order_by(self._column(model, ordering))

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to query {collection}: {exc}") from exc

        return [_to_record(row) for row in rows]

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        model = self._model(collection)
        try:
            async with self._session_factory() as session:
                row = await session.get(model, record_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read {collection}/{record_id}: {exc}") from exc
        return _to_record(row) if row is not None else None

    async def create(self, collection: str, fields: Record) -> str:
        model = self._model(collection)
        record_id = uuid.uuid4().hex
        values = self._column_values(model, fields)
        values["id"] = record_id

        try:
            async with self._session_factory() as session:
                session.add(model(**values))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to create record in {collection}: {exc}") from exc

        logger.debug("Created %s/%s", collection, record_id)
        await self._publish(collection)
        return record_id

    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        model = self._model(collection)
        values = self._column_values(model, fields)
        values.pop("id", None)

        try:
            async with self._session_factory() as session:
                row = await session.get(model, record_id)
                if row is None:
                    raise StoreError(f"{collection}/{record_id} does not exist")
                for key, value in values.items():
                    setattr(row, key, value)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to update {collection}/{record_id}: {exc}") from exc

        await self._publish(collection)

    async def delete(self, collection: str, record_id: str) -> None:
        model = self._model(collection)
        try:
            async with self._session_factory() as session:
                row = await session.get(model, record_id)
                if row is None:
                    return
                await session.delete(row)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to delete {collection}/{record_id}: {exc}") from exc

        await self._publish(collection)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _model(collection: str) -> Type[Base]:
        try:
            return MODELS[collection]
        except KeyError:
            raise StoreError(f"Unknown collection '{collection}'") from None

    @staticmethod
    def _column(model: Type[Base], field_name: str):
        column = model.__table__.columns.get(field_name)
        if column is None:
            raise StoreError(f"Unknown field '{field_name}' on {model.__tablename__}")
        return column

    @staticmethod
    def _column_values(model: Type[Base], fields: Record) -> Dict[str, Any]:
        document = to_document(fields)
        columns = model.__table__.columns
        values: Dict[str, Any] = {}
        for key, value in document.items():
            column = columns.get(key)
            if column is None:
                logger.debug("Ignoring unknown field %s on %s", key, model.__tablename__)
                continue
            values[key] = _coerce(column, value)
        return values


_ADAPTERS = (
    (DateTime, TypeAdapter(datetime)),
    (Date, TypeAdapter(date)),
    (Time, TypeAdapter(time)),
)


def _coerce(column: Any, value: Any) -> Any:
    """
    Turn a JSON value into what the column type expects.

    Raises StoreError for strings the column type cannot parse.
    """
    if not isinstance(value, str):
        return value
    column_type = getattr(column, "type", None)
    for sql_type, adapter in _ADAPTERS:
        if isinstance(column_type, sql_type):
            try:
                return adapter.validate_python(value)
            except ValidationError as exc:
                raise StoreError(f"Invalid value for {column.key}: {value!r}") from exc
    return value


def _to_record(row: Base) -> Record:
    return to_jsonable_python(
        {column.key: getattr(row, column.key) for column in row.__table__.columns}
    )
