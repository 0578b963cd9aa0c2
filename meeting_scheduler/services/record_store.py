# meeting_scheduler/services/record_store.py
"""
Document-store contract used by the scheduling core, plus an in-memory
implementation.

Records are plain JSON-compatible dicts carrying their store-assigned `id`.
A snapshot is the full, ordered list of records matching a query.
"""

from __future__ import annotations

import asyncio
import copy
import operator
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic_core import to_jsonable_python

from meeting_scheduler.core.logging import get_logger

logger = get_logger(__name__)

MEETINGS = "meetings"
ROOMS = "rooms"
USERS = "users"
NOTIFICATIONS = "notifications"

COLLECTIONS = (MEETINGS, ROOMS, USERS, NOTIFICATIONS)

Record = Dict[str, Any]
Snapshot = List[Record]
Filter = Tuple[str, str, Any]

OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class StoreError(RuntimeError):
    """
    Raised when the record store cannot complete a read or a write.
    """


def to_document(fields: Dict[str, Any]) -> Record:
    """
    Normalize values to their JSON form (dates and times as ISO strings,
    enums as values) so every backend stores and compares the same shapes.
    """
    return to_jsonable_python(fields)


def validate_filters(filters: Sequence[Filter]) -> None:
    for field_name, op, _ in filters:
        if op not in OPERATORS:
            raise StoreError(f"Unsupported filter operator '{op}' on '{field_name}'")


def matches(record: Record, filters: Sequence[Filter]) -> bool:
    for field_name, op, value in filters:
        actual = record.get(field_name)
        expected = to_jsonable_python(value)
        if actual is None or expected is None:
            if op == "==" and actual is expected:
                continue
            if op == "!=" and (actual is None) != (expected is None):
                continue
            return False
        try:
            if not OPERATORS[op](actual, expected):
                return False
        except TypeError:
            return False
    return True


def _sort_key(value: Any) -> tuple:
    # records missing the ordering field sort first
    return (value is not None, value)


@dataclass
class _Subscription:
    filters: Tuple[Filter, ...]
    ordering: Optional[str]
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)


class RecordStore(ABC):
    """
    Contract of the document store.

    Subclasses implement the CRUD primitives and call `_publish(collection)`
    after every successful write; subscriptions are served on top of `query`.
    """

    def __init__(self) -> None:
        self._subscriptions: Dict[str, List[_Subscription]] = defaultdict(list)

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        ordering: Optional[str] = None,
    ) -> Snapshot:
        """Return the records of `collection` matching every filter."""

    @abstractmethod
    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        """Return one record by id, or None."""

    @abstractmethod
    async def create(self, collection: str, fields: Record) -> str:
        """Store a new record and return its assigned id."""

    @abstractmethod
    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        """Merge `fields` into an existing record. Unknown ids raise StoreError."""

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> None:
        """Remove a record. Deleting an unknown id is a no-op."""

    async def subscribe(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        ordering: Optional[str] = None,
    ) -> AsyncIterator[Snapshot]:
        """
        Stream snapshots of a query: the current state first, then a fresh
        snapshot after every write to the collection.
        """
        validate_filters(filters)
        subscription = _Subscription(filters=tuple(filters), ordering=ordering)
        self._subscriptions[collection].append(subscription)
        try:
            yield await self.query(collection, filters, ordering)
            while True:
                yield await subscription.queue.get()
        finally:
            self._subscriptions[collection].remove(subscription)

    async def _publish(self, collection: str) -> None:
        for subscription in list(self._subscriptions.get(collection, ())):
            snapshot = await self.query(collection, subscription.filters, subscription.ordering)
            subscription.queue.put_nowait(snapshot)

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscriptions.get(collection, ()))


class InMemoryRecordStore(RecordStore):
    """
    Process-local store for development and tests. Not shared between processes.
    """

    def __init__(self) -> None:
        super().__init__()
        self._data: Dict[str, Dict[str, Record]] = defaultdict(dict)

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        ordering: Optional[str] = None,
    ) -> Snapshot:
        validate_filters(filters)
        records = [
            copy.deepcopy(record)
            for record in self._data[collection].values()
            if matches(record, filters)
        ]
        if ordering:
            records.sort(key=lambda r: _sort_key(r.get(ordering)))
        return records

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        record = self._data[collection].get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def create(self, collection: str, fields: Record) -> str:
        record_id = uuid.uuid4().hex
        document = to_document(fields)
        document["id"] = record_id
        self._data[collection][record_id] = document
        logger.debug("Created %s/%s", collection, record_id)
        await self._publish(collection)
        return record_id

    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        record = self._data[collection].get(record_id)
        if record is None:
            raise StoreError(f"{collection}/{record_id} does not exist")
        document = to_document(fields)
        document.pop("id", None)
        record.update(document)
        await self._publish(collection)

    async def delete(self, collection: str, record_id: str) -> None:
        if self._data[collection].pop(record_id, None) is not None:
            await self._publish(collection)
