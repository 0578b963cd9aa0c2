# meeting_scheduler/api/dependencies/services.py
from typing import Optional

from fastapi import Depends

from meeting_scheduler.core.config import StoreBackend, get_settings
from meeting_scheduler.db.record_store import SqlRecordStore
from meeting_scheduler.db.session import AsyncSessionLocal
from meeting_scheduler.services.notifications import (
    NotificationDispatcher,
    StoreNotificationDispatcher,
)
from meeting_scheduler.services.push_client import get_push_client
from meeting_scheduler.services.record_store import InMemoryRecordStore, RecordStore
from meeting_scheduler.services.scheduling import SchedulingOrchestrator

_memory_store: Optional[InMemoryRecordStore] = None


def get_store() -> RecordStore:
    """
    FastAPI dependency returning the configured record store.

    - STORE_BACKEND=sql    -> SQLAlchemy-backed store on the app engine.
    - STORE_BACKEND=memory -> one process-wide in-memory store.
    """
    global _memory_store
    settings = get_settings()

    if settings.STORE_BACKEND == StoreBackend.MEMORY:
        if _memory_store is None:
            _memory_store = InMemoryRecordStore()
        return _memory_store

    return SqlRecordStore(AsyncSessionLocal)


def get_dispatcher(store: RecordStore = Depends(get_store)) -> NotificationDispatcher:
    return StoreNotificationDispatcher(store, push_client=get_push_client())


def get_orchestrator(
    store: RecordStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> SchedulingOrchestrator:
    return SchedulingOrchestrator(store, dispatcher=dispatcher)
