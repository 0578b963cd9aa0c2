# meeting_scheduler/services/notifications.py
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from meeting_scheduler.core.logging import get_logger
from meeting_scheduler.schemas.scheduling import NotificationPayload
from meeting_scheduler.services.email_notifier import send_notification_email
from meeting_scheduler.services.push_client import PushClient, PushClientError
from meeting_scheduler.services.record_store import (
    NOTIFICATIONS,
    USERS,
    RecordStore,
    StoreError,
)

logger = get_logger(__name__)


def resolve_recipients(names: Iterable[Optional[str]]) -> List[str]:
    """
    Drop empty names and duplicates, keeping the original order.
    """
    recipients: List[str] = []
    for name in names:
        if not name or name in recipients:
            continue
        recipients.append(name)
    return recipients


class NotificationDispatcher(ABC):
    """
    Delivers notifications to users identified by display name.
    Callers leave the author out of the recipients.

    Delivery is best-effort: implementations must not raise.
    """

    @abstractmethod
    async def notify(self, recipient_names: Iterable[str], payload: NotificationPayload) -> None:
        ...


class StoreNotificationDispatcher(NotificationDispatcher):
    """
    Default dispatcher.

    For every recipient:
    1) write an unread in-app notification to the `notifications` collection;
    2) e-mail the address on the user's record, if any (SMTP);
    3) post a push payload to the webhook, if one is configured.

    Each channel fails independently and failures are only logged.
    """

    def __init__(self, store: RecordStore, push_client: Optional[PushClient] = None) -> None:
        self._store = store
        self._push_client = push_client

    async def notify(self, recipient_names: Iterable[str], payload: NotificationPayload) -> None:
        recipients = resolve_recipients(recipient_names)
        if not recipients:
            return

        await self._write_in_app(recipients, payload)
        await asyncio.gather(
            *(self._deliver_external(name, payload) for name in recipients)
        )

    async def _write_in_app(self, recipients: List[str], payload: NotificationPayload) -> None:
        created_at = datetime.now(tz=timezone.utc)
        for name in recipients:
            try:
                await self._store.create(
                    NOTIFICATIONS,
                    {
                        "user_name": name,
                        "kind": payload.kind,
                        "title": payload.title,
                        "message": payload.message,
                        "reference_id": payload.reference_id,
                        "read": False,
                        "created_at": created_at,
                    },
                )
            except StoreError:
                logger.warning("Could not store notification for %s", name, exc_info=True)

    async def _deliver_external(self, name: str, payload: NotificationPayload) -> None:
        try:
            matches = await self._store.query(USERS, [("name", "==", name)])
        except StoreError:
            logger.warning("Could not look up %s for e-mail delivery", name, exc_info=True)
            matches = []

        email = matches[0].get("email") if matches else None
        if email:
            await asyncio.to_thread(send_notification_email, email, name, payload)

        if self._push_client is not None:
            try:
                await self._push_client.send({"recipient": name, **payload.model_dump()})
            except PushClientError:
                logger.warning("Push notification to %s failed", name, exc_info=True)
