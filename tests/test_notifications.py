# tests/test_notifications.py
import pytest

from meeting_scheduler.schemas.scheduling import NotificationPayload
from meeting_scheduler.services import notifications as notifications_module
from meeting_scheduler.services.notifications import (
    StoreNotificationDispatcher,
    resolve_recipients,
)
from meeting_scheduler.services.push_client import PushClientError
from meeting_scheduler.services.record_store import NOTIFICATIONS, USERS, InMemoryRecordStore


class _FakePushClient:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send(self, payload):
        self.sent.append(payload)
        if self.fail:
            raise PushClientError("webhook down")


def _payload() -> NotificationPayload:
    return NotificationPayload(
        title="Planning",
        message="Ana Pérez invited you to a meeting",
        reference_id="m-1",
        created_by="Ana Pérez",
    )


def test_resolve_recipients_drops_blanks_and_duplicates():
    names = ["Bruno Díaz", "", None, "Bruno Díaz", "Carla Gómez"]
    assert resolve_recipients(names) == ["Bruno Díaz", "Carla Gómez"]


@pytest.mark.asyncio
async def test_notify_writes_in_app_records_and_emails(monkeypatch):
    store = InMemoryRecordStore()
    await store.create(USERS, {"name": "Bruno Díaz", "email": "bruno@example.com"})
    await store.create(USERS, {"name": "Carla Gómez", "email": None})

    emails = []
    monkeypatch.setattr(
        notifications_module,
        "send_notification_email",
        lambda to_email, to_name, payload: emails.append((to_email, to_name)) or True,
    )
    push = _FakePushClient()
    dispatcher = StoreNotificationDispatcher(store, push_client=push)

    await dispatcher.notify(["Bruno Díaz", "Carla Gómez"], _payload())

    records = await store.query(NOTIFICATIONS, [], "user_name")
    assert [r["user_name"] for r in records] == ["Bruno Díaz", "Carla Gómez"]
    assert all(r["read"] is False and r["reference_id"] == "m-1" for r in records)

    # only users with an address get an e-mail
    assert emails == [("bruno@example.com", "Bruno Díaz")]
    assert sorted(p["recipient"] for p in push.sent) == ["Bruno Díaz", "Carla Gómez"]
    assert push.sent[0]["title"] == "Planning"


@pytest.mark.asyncio
async def test_push_failures_are_swallowed(monkeypatch):
    store = InMemoryRecordStore()
    monkeypatch.setattr(
        notifications_module,
        "send_notification_email",
        lambda *args: pytest.fail("nobody has an e-mail address"),
    )
    dispatcher = StoreNotificationDispatcher(store, push_client=_FakePushClient(fail=True))

    await dispatcher.notify(["Bruno Díaz"], _payload())

    assert len(await store.query(NOTIFICATIONS)) == 1


@pytest.mark.asyncio
async def test_author_only_sends_nothing():
    store = InMemoryRecordStore()
    dispatcher = StoreNotificationDispatcher(store)

    await dispatcher.notify(["Ana Pérez"], _payload())

    assert await store.query(NOTIFICATIONS) == []
