# meeting_scheduler/api/routes/notifications.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Query

from meeting_scheduler.api.dependencies.identity import get_current_user
from meeting_scheduler.api.dependencies.services import get_store
from meeting_scheduler.schemas.notification import Notification
from meeting_scheduler.schemas.user import SessionUser
from meeting_scheduler.services.record_store import NOTIFICATIONS, RecordStore, StoreError

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=list[Notification],
    summary="Notifications of the signed-in user",
    description=(
        "In-app notifications addressed to the caller, newest first. Notifications "
        "are addressed by display name, as they are when meetings are booked."
    ),
)
async def list_notifications(
    unread_only: bool = Query(default=False, description="Return only unread notifications."),
    user: SessionUser = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
) -> list[Notification]:
    filters = [("user_name", "==", user.name)]
    if unread_only:
        filters.append(("read", "==", False))

    try:
        records = await store.query(NOTIFICATIONS, filters, "created_at")
    except StoreError:
        raise HTTPException(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            detail="Notifications are unavailable. Please try again.",
        )

    return [Notification.model_validate(r) for r in reversed(records)]
