# meeting_scheduler/api/dependencies/identity.py
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from meeting_scheduler.api.dependencies.services import get_store
from meeting_scheduler.schemas.user import SessionUser, User
from meeting_scheduler.services.record_store import USERS, RecordStore, StoreError


async def get_current_user(
    x_user_id: Optional[str] = Header(
        default=None,
        alias="X-User-Id",
        description="Id of the signed-in user, set by the authenticating proxy.",
    ),
    store: RecordStore = Depends(get_store),
) -> SessionUser:
    """
    Resolve the signed-in user from the `X-User-Id` header.

    Missing header, unknown user or inactive user -> 401.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header.",
        )

    try:
        record = await store.get(USERS, x_user_id)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User directory unavailable.",
        )

    if record is None or not record.get("active", True):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown or inactive user.",
        )

    return SessionUser.from_user(User.model_validate(record))


async def require_admin(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required.",
        )
    return user
