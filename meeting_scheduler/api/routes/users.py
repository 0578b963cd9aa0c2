# meeting_scheduler/api/routes/users.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from meeting_scheduler.api.dependencies.identity import get_current_user
from meeting_scheduler.api.dependencies.services import get_store
from meeting_scheduler.schemas.user import AvailabilityUpdate, SessionUser, User
from meeting_scheduler.services.record_store import USERS, RecordStore, StoreError

router = APIRouter(prefix="/users", tags=["Users"])


def _store_unavailable() -> HTTPException:
    return HTTPException(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        detail="The user directory is unavailable. Please try again.",
    )


@router.get(
    "",
    response_model=list[User],
    summary="User directory",
    description=(
        "Active users ordered by name, used to pick participants. `search` matches "
        "name or username, case-insensitively."
    ),
)
async def list_users(
    search: str | None = Query(default=None, description="Name or username fragment."),
    user: SessionUser = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
) -> list[User]:
    try:
        records = await store.query(USERS, [("active", "==", True)], "name")
    except StoreError:
        raise _store_unavailable()

    users = [User.model_validate(r) for r in records]
    needle = (search or "").strip().lower()
    if needle:
        users = [
            u
            for u in users
            if needle in u.name.lower() or (u.username and needle in u.username.lower())
        ]
    return users


@router.put(
    "/{user_id}/availability",
    response_model=User,
    summary="Replace a user's availability profile",
    description=(
        "Stores the weekly schedule and the date exceptions (one per date, the last "
        "entry wins). Users edit their own profile; admins may edit anyone's."
    ),
    responses={
        403: {"description": "Not your profile and not an admin."},
        404: {"description": "Unknown user."},
    },
)
async def update_availability(
    payload: AvailabilityUpdate,
    user_id: str = Path(..., description="User id."),
    user: SessionUser = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
) -> User:
    if user.id != user_id and not user.is_admin:
        raise HTTPException(
            status_code=HTTPStatus.FORBIDDEN,
            detail="You can only edit your own availability.",
        )

    try:
        record = await store.get(USERS, user_id)
        if record is None:
            raise HTTPException(
                status_code=HTTPStatus.NOT_FOUND,
                detail=f"User with id '{user_id}' not found.",
            )
        profile = payload.to_profile().model_dump(mode="json")
        await store.update(USERS, user_id, profile)
    except StoreError:
        raise _store_unavailable()

    return User.model_validate({**record, **profile})
