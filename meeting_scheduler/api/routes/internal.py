# meeting_scheduler/api/routes/internal.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from meeting_scheduler.api.dependencies.internal_auth import verify_internal_api_key
from meeting_scheduler.api.dependencies.services import get_store
from meeting_scheduler.core.logging import get_logger
from meeting_scheduler.schemas.user import User, UserCreate
from meeting_scheduler.services.record_store import USERS, RecordStore, StoreError

logger = get_logger(__name__)

router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(verify_internal_api_key)],
)


@router.post(
    "/users",
    response_model=User,
    status_code=HTTPStatus.CREATED,
    summary="Provision a user",
    description=(
        "Creates a user record in the directory. Intended for provisioning scripts "
        "and the identity provider sync; protected via the `X-Internal-Api-Key` "
        "header when configured."
    ),
    responses={
        400: {"description": "A user with the same username already exists."},
        401: {"description": "Missing or invalid internal API key (if configured)."},
    },
)
async def provision_user(
    payload: UserCreate,
    store: RecordStore = Depends(get_store),
) -> User:
    try:
        if payload.username:
            existing = await store.query(USERS, [("username", "==", payload.username)])
            if existing:
                raise HTTPException(
                    status_code=HTTPStatus.BAD_REQUEST,
                    detail=f"User with username '{payload.username}' already exists.",
                )
        user_id = await store.create(USERS, payload.model_dump(mode="json"))
    except StoreError:
        raise HTTPException(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            detail="The user directory is unavailable. Please try again.",
        )

    logger.info("Provisioned user %s (%s)", user_id, payload.name)
    return User(id=user_id, **payload.model_dump())
