# meeting_scheduler/api/routes/rooms.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response

from meeting_scheduler.api.dependencies.identity import get_current_user, require_admin
from meeting_scheduler.api.dependencies.services import get_store
from meeting_scheduler.core.logging import get_logger
from meeting_scheduler.schemas.room import Room, RoomCreate, RoomUpdate
from meeting_scheduler.schemas.user import SessionUser
from meeting_scheduler.services.record_store import ROOMS, RecordStore, StoreError

logger = get_logger(__name__)

router = APIRouter(prefix="/rooms", tags=["Rooms"])


def _store_unavailable() -> HTTPException:
    return HTTPException(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        detail="The room store is unavailable. Please try again.",
    )


async def _get_room_or_404(store: RecordStore, room_id: str) -> Room:
    try:
        record = await store.get(ROOMS, room_id)
    except StoreError:
        raise _store_unavailable()
    if record is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Room with id '{room_id}' not found.",
        )
    return Room.model_validate(record)


@router.get(
    "",
    response_model=list[Room],
    summary="List rooms",
    description=(
        "Rooms ordered by name. `only_active=true` returns the rooms offered for new "
        "bookings, `only_active=false` the inactive ones, omitted returns all."
    ),
)
async def list_rooms(
    only_active: bool | None = Query(default=None, description="Filter on the active flag."),
    user: SessionUser = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
) -> list[Room]:
    filters = [] if only_active is None else [("active", "==", only_active)]
    try:
        records = await store.query(ROOMS, filters, "name")
    except StoreError:
        raise _store_unavailable()
    return [Room.model_validate(r) for r in records]


@router.post(
    "",
    response_model=Room,
    status_code=HTTPStatus.CREATED,
    summary="Create a room",
    responses={403: {"description": "Administrator role required."}},
)
async def create_room(
    payload: RoomCreate,
    admin: SessionUser = Depends(require_admin),
    store: RecordStore = Depends(get_store),
) -> Room:
    try:
        room_id = await store.create(ROOMS, payload.model_dump(mode="json"))
    except StoreError:
        raise _store_unavailable()

    logger.info("Room %s ('%s') created by %s", room_id, payload.name, admin.id)
    return Room(id=room_id, **payload.model_dump())


@router.patch(
    "/{room_id}",
    response_model=Room,
    summary="Partially update a room",
    description=(
        "Only provided fields are changed. Renaming or deactivating a room does not "
        "touch meetings already booked in it."
    ),
    responses={
        403: {"description": "Administrator role required."},
        404: {"description": "Unknown room."},
    },
)
async def update_room(
    payload: RoomUpdate,
    room_id: str = Path(..., description="Room id."),
    admin: SessionUser = Depends(require_admin),
    store: RecordStore = Depends(get_store),
) -> Room:
    room = await _get_room_or_404(store, room_id)
    update_data = payload.model_dump(mode="json", exclude_unset=True)
    if not update_data:
        return room

    try:
        await store.update(ROOMS, room_id, update_data)
    except StoreError:
        raise _store_unavailable()

    return room.model_copy(update=payload.model_dump(exclude_unset=True))


@router.delete(
    "/{room_id}",
    status_code=HTTPStatus.NO_CONTENT,
    summary="Delete a room",
    description="Meetings booked in the room keep their stored room id and name.",
    responses={
        403: {"description": "Administrator role required."},
        404: {"description": "Unknown room."},
    },
)
async def delete_room(
    room_id: str = Path(..., description="Room id."),
    admin: SessionUser = Depends(require_admin),
    store: RecordStore = Depends(get_store),
) -> Response:
    await _get_room_or_404(store, room_id)
    try:
        await store.delete(ROOMS, room_id)
    except StoreError:
        raise _store_unavailable()

    logger.info("Room %s deleted by %s", room_id, admin.id)
    return Response(status_code=HTTPStatus.NO_CONTENT)
