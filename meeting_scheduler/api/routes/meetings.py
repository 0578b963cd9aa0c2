# meeting_scheduler/api/routes/meetings.py
from datetime import date as date_type
from http import HTTPStatus

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Path, Query, Response

from meeting_scheduler.api.dependencies.identity import get_current_user
from meeting_scheduler.api.dependencies.services import get_orchestrator
from meeting_scheduler.schemas.conflict import ConflictReport
from meeting_scheduler.schemas.meeting import Meeting, MeetingDraft
from meeting_scheduler.schemas.scheduling import SaveOutcome, SaveResult
from meeting_scheduler.schemas.user import SessionUser
from meeting_scheduler.schemas.week_view import WeekView
from meeting_scheduler.services.record_store import StoreError
from meeting_scheduler.services.scheduling import (
    ConfirmationRequiredError,
    MeetingEditSession,
    MeetingNotFoundError,
    PermissionDeniedError,
    SchedulingOrchestrator,
)

router = APIRouter(prefix="/meetings", tags=["Meetings"])


def _store_unavailable() -> HTTPException:
    return HTTPException(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        detail="The meeting store is unavailable. Please try again.",
    )


def _not_found(meeting_id: str) -> HTTPException:
    return HTTPException(
        status_code=HTTPStatus.NOT_FOUND,
        detail=f"Meeting with id '{meeting_id}' not found.",
    )


async def _save(
    orchestrator: SchedulingOrchestrator,
    session: MeetingEditSession,
    background_tasks: BackgroundTasks,
) -> SaveResult:
    """
    Run a checked save and translate its outcome to HTTP errors.
    """
    try:
        result = await orchestrator.save(session)
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail=str(exc))

    if result.outcome == SaveOutcome.INVALID:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=result.message)
    if result.outcome == SaveOutcome.BLOCKED:
        raise HTTPException(
            status_code=HTTPStatus.CONFLICT,
            detail={
                "message": "The meeting conflicts with existing bookings.",
                "hard_conflicts": result.hard_conflicts,
                "soft_warnings": result.soft_warnings,
            },
        )
    if result.outcome == SaveOutcome.FAILED:
        raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail=result.message)

    # Participant notifications finish after the response is sent.
    background_tasks.add_task(orchestrator.wait_for_notifications)
    return result


@router.get(
    "/week",
    response_model=WeekView,
    summary="Week grid",
    description=(
        "Monday..Sunday view containing `week_of` (defaults to the current week): "
        "per-day meetings with their overlap column, grid geometry and color, the "
        "clickable hours and the rooms offered for booking."
    ),
)
async def get_week(
    week_of: date_type | None = Query(
        default=None,
        description="Any date inside the requested week.",
        examples=["2025-06-11"],
    ),
    user: SessionUser = Depends(get_current_user),
    orchestrator: SchedulingOrchestrator = Depends(get_orchestrator),
) -> WeekView:
    try:
        return await orchestrator.board.load(week_of)
    except StoreError:
        raise _store_unavailable()


@router.get(
    "/new",
    response_model=MeetingDraft,
    summary="Prefilled draft for a new meeting",
    description=(
        "Draft for the grid cell at `date` / `hour`: a one-hour range anchored at the "
        "hour (09:00-10:00 without one), with the caller already invited."
    ),
)
async def new_meeting_draft(
    date: date_type | None = Query(default=None, description="Day of the clicked cell."),
    hour: int | None = Query(default=None, ge=0, le=23, description="Hour of the clicked cell."),
    user: SessionUser = Depends(get_current_user),
    orchestrator: SchedulingOrchestrator = Depends(get_orchestrator),
) -> MeetingDraft:
    return orchestrator.open_new(user, date, hour).draft


@router.post(
    "/conflicts",
    response_model=ConflictReport,
    summary="Preview conflicts without saving",
    description=(
        "Checks a draft against the meetings stored for its date. Hard conflicts "
        "(room or participant double-bookings) would block a save; soft ones are "
        "availability warnings."
    ),
)
async def preview_conflicts(
    payload: MeetingDraft,
    exclude_id: str | None = Query(
        default=None,
        description="Id of the meeting being edited, so it is not compared with itself.",
    ),
    user: SessionUser = Depends(get_current_user),
    orchestrator: SchedulingOrchestrator = Depends(get_orchestrator),
) -> ConflictReport:
    if payload.start_time >= payload.end_time:
        raise HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            detail="The end time must be after the start time.",
        )
    try:
        return await orchestrator.check(payload, exclude_id=exclude_id)
    except StoreError:
        raise _store_unavailable()


@router.post(
    "",
    response_model=SaveResult,
    status_code=HTTPStatus.CREATED,
    summary="Create a meeting",
    description=(
        "Validates the draft, re-checks conflicts against the store and creates the "
        "meeting only when no hard conflict exists. Participants other than the "
        "organizer are notified."
    ),
    responses={
        409: {"description": "Blocked by room or participant double-bookings."},
        422: {"description": "Invalid input (time range, missing room, ...)."},
        503: {"description": "The record store failed."},
    },
)
async def create_meeting(
    payload: MeetingDraft,
    background_tasks: BackgroundTasks,
    user: SessionUser = Depends(get_current_user),
    orchestrator: SchedulingOrchestrator = Depends(get_orchestrator),
) -> SaveResult:
    session = orchestrator.open_new(user, payload.date)
    session.update(**payload.model_dump())
    return await _save(orchestrator, session, background_tasks)


@router.get(
    "/{meeting_id}",
    response_model=Meeting,
    summary="Get a meeting by id",
)
async def get_meeting(
    meeting_id: str = Path(..., description="Meeting id."),
    user: SessionUser = Depends(get_current_user),
    orchestrator: SchedulingOrchestrator = Depends(get_orchestrator),
) -> Meeting:
    try:
        return await orchestrator.get_meeting(meeting_id)
    except MeetingNotFoundError:
        raise _not_found(meeting_id)
    except StoreError:
        raise _store_unavailable()


@router.put(
    "/{meeting_id}",
    response_model=SaveResult,
    summary="Update a meeting",
    description="Same checked save as creation; only the organizer or an admin may edit.",
    responses={
        403: {"description": "Caller is neither the organizer nor an admin."},
        404: {"description": "Unknown meeting."},
        409: {"description": "Blocked by room or participant double-bookings."},
        422: {"description": "Invalid input."},
        503: {"description": "The record store failed."},
    },
)
async def update_meeting(
    payload: MeetingDraft,
    background_tasks: BackgroundTasks,
    meeting_id: str = Path(..., description="Meeting id."),
    user: SessionUser = Depends(get_current_user),
    orchestrator: SchedulingOrchestrator = Depends(get_orchestrator),
) -> SaveResult:
    try:
        meeting = await orchestrator.get_meeting(meeting_id)
    except MeetingNotFoundError:
        raise _not_found(meeting_id)
    except StoreError:
        raise _store_unavailable()

    session = orchestrator.open_edit(user, meeting)
    session.update(**payload.model_dump())
    return await _save(orchestrator, session, background_tasks)


@router.delete(
    "/{meeting_id}",
    status_code=HTTPStatus.NO_CONTENT,
    summary="Delete a meeting",
    description=(
        "Deletes the meeting regardless of conflicts. The caller must pass "
        "`confirm=true`; only the organizer or an admin may delete."
    ),
    responses={
        400: {"description": "Deletion was not confirmed."},
        403: {"description": "Caller is neither the organizer nor an admin."},
        404: {"description": "Unknown meeting."},
    },
)
async def delete_meeting(
    meeting_id: str = Path(..., description="Meeting id."),
    confirm: bool = Query(default=False, description="Must be true to delete."),
    user: SessionUser = Depends(get_current_user),
    orchestrator: SchedulingOrchestrator = Depends(get_orchestrator),
) -> Response:
    try:
        await orchestrator.delete(user, meeting_id, confirm=confirm)
    except ConfirmationRequiredError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(exc))
    except MeetingNotFoundError:
        raise _not_found(meeting_id)
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail=str(exc))
    except StoreError:
        raise _store_unavailable()

    return Response(status_code=HTTPStatus.NO_CONTENT)
