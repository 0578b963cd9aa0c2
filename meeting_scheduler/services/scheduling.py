# meeting_scheduler/services/scheduling.py
"""
Write side of the scheduler: edit sessions and the checked save.

A save never trusts the week board. It re-reads the meetings of the target
date from the store, runs the conflict checker, and only writes when there
is no hard conflict. Nothing locks the store between the check and the
write, so two concurrent sessions can still double-book.
"""

from __future__ import annotations

import asyncio
from datetime import date as date_type, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set

from pydantic import ValidationError

from meeting_scheduler.core.config import OrganizerPolicy, Settings, get_settings
from meeting_scheduler.core.logging import get_logger
from meeting_scheduler.schemas.conflict import ConflictReport
from meeting_scheduler.schemas.meeting import Meeting, MeetingDraft, MeetingType, Participant
from meeting_scheduler.schemas.room import Room
from meeting_scheduler.schemas.scheduling import (
    EditTab,
    NotificationPayload,
    SaveOutcome,
    SaveResult,
    SessionState,
)
from meeting_scheduler.schemas.user import AvailabilityProfile, SessionUser, User
from meeting_scheduler.services.conflict_checker import check_conflicts
from meeting_scheduler.services.notifications import NotificationDispatcher
from meeting_scheduler.services.record_store import (
    MEETINGS,
    ROOMS,
    USERS,
    RecordStore,
    StoreError,
)
from meeting_scheduler.services.time_grid import prefill_range
from meeting_scheduler.services.week_board import WeekBoard

logger = get_logger(__name__)

SAVE_FAILED_MESSAGE = "The meeting could not be saved. Please try again."

# Draft fields whose change invalidates previously reported hard conflicts.
CONFLICT_FIELDS = frozenset({"date", "start_time", "end_time", "room_id", "type", "participants"})


class PermissionDeniedError(PermissionError):
    """
    Raised when a user modifies a meeting they neither organize nor administer.
    """


class SessionStateError(RuntimeError):
    """
    Raised when an edit session is asked to do something its state forbids.
    """


class MeetingNotFoundError(LookupError):
    """
    Raised when the meeting being opened or deleted is not in the store.
    """


class ConfirmationRequiredError(ValueError):
    """
    Raised when a delete is requested without explicit confirmation.
    """


def validate_draft(draft: MeetingDraft) -> Optional[str]:
    """
    Return a user-facing message for the first input problem, or None.
    """
    if not draft.title.strip():
        return "A title is required."
    if draft.start_time >= draft.end_time:
        return "The end time must be after the start time."
    if draft.type == MeetingType.IN_PERSON and not draft.room_id:
        return "Select a room for an in-person meeting."
    return None


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _keeps_room(session: MeetingEditSession) -> bool:
    return session.meeting is not None and session.meeting.room_id == session.draft.room_id


def _room_problem(session: MeetingEditSession, room: Optional[Room]) -> Optional[str]:
    """
    New bookings need an existing, active room. An edit that keeps the
    meeting's current room stays valid after that room is retired or deleted.
    """
    if session.draft.type != MeetingType.IN_PERSON or _keeps_room(session):
        return None
    if room is None:
        return "The selected room does not exist."
    if not room.active:
        return "The selected room is no longer available."
    return None


class MeetingEditSession:
    """
    Draft state of one meeting being created or edited.

    idle -> editing -> validating -> blocked | saving -> saved | save_failed

    `blocked` and `save_failed` go back to `editing` on the next change; a
    closed session is `idle`.
    """

    def __init__(
        self,
        user: SessionUser,
        draft: MeetingDraft,
        meeting: Optional[Meeting] = None,
    ) -> None:
        self.user = user
        self.meeting = meeting
        self.draft = draft
        self.state = SessionState.EDITING
        self.tab = EditTab.INFO
        self.hard_conflicts: List[str] = []
        self.soft_warnings: List[str] = []
        self.message: Optional[str] = None

    @property
    def meeting_id(self) -> Optional[str]:
        return self.meeting.id if self.meeting is not None else None

    @property
    def is_new(self) -> bool:
        return self.meeting is None

    @property
    def is_open(self) -> bool:
        return self.state not in (SessionState.IDLE, SessionState.SAVED)

    @property
    def save_in_flight(self) -> bool:
        return self.state in (SessionState.VALIDATING, SessionState.SAVING)

    def _require_editable(self) -> None:
        if not self.is_open:
            raise SessionStateError("The edit session is closed.")
        if self.save_in_flight:
            raise SessionStateError("A save is in progress.")

    def select_tab(self, tab: EditTab) -> None:
        self._require_editable()
        self.tab = EditTab(tab)

    def update(self, **changes: Any) -> MeetingDraft:
        """
        Apply field changes to the draft. Switching to a virtual meeting
        drops the room.
        """
        self._require_editable()

        unknown = set(changes) - set(MeetingDraft.model_fields)
        if unknown:
            raise ValueError(f"Unknown draft fields: {', '.join(sorted(unknown))}")

        data = self.draft.model_dump()
        data.update(changes)
        if MeetingType(data["type"]) == MeetingType.VIRTUAL:
            data["room_id"] = None

        self.draft = MeetingDraft.model_validate(data)
        if CONFLICT_FIELDS & set(changes):
            self.hard_conflicts = []
        self.state = SessionState.EDITING
        self.message = None
        return self.draft

    def toggle_participant(self, participant: Participant) -> MeetingDraft:
        current = list(self.draft.participants)
        if participant.id in self.draft.participant_ids():
            current = [p for p in current if p.id != participant.id]
        else:
            current.append(participant)
        return self.update(participants=current)

    def close(self) -> None:
        self.state = SessionState.IDLE
        self.hard_conflicts = []
        self.soft_warnings = []
        self.message = None


class SchedulingOrchestrator:
    """
    Opens edit sessions, previews conflicts, and performs checked saves and
    confirmed deletes against the record store.
    """

    def __init__(
        self,
        store: RecordStore,
        dispatcher: Optional[NotificationDispatcher] = None,
        settings: Optional[Settings] = None,
        today: Callable[[], date_type] = date_type.today,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._settings = settings or get_settings()
        self._today = today
        self._pending: Set[asyncio.Task] = set()
        self.board = WeekBoard(store, self._settings, today)

    # ------------------------------------------------------------------
    # sessions
    # ------------------------------------------------------------------

    @staticmethod
    def can_modify(user: SessionUser, meeting: Meeting) -> bool:
        return user.is_admin or meeting.organizer_id == user.id

    def prefill(self, day: Optional[date_type] = None, hour: Optional[int] = None) -> MeetingDraft:
        start, end = prefill_range(hour, self._settings.GRID_HOUR_END)
        return MeetingDraft(date=day or self._today(), start_time=start, end_time=end)

    def open_new(
        self,
        user: SessionUser,
        day: Optional[date_type] = None,
        hour: Optional[int] = None,
    ) -> MeetingEditSession:
        """
        Start a new meeting from a grid cell; the creator is invited.
        """
        draft = self.prefill(day, hour)
        draft.participants = [
            Participant(id=user.id, name=user.name, avatar_url=user.avatar_url)
        ]
        return MeetingEditSession(user, draft)

    def open_edit(self, user: SessionUser, meeting: Meeting) -> MeetingEditSession:
        draft = MeetingDraft.model_validate(
            meeting.model_dump(include=set(MeetingDraft.model_fields))
        )
        return MeetingEditSession(user, draft, meeting=meeting)

    async def get_meeting(self, meeting_id: str) -> Meeting:
        record = await self._store.get(MEETINGS, meeting_id)
        if record is None:
            raise MeetingNotFoundError(meeting_id)
        return Meeting.model_validate(record)

    # ------------------------------------------------------------------
    # conflict checking
    # ------------------------------------------------------------------

    async def _meetings_on(self, day: date_type) -> List[Meeting]:
        records = await self._store.query(MEETINGS, [("date", "==", day)])
        meetings: List[Meeting] = []
        for record in records:
            try:
                meetings.append(Meeting.model_validate(record))
            except ValidationError:
                logger.warning("Ignoring malformed meeting %s", record.get("id"))
        return meetings

    async def _profiles_for(self, draft: MeetingDraft) -> Dict[str, AvailabilityProfile]:
        wanted = draft.participant_ids()
        if not wanted:
            return {}
        profiles: Dict[str, AvailabilityProfile] = {}
        for record in await self._store.query(USERS, []):
            if record.get("id") not in wanted:
                continue
            try:
                profiles[record["id"]] = User.model_validate(record).profile
            except ValidationError:
                logger.warning("Ignoring malformed user %s", record.get("id"))
        return profiles

    async def _room_for(self, draft: MeetingDraft) -> Optional[Room]:
        if draft.type != MeetingType.IN_PERSON or not draft.room_id:
            return None
        record = await self._store.get(ROOMS, draft.room_id)
        return Room.model_validate(record) if record is not None else None

    async def check(
        self,
        draft: MeetingDraft,
        exclude_id: Optional[str] = None,
        room: Optional[Room] = None,
    ) -> ConflictReport:
        """
        Check a draft against the meetings stored for its date, read fresh.

        Raises StoreError when the store cannot be read.
        """
        if room is None:
            room = await self._room_for(draft)
        return check_conflicts(
            draft,
            await self._meetings_on(draft.date),
            await self._profiles_for(draft),
            exclude_id=exclude_id,
            room_name=room.name if room is not None else None,
        )

    # ------------------------------------------------------------------
    # save & delete
    # ------------------------------------------------------------------

    def _organizer(self, session: MeetingEditSession) -> tuple[str, str]:
        user = session.user
        original = session.meeting
        if original is None:
            return user.id, user.name

        policy = self._settings.ORGANIZER_POLICY
        if policy == OrganizerPolicy.LAST_EDITOR:
            return user.id, user.name
        if policy == OrganizerPolicy.ADMIN_REASSIGN and user.is_admin:
            return user.id, user.name
        return original.organizer_id, original.organizer_name

    @staticmethod
    def _room_name(session: MeetingEditSession, room: Optional[Room]) -> Optional[str]:
        if room is not None:
            return room.name
        if _keeps_room(session):
            return session.meeting.room_name
        return None

    def _document(self, session: MeetingEditSession, room: Optional[Room]) -> Dict[str, Any]:
        draft = session.draft
        in_person = draft.type == MeetingType.IN_PERSON
        organizer_id, organizer_name = self._organizer(session)

        doc: Dict[str, Any] = {
            "title": draft.title.strip(),
            "description": _clean(draft.description),
            "notes": _clean(draft.notes),
            "link": _clean(draft.link),
            "type": draft.type.value,
            "room_id": draft.room_id if in_person else None,
            "room_name": self._room_name(session, room) if in_person else None,
            "date": draft.date.isoformat(),
            "start_time": draft.start_time.isoformat(timespec="minutes"),
            "end_time": draft.end_time.isoformat(timespec="minutes"),
            "participants": [p.model_dump(mode="json") for p in draft.participants],
            "organizer_id": organizer_id,
            "organizer_name": organizer_name,
        }
        if session.is_new:
            doc["created_at"] = datetime.now(tz=timezone.utc).isoformat()
        return doc

    async def save(self, session: MeetingEditSession) -> SaveResult:
        """
        Validate, check conflicts and persist the session's draft.

        Hard conflicts block the save and are reported, not raised. Store
        failures are reported as a generic failure and leave the draft intact.
        """
        if session.save_in_flight:
            raise SessionStateError("A save is already in progress.")
        if not session.is_open:
            raise SessionStateError("The edit session is closed.")
        if session.meeting is not None and not self.can_modify(session.user, session.meeting):
            raise PermissionDeniedError("Only the organizer or an admin can edit this meeting.")

        draft = session.draft
        session.state = SessionState.VALIDATING
        session.hard_conflicts = []
        session.message = None

        room: Optional[Room] = None
        problem = validate_draft(draft)
        if problem is None:
            try:
                room = await self._room_for(draft)
            except StoreError:
                return self._failed(session, "Room lookup failed")
            problem = _room_problem(session, room)

        if problem is not None:
            session.state = SessionState.EDITING
            session.message = problem
            return SaveResult(outcome=SaveOutcome.INVALID, message=problem)

        # Nothing is locked between this read and the write below; two
        # concurrent saves for the same slot can both pass.
        try:
            report = await self.check(draft, exclude_id=session.meeting_id, room=room)
        except StoreError:
            return self._failed(session, "Conflict check failed")

        session.soft_warnings = list(report.soft)
        if report.blocking:
            session.state = SessionState.BLOCKED
            session.hard_conflicts = list(report.hard)
            logger.info(
                "Save of '%s' on %s blocked by %d conflict(s)",
                draft.title,
                draft.date,
                len(report.hard),
            )
            return SaveResult(
                outcome=SaveOutcome.BLOCKED,
                meeting_id=session.meeting_id,
                hard_conflicts=report.hard,
                soft_warnings=report.soft,
            )

        session.state = SessionState.SAVING
        doc = self._document(session, room)
        try:
            if session.is_new:
                meeting_id = await self._store.create(MEETINGS, doc)
            else:
                meeting_id = session.meeting_id
                await self._store.update(MEETINGS, meeting_id, doc)
        except StoreError:
            return self._failed(session, "Persisting the meeting failed")

        created = session.is_new
        session.state = SessionState.SAVED
        logger.info("%s meeting %s", "Created" if created else "Updated", meeting_id)

        if created:
            self._notify_participants(session, meeting_id)

        return SaveResult(
            outcome=SaveOutcome.SAVED,
            meeting_id=meeting_id,
            created=created,
            soft_warnings=report.soft,
        )

    def _failed(self, session: MeetingEditSession, what: str) -> SaveResult:
        logger.exception("%s for '%s'", what, session.draft.title)
        session.state = SessionState.SAVE_FAILED
        session.message = SAVE_FAILED_MESSAGE
        return SaveResult(
            outcome=SaveOutcome.FAILED,
            meeting_id=session.meeting_id,
            message=SAVE_FAILED_MESSAGE,
        )

    def _notify_participants(self, session: MeetingEditSession, meeting_id: str) -> None:
        if self._dispatcher is None or not session.draft.participants:
            return

        payload = NotificationPayload(
            title=session.draft.title.strip(),
            message=f"{session.user.name} invited you to a meeting",
            reference_id=meeting_id,
            created_by=session.user.name,
        )
        names = [p.name for p in session.draft.participants if p.id != session.user.id]
        if not names:
            return
        task = asyncio.create_task(self._dispatcher.notify(names, payload))
        self._pending.add(task)
        task.add_done_callback(self._notification_done)

    def _notification_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Participant notification failed", exc_info=exc)

    async def wait_for_notifications(self) -> None:
        """
        Wait for notification deliveries started by earlier saves.
        """
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def delete(self, user: SessionUser, meeting_id: str, confirm: bool = False) -> None:
        """
        Delete a meeting after explicit confirmation, whatever its conflicts.

        StoreError propagates to the caller.
        """
        if not confirm:
            raise ConfirmationRequiredError("Deleting a meeting must be confirmed.")

        meeting = await self.get_meeting(meeting_id)
        if not self.can_modify(user, meeting):
            raise PermissionDeniedError("Only the organizer or an admin can delete this meeting.")

        await self._store.delete(MEETINGS, meeting_id)
        logger.info("Deleted meeting %s ('%s')", meeting_id, meeting.title)
