# meeting_scheduler/services/week_board.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date as date_type
from typing import AsyncIterator, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from meeting_scheduler.core.config import Settings, get_settings
from meeting_scheduler.core.logging import get_logger
from meeting_scheduler.schemas.meeting import Meeting, MeetingType
from meeting_scheduler.schemas.room import DEFAULT_ROOM_COLOR, Room
from meeting_scheduler.schemas.user import AvailabilityProfile, User
from meeting_scheduler.schemas.week_view import DayView, PlacedMeeting, WeekView
from meeting_scheduler.services.layout_engine import layout_meetings
from meeting_scheduler.services.record_store import (
    MEETINGS,
    ROOMS,
    USERS,
    Filter,
    RecordStore,
    Snapshot,
    StoreError,
)
from meeting_scheduler.services.time_grid import (
    grid_box,
    hour_slots,
    monday_of,
    shift_week,
    week_days,
    weekday_of,
)

logger = get_logger(__name__)

VIRTUAL_COLOR = "#3b82f6"

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class SnapshotDiff:
    """
    What changed in one collection after applying a snapshot.
    """

    collection: str
    added: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.modified or self.removed)


class _Collection(Generic[ModelT]):
    def __init__(self, name: str, model: Type[ModelT]) -> None:
        self.name = name
        self.model = model
        self.items: Dict[str, ModelT] = {}

    def apply(self, snapshot: Snapshot) -> SnapshotDiff:
        diff = SnapshotDiff(collection=self.name)
        incoming: Dict[str, ModelT] = {}

        for record in snapshot:
            try:
                item = self.model.model_validate(record)
            except ValidationError:
                logger.warning(
                    "Skipping malformed %s record %s", self.name, record.get("id"), exc_info=True
                )
                continue
            incoming[item.id] = item  # type: ignore[attr-defined]

        for item_id, item in incoming.items():
            previous = self.items.get(item_id)
            if previous is None:
                diff.added.append(item_id)
            elif previous != item:
                diff.modified.append(item_id)

        diff.removed = [item_id for item_id in self.items if item_id not in incoming]
        self.items = incoming
        return diff


class WeekState:
    """
    Meetings of the displayed week, rooms and the user directory.

    Only `apply_snapshot` mutates it; layout and conflict checking receive
    copies of its contents.
    """

    def __init__(self) -> None:
        self._collections = {
            MEETINGS: _Collection(MEETINGS, Meeting),
            ROOMS: _Collection(ROOMS, Room),
            USERS: _Collection(USERS, User),
        }

    def apply_snapshot(self, collection: str, snapshot: Snapshot) -> SnapshotDiff:
        try:
            target = self._collections[collection]
        except KeyError:
            raise ValueError(f"WeekState does not track '{collection}'") from None
        return target.apply(snapshot)

    @property
    def meetings(self) -> Dict[str, Meeting]:
        return dict(self._collections[MEETINGS].items)

    @property
    def rooms(self) -> Dict[str, Room]:
        return dict(self._collections[ROOMS].items)

    @property
    def users(self) -> Dict[str, User]:
        return dict(self._collections[USERS].items)


class WeekBoard:
    """
    Read side of the scheduler: the week being displayed, kept current by
    store subscriptions and rendered through the layout engine.
    """

    def __init__(
        self,
        store: RecordStore,
        settings: Optional[Settings] = None,
        today: Callable[[], date_type] = date_type.today,
    ) -> None:
        self._store = store
        self._settings = settings or get_settings()
        self._today = today
        self.week_start = monday_of(today())
        self.state = WeekState()
        self._follow_week: Optional[Callable[[], None]] = None

    @property
    def week_end(self) -> date_type:
        return week_days(self.week_start)[-1]

    # ------------------------------------------------------------------
    # loading & navigation
    # ------------------------------------------------------------------

    def _queries(self) -> Dict[str, tuple]:
        meeting_filters: List[Filter] = [
            ("date", ">=", self.week_start),
            ("date", "<=", self.week_end),
        ]
        return {
            MEETINGS: (meeting_filters, "date"),
            ROOMS: ([], "name"),
            USERS: ([("active", "==", True)], "name"),
        }

    async def load(self, day: Optional[date_type] = None) -> WeekView:
        """
        Fetch the Monday..Sunday week containing `day` (default: the current
        week) together with rooms and active users.
        """
        if day is not None and monday_of(day) != self.week_start:
            self.week_start = monday_of(day)
            if self._follow_week is not None:
                self._follow_week()

        for collection, (filters, ordering) in self._queries().items():
            snapshot = await self._store.query(collection, filters, ordering)
            self.state.apply_snapshot(collection, snapshot)

        logger.info(
            "Loaded week %s..%s (%d meetings)",
            self.week_start,
            self.week_end,
            len(self.state.meetings),
        )
        return self.view()

    async def next_week(self) -> WeekView:
        return await self.load(shift_week(self.week_start, 1))

    async def previous_week(self) -> WeekView:
        return await self.load(shift_week(self.week_start, -1))

    async def this_week(self) -> WeekView:
        return await self.load(self._today())

    async def watch(self) -> AsyncIterator[SnapshotDiff]:
        """
        Follow the store: subscribe to meetings of the week, rooms and users,
        apply every pushed snapshot and yield the resulting diff.

        Navigating to another week moves the meetings subscription along;
        snapshots still in flight for the previous week are dropped.
        Subscriptions are closed when the consumer stops iterating.
        """
        queue: asyncio.Queue = asyncio.Queue()
        tasks: List[asyncio.Task] = []
        meetings_pump: Dict[str, asyncio.Task] = {}

        async def pump(
            collection: str,
            week_start: date_type,
            filters: List[Filter],
            ordering: Optional[str],
        ) -> None:
            try:
                async for snapshot in self._store.subscribe(collection, filters, ordering):
                    await queue.put((collection, week_start, snapshot))
            except StoreError as exc:
                await queue.put((collection, week_start, exc))

        def start(collection: str) -> asyncio.Task:
            filters, ordering = self._queries()[collection]
            task = asyncio.create_task(pump(collection, self.week_start, filters, ordering))
            tasks.append(task)
            return task

        def follow_week() -> None:
            meetings_pump[MEETINGS].cancel()
            meetings_pump[MEETINGS] = start(MEETINGS)

        for collection in (MEETINGS, ROOMS, USERS):
            task = start(collection)
            if collection == MEETINGS:
                meetings_pump[MEETINGS] = task
        self._follow_week = follow_week

        try:
            while True:
                collection, week_start, snapshot = await queue.get()
                if isinstance(snapshot, StoreError):
                    raise snapshot
                if collection == MEETINGS and week_start != self.week_start:
                    continue
                yield self.state.apply_snapshot(collection, snapshot)
        finally:
            if self._follow_week is follow_week:
                self._follow_week = None
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # read helpers
    # ------------------------------------------------------------------

    def meetings_on(self, day: date_type) -> List[Meeting]:
        return sorted(
            (m for m in self.state.meetings.values() if m.date == day),
            key=lambda m: (m.start_time, m.end_time),
        )

    def bookable_rooms(self, selected_room_id: Optional[str] = None) -> List[Room]:
        """
        Active rooms, plus the currently selected room even if it has been
        deactivated since it was booked.
        """
        return [
            room
            for room in self.state.rooms.values()
            if room.active or room.id == selected_room_id
        ]

    def profiles(self) -> Dict[str, AvailabilityProfile]:
        return {user_id: user.profile for user_id, user in self.state.users.items()}

    def directory(self, search: str = "") -> List[User]:
        needle = search.strip().lower()
        users = list(self.state.users.values())
        if not needle:
            return users
        return [
            u
            for u in users
            if needle in u.name.lower() or (u.username and needle in u.username.lower())
        ]

    def meeting_color(self, meeting: Meeting) -> str:
        if meeting.type == MeetingType.VIRTUAL:
            return VIRTUAL_COLOR
        room = self.state.rooms.get(meeting.room_id or "")
        return room.color if room is not None else DEFAULT_ROOM_COLOR

    def view(self) -> WeekView:
        today = self._today()
        days: List[DayView] = []

        for day in week_days(self.week_start):
            meetings = [m for m in self.meetings_on(day) if m.start_time < m.end_time]
            placements = layout_meetings(meetings)
            placed = [
                PlacedMeeting(
                    meeting=m,
                    placement=placements[m.id],
                    box=grid_box(
                        m.start_time,
                        m.end_time,
                        placements[m.id].column,
                        placements[m.id].total_columns,
                        hour_start=self._settings.GRID_HOUR_START,
                        min_block_minutes=self._settings.MIN_BLOCK_MINUTES,
                    ),
                    color=self.meeting_color(m),
                )
                for m in meetings
            ]
            days.append(
                DayView(
                    date=day,
                    weekday=weekday_of(day),
                    is_today=day == today,
                    meeting_count=len(placed),
                    meetings=placed,
                )
            )

        return WeekView(
            week_start=self.week_start,
            week_end=self.week_end,
            hours=hour_slots(self._settings.GRID_HOUR_START, self._settings.GRID_HOUR_END),
            days=days,
            rooms=self.bookable_rooms(),
        )
