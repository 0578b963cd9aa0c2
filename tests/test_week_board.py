# tests/test_week_board.py
import asyncio
from datetime import date

import pytest

from meeting_scheduler.services.record_store import MEETINGS, ROOMS, USERS, InMemoryRecordStore
from meeting_scheduler.services.week_board import VIRTUAL_COLOR, WeekBoard, WeekState

MONDAY = date(2025, 6, 9)
TUESDAY = date(2025, 6, 10)


def _meeting_doc(title: str, day: date, start: str, end: str, **extra) -> dict:
    return {
        "title": title,
        "type": "virtual",
        "date": day,
        "start_time": start,
        "end_time": end,
        "participants": [],
        "organizer_id": "ana",
        "organizer_name": "Ana Pérez",
        **extra,
    }


async def _seed(store: InMemoryRecordStore) -> dict:
    ids = {}
    ids["sala_b"] = await store.create(ROOMS, {"name": "Sala B", "color": "#10b981", "active": True})
    ids["sala_a"] = await store.create(ROOMS, {"name": "Sala A", "color": "#f59e0b", "active": True})
    ids["old"] = await store.create(ROOMS, {"name": "Old Room", "active": False})

    ids["ana"] = await store.create(USERS, {"name": "Ana Pérez", "role": "member", "active": True})
    ids["gone"] = await store.create(USERS, {"name": "Gone User", "role": "member", "active": False})

    ids["m1"] = await store.create(
        MEETINGS,
        _meeting_doc(
            "Planning", MONDAY, "09:00", "10:00",
            type="in_person", room_id=ids["sala_a"], room_name="Sala A",
        ),
    )
    ids["m2"] = await store.create(MEETINGS, _meeting_doc("Sync", MONDAY, "09:30", "10:30"))
    ids["m3"] = await store.create(MEETINGS, _meeting_doc("Review", TUESDAY, "14:00", "14:10"))
    ids["next_week"] = await store.create(
        MEETINGS, _meeting_doc("Later", date(2025, 6, 16), "09:00", "10:00")
    )
    return ids


@pytest.mark.asyncio
async def test_load_reads_the_week_rooms_and_active_users():
    store = InMemoryRecordStore()
    ids = await _seed(store)
    board = WeekBoard(store, today=lambda: TUESDAY)

    view = await board.load()

    assert view.week_start == MONDAY
    assert view.week_end == date(2025, 6, 15)
    assert set(board.state.meetings) == {ids["m1"], ids["m2"], ids["m3"]}
    assert set(board.state.users) == {ids["ana"]}
    # only active rooms are offered, ordered by name
    assert [r.name for r in view.rooms] == ["Sala A", "Sala B"]


@pytest.mark.asyncio
async def test_view_places_overlapping_meetings_side_by_side():
    store = InMemoryRecordStore()
    ids = await _seed(store)
    board = WeekBoard(store, today=lambda: TUESDAY)

    view = await board.load()
    monday, tuesday = view.days[0], view.days[1]

    assert monday.meeting_count == 2
    assert tuesday.is_today is True and monday.is_today is False
    assert [d.weekday for d in view.days] == list(range(7))

    placed = {p.meeting.id: p for p in monday.meetings}
    assert placed[ids["m1"]].placement.column == 0
    assert placed[ids["m2"]].placement.column == 1
    assert placed[ids["m1"]].placement.total_columns == 2
    assert placed[ids["m2"]].box.left == pytest.approx(0.5)

    # in-person meetings take the room color, virtual ones the fixed blue
    assert placed[ids["m1"]].color == "#f59e0b"
    assert placed[ids["m2"]].color == VIRTUAL_COLOR

    # a 10-minute meeting is drawn at the minimum block height
    review = tuesday.meetings[0]
    assert review.box.height == 20
    assert review.box.top == (14 - 7) * 60


@pytest.mark.asyncio
async def test_navigation_between_weeks():
    store = InMemoryRecordStore()
    ids = await _seed(store)
    board = WeekBoard(store, today=lambda: TUESDAY)
    await board.load()

    view = await board.next_week()
    assert view.week_start == date(2025, 6, 16)
    assert set(board.state.meetings) == {ids["next_week"]}

    await board.previous_week()
    view = await board.previous_week()
    assert view.week_start == date(2025, 6, 2)
    assert board.state.meetings == {}

    view = await board.this_week()
    assert view.week_start == MONDAY


@pytest.mark.asyncio
async def test_bookable_rooms_keep_the_selected_inactive_room():
    store = InMemoryRecordStore()
    ids = await _seed(store)
    board = WeekBoard(store, today=lambda: TUESDAY)
    await board.load()

    assert ids["old"] not in {r.id for r in board.bookable_rooms()}
    assert ids["old"] in {r.id for r in board.bookable_rooms(selected_room_id=ids["old"])}


@pytest.mark.asyncio
async def test_directory_search():
    store = InMemoryRecordStore()
    await _seed(store)
    await store.create(USERS, {"name": "Bruno Díaz", "username": "bdiaz", "active": True})
    board = WeekBoard(store, today=lambda: TUESDAY)
    await board.load()

    assert [u.name for u in board.directory("BDI")] == ["Bruno Díaz"]
    assert len(board.directory()) == 2


def test_apply_snapshot_reports_a_diff():
    state = WeekState()
    first = state.apply_snapshot(
        ROOMS,
        [{"id": "r1", "name": "Sala A"}, {"id": "r2", "name": "Sala B"}],
    )
    assert first.added == ["r1", "r2"]
    assert first.changed is True

    second = state.apply_snapshot(
        ROOMS,
        [{"id": "r1", "name": "Sala A (2nd floor)"}, {"id": "r3", "name": "Sala C"}],
    )
    assert second.added == ["r3"]
    assert second.modified == ["r1"]
    assert second.removed == ["r2"]

    unchanged = state.apply_snapshot(
        ROOMS,
        [{"id": "r1", "name": "Sala A (2nd floor)"}, {"id": "r3", "name": "Sala C"}],
    )
    assert unchanged.changed is False


def test_apply_snapshot_skips_malformed_records():
    state = WeekState()
    diff = state.apply_snapshot(ROOMS, [{"id": "r1", "name": "Sala A"}, {"id": "r2"}])
    assert diff.added == ["r1"]
    assert set(state.rooms) == {"r1"}


def test_apply_snapshot_rejects_unknown_collections():
    with pytest.raises(ValueError):
        WeekState().apply_snapshot("notifications", [])


@pytest.mark.asyncio
async def test_watch_applies_pushed_snapshots():
    store = InMemoryRecordStore()
    await _seed(store)
    board = WeekBoard(store, today=lambda: TUESDAY)
    await board.load()

    stream = board.watch()
    initial = [await asyncio.wait_for(stream.__anext__(), timeout=1) for _ in range(3)]
    assert {d.collection for d in initial} == {MEETINGS, ROOMS, USERS}
    assert not any(d.changed for d in initial)

    new_id = await store.create(MEETINGS, _meeting_doc("Retro", TUESDAY, "16:00", "17:00"))
    diff = await asyncio.wait_for(stream.__anext__(), timeout=1)

    assert diff.collection == MEETINGS
    assert diff.added == [new_id]
    assert board.view().days[1].meeting_count == 2

    await stream.aclose()
    assert store.subscriber_count(MEETINGS) == 0
    assert store.subscriber_count(ROOMS) == 0


async def _next_change(stream):
    while True:
        diff = await asyncio.wait_for(stream.__anext__(), timeout=1)
        if diff.changed:
            return diff


@pytest.mark.asyncio
async def test_watch_follows_week_navigation():
    store = InMemoryRecordStore()
    ids = await _seed(store)
    board = WeekBoard(store, today=lambda: TUESDAY)
    await board.load()

    stream = board.watch()
    for _ in range(3):
        await asyncio.wait_for(stream.__anext__(), timeout=1)

    await board.next_week()
    assert set(board.state.meetings) == {ids["next_week"]}

    # a write to the week left behind must not replace the one on screen
    await store.create(MEETINGS, _meeting_doc("Retro", TUESDAY, "16:00", "17:00"))
    new_id = await store.create(
        MEETINGS, _meeting_doc("Standup", date(2025, 6, 17), "09:00", "09:15")
    )
    diff = await _next_change(stream)

    assert diff.collection == MEETINGS
    assert diff.added == [new_id]
    assert diff.removed == []
    assert board.week_start == date(2025, 6, 16)
    assert set(board.state.meetings) == {ids["next_week"], new_id}

    await stream.aclose()
    assert store.subscriber_count(MEETINGS) == 0
