# tests/test_rooms_api.py
from http import HTTPStatus


def _headers(user: dict) -> dict:
    return {"X-User-Id": user["id"]}


def test_only_admins_manage_rooms(client, make_user):
    member = make_user("Ana Pérez")

    resp = client.post("/rooms", json={"name": "Sala Z"}, headers=_headers(member))
    assert resp.status_code == HTTPStatus.FORBIDDEN


def test_create_room_defaults(client, make_user, make_room):
    admin = make_user("Dora Admin", role="superadmin")
    room = make_room(admin, name="Sala Defaults", capacity=6)

    assert room["capacity"] == 6
    assert room["color"] == "#462829"
    assert room["active"] is True
    assert isinstance(room["id"], str)


def test_capacity_must_be_positive(client, make_user):
    admin = make_user("Dora Admin", role="director")
    resp = client.post(
        "/rooms",
        json={"name": "Broken", "capacity": 0},
        headers=_headers(admin),
    )
    assert resp.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_list_rooms_filter_only_active(client, make_user, make_room):
    admin = make_user("Dora Admin", role="coordinator")
    active = make_room(admin)
    inactive = make_room(admin, active=False)

    resp = client.get("/rooms?only_active=true", headers=_headers(admin))
    assert resp.status_code == HTTPStatus.OK
    ids = {r["id"] for r in resp.json()}
    assert active["id"] in ids
    assert inactive["id"] not in ids
    assert all(r["active"] is True for r in resp.json())

    names = [r["name"] for r in client.get("/rooms", headers=_headers(admin)).json()]
    assert names == sorted(names)


def test_patch_room(client, make_user, make_room):
    admin = make_user("Dora Admin", role="coordinator")
    room = make_room(admin)

    resp = client.patch(
        f"/rooms/{room['id']}",
        json={"active": False, "color": "#000000"},
        headers=_headers(admin),
    )
    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["active"] is False
    assert data["color"] == "#000000"
    assert data["name"] == room["name"]

    missing = client.patch("/rooms/nope", json={"active": True}, headers=_headers(admin))
    assert missing.status_code == HTTPStatus.NOT_FOUND


def test_patch_room_rejects_nulls_for_required_fields(client, make_user, make_room):
    admin = make_user("Dora Admin", role="coordinator")
    room = make_room(admin)

    for field in ("name", "color", "active"):
        resp = client.patch(
            f"/rooms/{room['id']}",
            json={field: None},
            headers=_headers(admin),
        )
        assert resp.status_code == HTTPStatus.UNPROCESSABLE_ENTITY, field

    # optional fields can still be cleared
    cleared = client.patch(
        f"/rooms/{room['id']}",
        json={"description": None},
        headers=_headers(admin),
    )
    assert cleared.status_code == HTTPStatus.OK
    assert cleared.json()["name"] == room["name"]


def test_deleting_a_room_keeps_its_meetings(client, make_user, make_room):
    """
    A meeting booked in a room keeps its room id and name after the room is gone.
    """
    admin = make_user("Dora Admin", role="coordinator")
    room = make_room(admin, name="Sala Temporal")
    payload = {
        "title": "Planning",
        "type": "in_person",
        "room_id": room["id"],
        "date": "2030-03-04",
        "start_time": "09:00",
        "end_time": "10:00",
        "participants": [{"id": admin["id"], "name": admin["name"]}],
    }
    created = client.post("/meetings", json=payload, headers=_headers(admin))
    assert created.status_code == HTTPStatus.CREATED
    meeting_id = created.json()["meeting_id"]

    resp = client.delete(f"/rooms/{room['id']}", headers=_headers(admin))
    assert resp.status_code == HTTPStatus.NO_CONTENT
    again = client.delete(f"/rooms/{room['id']}", headers=_headers(admin))
    assert again.status_code == HTTPStatus.NOT_FOUND

    meeting = client.get(f"/meetings/{meeting_id}", headers=_headers(admin)).json()
    assert meeting["room_id"] == room["id"]
    assert meeting["room_name"] == "Sala Temporal"
