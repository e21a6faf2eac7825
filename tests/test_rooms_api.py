from __future__ import annotations

from app.models import RoomMember


def _create(client, helpers, user="user-a", **body):
    payload = {"name": "Friday League", "max_players": 2, **body}
    return client.post("/api/rooms", json=payload, headers=helpers.auth(user))


def test_create_room(client, helpers):
    r = _create(client, helpers, is_public=True)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    room = body["data"]
    assert len(room["room_code"]) == 6
    assert room["room_code"] == room["room_code"].upper()
    assert room["current_players"] == 1
    assert room["created_by"] == "user-a"

    public = client.get("/api/rooms", params={"public": "true"}).json()["data"]
    assert [r["id"] for r in public] == [room["id"]]
    joined = client.get("/api/rooms/joined", headers=helpers.auth("user-a")).json()["data"]
    assert [r["id"] for r in joined] == [room["id"]]


def test_create_room_requires_auth(client):
    r = client.post("/api/rooms", json={"name": "No auth"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Authentication required"}


def test_create_room_validation(client, helpers):
    assert _create(client, helpers, name="").status_code == 400
    assert _create(client, helpers, name="x" * 51).status_code == 400
    r = _create(client, helpers, max_players=25)
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_join_flow(client, helpers, db):
    room = _create(client, helpers).json()["data"]
    code = room["room_code"]

    r = client.post("/api/rooms/join", json={"room_code": code.lower()}, headers=helpers.auth("user-b"))
    assert r.status_code == 200
    assert r.json()["data"]["current_players"] == 2

    again = client.post("/api/rooms/join", json={"room_code": code}, headers=helpers.auth("user-b"))
    assert again.status_code == 400
    assert "already a member" in again.json()["error"]

    full = client.post("/api/rooms/join", json={"room_code": code}, headers=helpers.auth("user-c"))
    assert full.status_code == 400
    assert full.json()["error"] == "Room is full"

    missing = client.post("/api/rooms/join", json={"room_code": "ZZZZZZ"}, headers=helpers.auth("user-c"))
    assert missing.status_code == 404
    assert missing.json()["success"] is False


def test_leave_and_rejoin_reactivates_membership(client, helpers, db):
    room = _create(client, helpers).json()["data"]
    client.post("/api/rooms/join", json={"room_code": room["room_code"]}, headers=helpers.auth("user-b"))

    r = client.post(f"/api/rooms/{room['id']}/leave", headers=helpers.auth("user-b"))
    assert r.status_code == 200
    members = client.get(f"/api/rooms/{room['id']}/members").json()["data"]
    assert [m["user_id"] for m in members] == ["user-a"]

    not_member = client.post(f"/api/rooms/{room['id']}/leave", headers=helpers.auth("user-b"))
    assert not_member.status_code == 400

    rejoin = client.post("/api/rooms/join", json={"room_code": room["room_code"]}, headers=helpers.auth("user-b"))
    assert rejoin.status_code == 200
    assert rejoin.json()["data"]["current_players"] == 2
    assert db.query(RoomMember).filter(RoomMember.user_id == "user-b").count() == 1


def test_get_room_with_members(client, helpers):
    room = _create(client, helpers).json()["data"]
    data = client.get(f"/api/rooms/{room['id']}").json()["data"]
    assert data["name"] == "Friday League"
    assert [m["user_id"] for m in data["members"]] == ["user-a"]
    assert client.get("/api/rooms/9999").status_code == 404


def test_room_leaderboard_ranking(client, helpers, seeded, db):
    room = helpers.make_room(db, members=("user-b", "user-c"))
    first = helpers.make_lineup(db, seeded.players, user_id="user-a", room=room, submitted_at=helpers.earlier(30))
    second = helpers.make_lineup(db, seeded.players, user_id="user-b", room=room, submitted_at=helpers.earlier(10))
    top = helpers.make_lineup(db, seeded.players, user_id="user-c", room=room, submitted_at=helpers.earlier(5))
    first.total_points = 50
    second.total_points = 50
    top.total_points = 80
    db.commit()

    data = client.get(f"/api/rooms/{room.id}/leaderboard").json()["data"]
    ranking = [(row["rank"], row["user_id"]) for row in data["leaderboard"]]
    assert ranking == [(1, "user-c"), (2, "user-a"), (3, "user-b")]
