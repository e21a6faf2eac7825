from __future__ import annotations

XI = [
    "David Raya", "William Saliba", "Reece James", "Virgil van Dijk", "Ruben Dias",
    "Bukayo Saka", "Cole Palmer", "Mohamed Salah", "Phil Foden", "Erling Haaland", "Dominic Solanke",
]


def _selection(players, names=XI, captain="Erling Haaland", vice="Mohamed Salah"):
    return [
        {"id": players[n].id, "is_starter": True, "is_captain": n == captain, "is_vice_captain": n == vice}
        for n in names
    ]


def test_save_draft(client, helpers, seeded):
    r = client.post(
        "/api/lineups",
        json={"gameweek": 1, "players": _selection(seeded.players)},
        headers=helpers.auth("user-a"),
    )
    assert r.status_code == 200, r.json()
    lineup = r.json()["data"]
    assert lineup["formation"] == "4-4-2"
    assert lineup["total_cost"] == 67.0
    assert lineup["is_submitted"] is False
    assert lineup["room_id"] is None
    assert len(lineup["lineup_players"]) == 11
    captain = next(lp for lp in lineup["lineup_players"] if lp["is_captain"])
    assert captain["multiplier"] == 2


def test_new_draft_replaces_previous(client, helpers, seeded):
    for _ in range(2):
        client.post("/api/lineups", json={"gameweek": 1, "players": _selection(seeded.players)},
                    headers=helpers.auth("user-a"))
    lineups = client.get("/api/lineups", params={"user_id": "user-a"}).json()["data"]
    assert len(lineups) == 1


def test_invalid_lineup_returns_details(client, helpers, seeded):
    names = XI + ["Nicolas Jackson"]
    r = client.post("/api/lineups", json={"gameweek": 1, "players": _selection(seeded.players, names)},
                    headers=helpers.auth("user-a"))
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"].startswith("Lineup validation failed")
    assert "Must select exactly 11 players. Currently have 12." in body["details"]


def test_unavailable_player_rejected(client, helpers, seeded):
    names = XI[:-1] + ["Injured Guy"]
    r = client.post("/api/lineups", json={"gameweek": 1, "players": _selection(seeded.players, names)},
                    headers=helpers.auth("user-a"))
    assert r.status_code == 400
    assert "no longer available" in r.json()["error"]


def test_submitted_lineup_requires_membership(client, helpers, seeded, db):
    room = helpers.make_room(db)
    r = client.post(
        "/api/lineups",
        json={"gameweek": 1, "room_id": room.id, "is_submitted": True, "players": _selection(seeded.players)},
        headers=helpers.auth("user-b"),
    )
    assert r.status_code == 403


def test_submit_draft_to_room(client, helpers, seeded, db):
    room = helpers.make_room(db)
    draft = client.post("/api/lineups", json={"gameweek": 1, "players": _selection(seeded.players)},
                        headers=helpers.auth("user-a")).json()["data"]

    r = client.post("/api/lineups/submit", json={"lineup_id": draft["id"], "room_id": room.id},
                    headers=helpers.auth("user-a"))
    assert r.status_code == 200, r.json()
    submitted = r.json()["data"]
    assert submitted["is_submitted"] is True
    assert submitted["room_id"] == room.id
    assert submitted["gameweek"] == room.gameweek
    assert submitted["total_points"] == 0
    assert len(submitted["lineup_players"]) == 11

    twice = client.post("/api/lineups/submit", json={"lineup_id": draft["id"], "room_id": room.id},
                        headers=helpers.auth("user-a"))
    assert twice.status_code == 400


def test_submit_checks(client, helpers, seeded, db):
    room = helpers.make_room(db)
    draft = client.post("/api/lineups", json={"gameweek": 1, "players": _selection(seeded.players)},
                        headers=helpers.auth("user-a")).json()["data"]

    outsider = client.post("/api/lineups/submit", json={"lineup_id": draft["id"], "room_id": room.id},
                           headers=helpers.auth("user-b"))
    assert outsider.status_code == 403

    missing = client.post("/api/lineups/submit", json={"lineup_id": 9999, "room_id": room.id},
                          headers=helpers.auth("user-a"))
    assert missing.status_code == 404


def test_global_leaderboard_scopes(client, helpers, seeded, db):
    a = helpers.make_lineup(db, seeded.players, user_id="user-a")
    b = helpers.make_lineup(db, seeded.players, user_id="user-b")
    a.gameweek_points, a.total_points = 10, 100
    b.gameweek_points, b.total_points = 20, 50
    db.commit()

    by_gameweek = client.get("/api/leaderboard", params={"scope": "gameweek"}).json()["data"]
    assert [row["user_id"] for row in by_gameweek] == ["user-b", "user-a"]
    by_total = client.get("/api/leaderboard", params={"scope": "total", "limit": 1}).json()["data"]
    assert [row["user_id"] for row in by_total] == ["user-a"]
    assert client.get("/api/leaderboard", params={"scope": "season"}).status_code == 400
