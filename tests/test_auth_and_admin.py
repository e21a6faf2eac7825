from __future__ import annotations

import asyncio

import pytest
from fastapi import HTTPException

from app.core import auth as auth_module
from app.core.auth import AuthUser, _bearer_token, get_current_user, require_admin


def test_bearer_token_parsing():
    assert _bearer_token("Bearer abc") == "abc"
    assert _bearer_token("bearer abc ") == "abc"
    assert _bearer_token("Basic abc") is None
    assert _bearer_token("Bearer ") is None
    assert _bearer_token(None) is None


def test_rejected_token_is_401(monkeypatch):
    async def rejected(token):
        return None

    monkeypatch.setattr(auth_module, "fetch_auth_user", rejected)
    with pytest.raises(HTTPException) as exc:
        asyncio.run(get_current_user("Bearer expired"))
    assert exc.value.status_code == 401


def test_missing_auth_config_is_503(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    with pytest.raises(HTTPException) as exc:
        asyncio.run(get_current_user("Bearer token"))
    assert exc.value.status_code == 503


def test_require_admin(monkeypatch):
    assert require_admin(AuthUser(id="admin-1")).id == "admin-1"
    with pytest.raises(HTTPException) as exc:
        require_admin(AuthUser(id="user-a"))
    assert exc.value.status_code == 403

    monkeypatch.setenv("ADMIN_USER_IDS", "")
    with pytest.raises(HTTPException) as exc:
        require_admin(AuthUser(id="admin-1"))
    assert exc.value.status_code == 500


def test_admin_endpoints_need_admin(client, helpers, seeded):
    denied = client.get("/api/admin/settlement", params={"gameweek": 1}, headers=helpers.auth("user-a"))
    assert denied.status_code == 403
    assert denied.json()["success"] is False

    ok = client.get("/api/admin/settlement", params={"gameweek": 1}, headers=helpers.auth("admin-1"))
    assert ok.status_code == 200
    assert ok.json()["data"]["fixtures"] == {"finished": 3, "total": 3}


def test_admin_settlement_without_lineups_is_400(client, helpers, seeded):
    r = client.post("/api/admin/settlement", json={"gameweek": 1}, headers=helpers.auth("admin-1"))
    assert r.status_code == 400
    assert r.json()["error"] == "No submitted lineups for gameweek 1"


def test_admin_settlement_run(client, helpers, seeded, db):
    helpers.add_events(db, seeded.fixtures[1], seeded.players["Erling Haaland"], 90, "goal")
    helpers.make_lineup(db, seeded.players)
    r = client.post("/api/admin/settlement", json={"gameweek": 1}, headers=helpers.auth("admin-1"))
    assert r.status_code == 200
    assert r.json()["data"]["results"][0]["gameweek_points"] == (2 + 4) * 2


def test_pin_team_mapping(client, helpers, seeded):
    arsenal, chelsea = seeded.teams[0], seeded.teams[1]
    r = client.post("/api/admin/team-mapping", json={"team_id": arsenal.id, "fpl_id": 1},
                    headers=helpers.auth("admin-1"))
    assert r.status_code == 200
    assert r.json()["data"]["fpl_id"] == 1

    clash = client.post("/api/admin/team-mapping", json={"team_id": chelsea.id, "fpl_id": 1},
                        headers=helpers.auth("admin-1"))
    assert clash.status_code == 400


def test_add_fixture_columns_is_idempotent(client, helpers, db):
    r = client.post("/api/admin/add-fixture-columns", headers=helpers.auth("admin-1"))
    assert r.status_code == 200
    assert r.json()["data"]["added"] == []


def test_cron_open_in_development(client, seeded):
    r = client.get("/api/cron/auto-settlement")
    assert r.status_code == 200
    assert r.json()["data"]["count"] == 0


def test_cron_guarded_in_production(client, seeded, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("CRON_SECRET", "s3cret")

    assert client.post("/api/cron/auto-settlement").status_code == 401
    wrong = client.post("/api/cron/auto-settlement", headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 401
    r = client.post("/api/cron/auto-settlement", headers={"Authorization": "Bearer s3cret"})
    assert r.status_code == 200
    assert r.json()["data"]["settled"] == []
