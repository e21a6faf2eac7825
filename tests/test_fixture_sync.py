from __future__ import annotations

import asyncio

import pytest

from app.models import Fixture, Team
from app.services.fixture_sync_service import sync_fixtures, upsert_fixture

FPL_TEAMS = [
    {"id": 1, "name": "Arsenal", "short_name": "ARS"},
    {"id": 7, "name": "Chelsea", "short_name": "CHE"},
    {"id": 12, "name": "Liverpool", "short_name": "LIV"},
    {"id": 13, "name": "Man City", "short_name": "MCI"},
]

FPL_FIXTURES = [
    {"id": 501, "event": 3, "team_h": 1, "team_a": 13, "team_h_score": 1, "team_a_score": 0,
     "finished": True, "minutes": 90, "kickoff_time": "2025-08-30T14:00:00Z"},
    {"id": 502, "event": 3, "team_h": 12, "team_a": 7, "team_h_score": None, "team_a_score": None,
     "finished": False, "minutes": 0, "kickoff_time": "2025-08-31T15:30:00Z"},
    {"id": 503, "event": 3, "team_h": 1, "team_a": 99, "finished": False},
]


class FakeFplClient:
    def __init__(self, fixtures=None):
        self.fixtures = fixtures if fixtures is not None else FPL_FIXTURES

    async def get_bootstrap(self):
        return {"teams": FPL_TEAMS, "elements": [], "events": []}

    async def get_fixtures(self, gameweek=None):
        return [dict(f) for f in self.fixtures if gameweek is None or f.get("event") == gameweek]


class FakeFootballDataClient:
    def __init__(self, fail=False):
        self.fail = fail

    async def get_matches(self, season=None):
        if self.fail:
            raise RuntimeError("quota exceeded")
        return [{
            "id": 9001, "matchday": 3, "status": "FINISHED", "utcDate": "2025-08-30T14:00:00Z",
            "homeTeam": {"id": 57, "name": "Arsenal FC", "tla": "ARS"},
            "awayTeam": {"id": 65, "name": "Manchester City FC", "tla": "MCI"},
            "score": {"fullTime": {"home": 1, "away": 0}},
        }]


def test_sync_is_idempotent(seeded, db):
    first = asyncio.run(sync_fixtures(db, "fpl", fpl_client=FakeFplClient()))
    assert first["inserted"] == 2
    assert first["skipped"] == 1
    count = db.query(Fixture).count()

    second = asyncio.run(sync_fixtures(db, "fpl", fpl_client=FakeFplClient()))
    assert second["inserted"] == 0
    assert second["updated"] == 0
    assert second["unchanged"] == 2
    assert db.query(Fixture).count() == count


def test_sync_persists_team_mapping(seeded, db):
    asyncio.run(sync_fixtures(db, "fpl", fpl_client=FakeFplClient()))
    city = db.query(Team).filter(Team.name == "Manchester City").one()
    assert city.fpl_id == 13


def test_sync_updates_changed_scores(seeded, db):
    asyncio.run(sync_fixtures(db, "fpl", fpl_client=FakeFplClient()))
    changed = [dict(f) for f in FPL_FIXTURES]
    changed[1].update(team_h_score=2, team_a_score=2, finished=True, minutes=90)
    result = asyncio.run(sync_fixtures(db, "fpl", fpl_client=FakeFplClient(changed)))
    assert result["updated"] == 1
    assert result["unchanged"] == 1
    fixture = db.query(Fixture).filter(Fixture.fpl_id == 502).one()
    assert (fixture.home_score, fixture.away_score, fixture.finished) == (2, 2, True)


def test_upsert_on_natural_key_adopts_provider_id(seeded, db):
    ars, che = seeded.teams[0], seeded.teams[1]
    data = {"gameweek": 1, "home_team_id": ars.id, "away_team_id": che.id, "home_score": 2,
            "away_score": 1, "finished": True, "football_data_id": 4242}
    assert upsert_fixture(db, data) == "updated"
    db.commit()
    assert upsert_fixture(db, data) == "unchanged"
    fixture = db.query(Fixture).filter(Fixture.football_data_id == 4242).one()
    assert fixture.id == seeded.fixtures[0].id


def test_football_data_source(seeded, db):
    result = asyncio.run(sync_fixtures(db, "football_data", football_data_client=FakeFootballDataClient()))
    assert result["source"] == "football_data"
    assert result["inserted"] == 1
    fixture = db.query(Fixture).filter(Fixture.football_data_id == 9001).one()
    assert fixture.minutes_played == 90
    assert db.query(Team).filter(Team.name == "Manchester City").one().football_data_id == 65


def test_auto_falls_back_to_fpl(seeded, db):
    result = asyncio.run(sync_fixtures(
        db, "auto", fpl_client=FakeFplClient(), football_data_client=FakeFootballDataClient(fail=True),
    ))
    assert result["source"] == "fpl"
    assert result["inserted"] == 2
    assert result["errors"]


def test_football_data_without_key(seeded, db):
    with pytest.raises(RuntimeError):
        asyncio.run(sync_fixtures(db, "football_data"))


def test_invalid_source(db):
    with pytest.raises(ValueError):
        asyncio.run(sync_fixtures(db, "espn"))
