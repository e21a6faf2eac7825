from __future__ import annotations

import pytest

from app.models import Player, Team
from app.services.reconciliation import (
    RULE_CONTAINS_INTERNAL,
    RULE_EXACT_NAME,
    RULE_EXPLICIT,
    RULE_FIRST_WORD,
    RULE_SHORT_CODE,
    TeamResolver,
    match_player,
    match_team_by_name,
)


@pytest.fixture
def teams() -> list[Team]:
    return [
        Team(id=1, name="Manchester City", short_name="MCI"),
        Team(id=2, name="Manchester United", short_name="MUN"),
        Team(id=3, name="Bournemouth", short_name="BOU"),
        Team(id=4, name="Wolves", short_name="WOL"),
    ]


def test_exact_name_wins_over_first_word(teams):
    found = match_team_by_name("manchester united", None, teams)
    assert found.team.id == 2
    assert found.rule == RULE_EXACT_NAME


def test_first_word_rule(teams):
    found = match_team_by_name("Man City", "MCI", teams)
    assert found.team.id == 1
    assert found.rule == RULE_FIRST_WORD


def test_external_contains_internal(teams):
    found = match_team_by_name("AFC Bournemouth", None, teams)
    assert found.team.id == 3
    assert found.rule == RULE_CONTAINS_INTERNAL


def test_short_code_rule(teams):
    found = match_team_by_name("Wolverhampton Wanderers FC", "WOL", teams)
    assert found.team.id == 4
    assert found.rule == RULE_SHORT_CODE


def test_no_match(teams):
    assert match_team_by_name("Real Madrid", "RMA", teams) is None
    assert match_team_by_name(None, None, teams) is None


def test_explicit_id_checked_before_heuristic(seeded, db):
    arsenal = seeded.teams[0]
    arsenal.football_data_id = 57
    db.commit()

    found = TeamResolver(db, "football_data").match(57, "Chelsea FC", "CHE")
    assert found.team.id == arsenal.id
    assert found.rule == RULE_EXPLICIT


def test_heuristic_match_is_persisted(seeded, db):
    chelsea = seeded.teams[1]
    found = TeamResolver(db, "football_data").match(61, "Chelsea FC", "CHE")
    assert found.team.id == chelsea.id
    assert found.rule == RULE_FIRST_WORD
    db.commit()

    db.refresh(chelsea)
    assert chelsea.football_data_id == 61
    again = TeamResolver(db, "football_data").match(61, "Something Else", None)
    assert again.rule == RULE_EXPLICIT


def test_resolver_without_persist(seeded, db):
    resolver = TeamResolver(db, "fpl", persist=False)
    assert resolver.resolve(4, "Chelsea", "CHE") == seeded.teams[1].id
    db.commit()
    assert db.query(Team).filter(Team.fpl_id.isnot(None)).count() == 0


def test_mapped_team_not_reused_by_heuristic(seeded, db):
    city = seeded.teams[3]
    city.fpl_id = 13
    db.commit()
    # "Manchester United" non deve cadere su Manchester City, già mappata
    assert TeamResolver(db, "fpl").match(14, "Manchester United", "MUN") is None


def test_unknown_provider(db):
    with pytest.raises(ValueError):
        TeamResolver(db, "opta")


def test_match_player_by_fpl_id_then_name(seeded, db):
    salah = seeded.players["Mohamed Salah"]
    salah.fpl_id = 328
    db.commit()

    assert match_player(db, 328, "Whoever", "FWD").id == salah.id
    saka = match_player(db, 999, "bukayo saka", "MID")
    assert saka.id == seeded.players["Bukayo Saka"].id
    assert match_player(db, 999, "Bukayo Saka", "FWD") is None
    assert match_player(db, None, "Unknown", "MID", web_name="Palmer").id == seeded.players["Cole Palmer"].id
