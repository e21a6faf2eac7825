from __future__ import annotations

from app.analytics.lineup_validation import (
    LineupConstraints,
    PlayerSelection,
    calculate_lineup_cost,
    formation_string,
    validate_lineup,
)


def _xi(**overrides) -> list[PlayerSelection]:
    """4-4-2 valido su 5 squadre, costo 66.0."""
    layout = ["GK"] + ["DEF"] * 4 + ["MID"] * 4 + ["FWD"] * 2
    players = [
        PlayerSelection(id=i + 1, position=pos, team_id=(i % 5) + 1, price=6.0)
        for i, pos in enumerate(layout)
    ]
    players[9].is_captain = True
    players[7].is_vice_captain = True
    for key, value in overrides.items():
        setattr(players[0], key, value)
    return players


def test_valid_lineup():
    result = validate_lineup(_xi())
    assert result.is_valid, result.errors
    assert result.errors == []


def test_cost_and_formation():
    players = _xi()
    assert calculate_lineup_cost(players) == 66.0
    assert formation_string(players) == "4-4-2"


def test_wrong_player_count():
    result = validate_lineup(_xi()[:10])
    assert not result.is_valid
    assert "Must select exactly 11 players. Currently have 10." in result.errors


def test_over_budget():
    players = _xi()
    players[0].price = 12.0
    result = validate_lineup(players)
    assert any("exceeds budget limit" in e for e in result.errors)


def test_room_budget_raises_limit():
    players = _xi()
    players[0].price = 12.0
    result = validate_lineup(players, LineupConstraints(max_budget=100.0))
    assert result.is_valid


def test_too_many_from_same_team():
    players = _xi()
    for p in players[:4]:
        p.team_id = 1
    result = validate_lineup(players)
    assert any("more than 3 players from the same team" in e for e in result.errors)


def test_position_limits():
    players = _xi()
    players[1].position = "GK"
    result = validate_lineup(players)
    assert "Squad can have at most 1 GK. Currently have 2." in result.errors


def test_captain_rules():
    players = _xi()
    players[7].is_vice_captain = False
    players[9].is_vice_captain = True
    result = validate_lineup(players)
    assert "Captain and vice-captain must be different players." in result.errors

    players = _xi()
    players[3].is_captain = True
    assert "Can only have one captain." in validate_lineup(players).errors


def test_bench_captain_rejected():
    players = _xi()
    players[9].is_starter = False
    result = validate_lineup(players)
    assert "Captain must be in starting XI." in result.errors
    assert "Must have exactly 11 starting players. Currently have 10." in result.errors


def test_duplicates_rejected():
    players = _xi()
    players[10].id = players[9].id
    assert "Cannot select the same player multiple times." in validate_lineup(players).errors


def test_warnings_are_not_errors():
    players = _xi()
    for p in players:
        p.price = 5.0
        p.is_captain = False
        p.is_vice_captain = False
    result = validate_lineup(players)
    assert result.is_valid
    assert any("remaining" in w for w in result.warnings)
    assert "You should select a captain for double points." in result.warnings
    assert "You should select a vice-captain as backup." in result.warnings
