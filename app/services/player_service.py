"""
Letture giocatori, squadre e fixture per le API pubbliche.
Statistiche di giornata calcolate dagli eventi con lo scoring.
"""

import logging
from collections import defaultdict
from typing import Any

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.analytics.scoring_rules import (
    calculate_player_gameweek_points,
    get_event_points,
    minutes_from_events,
    round_points,
)
from app.core.responses import NotFoundError
from app.models import Fixture, Player, PlayerEvent, Team

logger = logging.getLogger(__name__)

PLAYER_SORTS = {
    "total_points": Player.total_points.desc(),
    "price": Player.price.desc(),
    "price_asc": Player.price.asc(),
    "form": Player.form.desc(),
    "selected": Player.selected_by_percent.desc(),
    "name": Player.name.asc(),
}

SYNC_STATUS_SQL = text("""
SELECT
  (SELECT COUNT(*) FROM teams)                        AS teams,
  (SELECT COUNT(*) FROM players)                      AS players,
  (SELECT COUNT(*) FROM fixtures)                     AS fixtures,
  (SELECT COUNT(*) FROM fixtures WHERE finished = :t) AS finished_fixtures,
  (SELECT COUNT(*) FROM player_events)                AS player_events,
  (SELECT MAX(updated_at) FROM players)               AS last_player_update
""")


def list_teams(db: Session) -> list[Team]:
    return db.query(Team).order_by(Team.name).all()


def list_players(
    db: Session,
    position: str | None = None,
    team_id: int | None = None,
    search: str | None = None,
    max_price: float | None = None,
    sort: str = "total_points",
    limit: int = 500,
) -> list[Player]:
    if sort not in PLAYER_SORTS:
        raise ValueError(f"Invalid sort: {sort}. Allowed values: {', '.join(PLAYER_SORTS)}")
    query = db.query(Player).filter(Player.is_available.is_(True))
    if position:
        query = query.filter(Player.position == position.upper())
    if team_id is not None:
        query = query.filter(Player.team_id == team_id)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(Player.name.ilike(pattern) | Player.web_name.ilike(pattern))
    if max_price is not None:
        query = query.filter(Player.price <= max_price)
    return query.order_by(PLAYER_SORTS[sort], Player.id).limit(limit).all()


def get_player(db: Session, player_id: int) -> Player:
    player = db.query(Player).filter(Player.id == player_id).first()
    if not player:
        raise NotFoundError(f"Player {player_id} not found")
    return player


def _leaders(db: Session, column, limit: int) -> list[dict[str, Any]]:
    rows = db.query(Player).filter(column > 0).order_by(column.desc(), Player.id).limit(limit).all()
    return [p.to_dict() for p in rows]


def player_stats(db: Session, gameweek: int | None = None, limit: int = 10) -> dict[str, Any]:
    """Classifiche marcatori/assist/punti; con gameweek i punti sono calcolati dagli eventi."""
    if gameweek is None:
        return {
            "top_scorers": _leaders(db, Player.goals, limit),
            "top_assisters": _leaders(db, Player.assists, limit),
            "top_points": _leaders(db, Player.total_points, limit),
        }

    events = (
        db.query(PlayerEvent)
        .join(Fixture, Fixture.id == PlayerEvent.fixture_id)
        .filter(Fixture.gameweek == gameweek)
        .all()
    )
    by_player: dict[int, list[PlayerEvent]] = defaultdict(list)
    for event in events:
        by_player[event.player_id].append(event)

    players = {p.id: p for p in db.query(Player).filter(Player.id.in_(by_player)).all()} if by_player else {}
    rows = []
    for player_id, player_events in by_player.items():
        player = players.get(player_id)
        if player is None:
            continue
        minutes = minutes_from_events(player_events)
        points = calculate_player_gameweek_points(player_events, player.position, minutes)
        rows.append({
            "player": player.to_dict(),
            "minutes": minutes,
            "goals": sum(1 for e in player_events if e.event_type == "goal"),
            "assists": sum(1 for e in player_events if e.event_type == "assist"),
            "points": round_points(points),
        })
    rows.sort(key=lambda r: (-r["points"], r["player"]["id"]))
    return {"gameweek": gameweek, "players": rows[:limit]}


def list_fixtures(db: Session, gameweek: int | None = None, finished: bool | None = None) -> list[Fixture]:
    query = db.query(Fixture)
    if gameweek is not None:
        query = query.filter(Fixture.gameweek == gameweek)
    if finished is not None:
        query = query.filter(Fixture.finished.is_(finished))
    return query.order_by(Fixture.gameweek, Fixture.kickoff_time, Fixture.id).all()


def fixture_events(db: Session, fixture_id: int) -> dict[str, Any]:
    fixture = db.query(Fixture).filter(Fixture.id == fixture_id).first()
    if not fixture:
        raise NotFoundError(f"Fixture {fixture_id} not found")
    events = (
        db.query(PlayerEvent)
        .filter(PlayerEvent.fixture_id == fixture_id)
        .order_by(PlayerEvent.player_id, PlayerEvent.id)
        .all()
    )
    items = []
    for event in events:
        player = event.player
        item = event.to_dict()
        item["player"] = {"id": player.id, "name": player.name, "position": player.position} if player else None
        item["points"] = get_event_points(event.event_type, player.position, event.data) if player else 0
        items.append(item)
    return {"fixture": fixture.to_dict(), "events": items}


def sync_status(db: Session) -> dict[str, Any]:
    row = db.execute(SYNC_STATUS_SQL, {"t": True}).mappings().first()
    last_update = row["last_player_update"]
    return {
        "teams": row["teams"],
        "players": row["players"],
        "fixtures": row["fixtures"],
        "finished_fixtures": row["finished_fixtures"],
        "player_events": row["player_events"],
        "last_player_update": str(last_update) if last_update else None,
    }
