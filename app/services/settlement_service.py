"""
Settlement di giornata: punti dei giocatori schierati -> punti delle lineup.

Flusso:
  1. fixture concluse della gameweek
  2. lineup inviate (eventualmente di una sola room)
  3. per ogni giocatore: eventi nelle fixture, minuti dagli eventi appearance,
     punti base dallo scoring
  4. moltiplicatori: capitano x3 con chip triple_captain altrimenti x multiplier,
     vice x2 solo se il capitano non ha giocato
  5. gameweek_points = totale, total_points aggiornato per differenza
     (rilanciare il settlement non raddoppia i punti)
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.analytics.scoring_rules import (
    MULTIPLIERS,
    calculate_player_gameweek_points,
    minutes_from_events,
    round_points,
)
from app.models import Fixture, Lineup, LineupPlayer, PlayerEvent

logger = logging.getLogger(__name__)

MAX_GAMEWEEK = 38


def _finished_fixture_ids(db: Session, gameweek: int) -> list[int]:
    rows = (
        db.query(Fixture.id)
        .filter(Fixture.gameweek == gameweek, Fixture.finished.is_(True))
        .all()
    )
    return [r[0] for r in rows]


def _events_by_player(db: Session, fixture_ids: list[int], player_ids: set[int]) -> dict[int, list[PlayerEvent]]:
    if not fixture_ids or not player_ids:
        return {}
    events = (
        db.query(PlayerEvent)
        .filter(PlayerEvent.fixture_id.in_(fixture_ids), PlayerEvent.player_id.in_(player_ids))
        .all()
    )
    grouped: dict[int, list[PlayerEvent]] = defaultdict(list)
    for event in events:
        grouped[event.player_id].append(event)
    return grouped


def player_multiplier(lineup_player: LineupPlayer, chip: str | None, captain_minutes: int) -> int:
    if lineup_player.is_captain:
        if chip == "triple_captain":
            return MULTIPLIERS["triple_captain"]
        return lineup_player.multiplier or MULTIPLIERS["captain"]
    if lineup_player.is_vice_captain and captain_minutes == 0:
        return MULTIPLIERS["vice_captain"]
    return MULTIPLIERS["normal"]


def settle_lineup(
    lineup: Lineup,
    events_by_player: dict[int, list[PlayerEvent]],
    force_recalculate: bool = False,
) -> dict[str, Any]:
    """Calcola e applica i punti di una lineup. Non committa."""
    minutes_by_player = {
        lp.player_id: minutes_from_events(events_by_player.get(lp.player_id, []))
        for lp in lineup.players
    }
    captain = next((lp for lp in lineup.players if lp.is_captain), None)
    captain_minutes = minutes_by_player.get(captain.player_id, 0) if captain else 0

    total = 0.0
    players_updated = 0
    for lp in lineup.players:
        events = events_by_player.get(lp.player_id, [])
        position = lp.position or (lp.player.position if lp.player else "")
        base = calculate_player_gameweek_points(events, position, minutes_by_player[lp.player_id])
        points = round_points(base * player_multiplier(lp, lineup.chip, captain_minutes))
        if force_recalculate or lp.points_scored != points:
            lp.points_scored = points
            players_updated += 1
        if lp.is_starter:
            total += points

    total = round_points(total)
    previous = lineup.gameweek_points or 0.0
    lineup.gameweek_points = total
    lineup.total_points = round_points((lineup.total_points or 0.0) + total - previous)
    return {
        "lineup_id": lineup.id,
        "user_id": lineup.user_id,
        "room_id": lineup.room_id,
        "gameweek_points": total,
        "total_points": lineup.total_points,
        "players_updated": players_updated,
    }


def _submitted_lineups(db: Session, gameweek: int, room_id: int | None = None) -> list[Lineup]:
    query = db.query(Lineup).filter(Lineup.gameweek == gameweek, Lineup.is_submitted.is_(True))
    if room_id is not None:
        query = query.filter(Lineup.room_id == room_id)
    return query.order_by(Lineup.id).all()


def settle_gameweek(
    db: Session,
    gameweek: int,
    room_id: int | None = None,
    force_recalculate: bool = False,
) -> dict[str, Any]:
    """
    Settlement di una gameweek.
    Returns: { gameweek, fixtures, lineups_processed, lineups_failed, results, errors }
    """
    fixture_ids = _finished_fixture_ids(db, gameweek)
    if not fixture_ids:
        raise ValueError(f"No finished fixtures for gameweek {gameweek}")

    lineups = _submitted_lineups(db, gameweek, room_id)
    if not lineups:
        raise ValueError(f"No submitted lineups for gameweek {gameweek}")

    player_ids = {lp.player_id for lineup in lineups for lp in lineup.players}
    events_by_player = _events_by_player(db, fixture_ids, player_ids)

    results = []
    errors = []
    for lineup in lineups:
        try:
            results.append(settle_lineup(lineup, events_by_player, force_recalculate))
            db.commit()
        except Exception as e:
            db.rollback()
            logger.exception("Settlement lineup %s gw=%s fallito: %s", lineup.id, gameweek, e)
            errors.append({"lineup_id": lineup.id, "error": str(e)})

    logger.info(
        "Settlement gw=%s room=%s: %s lineup ok, %s errori",
        gameweek, room_id, len(results), len(errors),
    )
    return {
        "gameweek": gameweek,
        "room_id": room_id,
        "fixtures": len(fixture_ids),
        "lineups_processed": len(results),
        "lineups_failed": len(errors),
        "results": results,
        "errors": errors,
    }


def settlement_status(db: Session, gameweek: int, room_id: int | None = None) -> dict[str, Any]:
    total_fixtures = db.query(Fixture).filter(Fixture.gameweek == gameweek).count()
    finished_fixtures = (
        db.query(Fixture).filter(Fixture.gameweek == gameweek, Fixture.finished.is_(True)).count()
    )
    lineups = _submitted_lineups(db, gameweek, room_id)
    settled = [lu for lu in lineups if lu.gameweek_points]
    last_updated = max((lu.updated_at for lu in settled if lu.updated_at), default=None)
    return {
        "gameweek": gameweek,
        "room_id": room_id,
        "fixtures": {"finished": finished_fixtures, "total": total_fixtures},
        "lineups": {"settled": len(settled), "total": len(lineups)},
        "all_fixtures_finished": total_fixtures > 0 and finished_fixtures == total_fixtures,
        "can_settle": finished_fixtures > 0 and len(lineups) > 0,
        "last_updated": last_updated.isoformat() if last_updated else None,
    }


def _pending_gameweeks(db: Session) -> list[dict[str, Any]]:
    """Gameweek pronte: tutte le fixture concluse e almeno una lineup inviata non ancora valutata."""
    fixture_counts = dict(
        db.query(Fixture.gameweek, func.count(Fixture.id))
        .filter(Fixture.gameweek.isnot(None))
        .group_by(Fixture.gameweek)
        .all()
    )
    finished_counts = dict(
        db.query(Fixture.gameweek, func.count(Fixture.id))
        .filter(Fixture.gameweek.isnot(None), Fixture.finished.is_(True))
        .group_by(Fixture.gameweek)
        .all()
    )
    unsettled_counts = dict(
        db.query(Lineup.gameweek, func.count(Lineup.id))
        .filter(
            Lineup.is_submitted.is_(True),
            or_(Lineup.gameweek_points.is_(None), Lineup.gameweek_points == 0),
        )
        .group_by(Lineup.gameweek)
        .all()
    )

    pending = []
    for gameweek in range(1, MAX_GAMEWEEK + 1):
        total = fixture_counts.get(gameweek, 0)
        if total == 0 or finished_counts.get(gameweek, 0) < total:
            continue
        unsettled = unsettled_counts.get(gameweek, 0)
        if unsettled == 0:
            continue
        pending.append({"gameweek": gameweek, "fixtures": total, "unsettled_lineups": unsettled})
    return pending


def auto_settlement_preview(db: Session) -> dict[str, Any]:
    pending = _pending_gameweeks(db)
    return {"gameweeks_to_settle": pending, "count": len(pending)}


def run_auto_settlement(db: Session) -> dict[str, Any]:
    """Settlement di tutte le gameweek pronte. Un errore non interrompe il ciclo."""
    settled = []
    errors = []
    for item in _pending_gameweeks(db):
        gameweek = item["gameweek"]
        try:
            result = settle_gameweek(db, gameweek)
            settled.append({
                "gameweek": gameweek,
                "lineups_processed": result["lineups_processed"],
                "lineups_failed": result["lineups_failed"],
            })
        except Exception as e:
            db.rollback()
            logger.exception("Auto-settlement gw=%s fallito: %s", gameweek, e)
            errors.append({"gameweek": gameweek, "error": str(e)})

    logger.info("Auto-settlement: %s gameweek valutate, %s errori", len(settled), len(errors))
    return {
        "settled": settled,
        "errors": errors,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
