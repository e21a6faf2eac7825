"""
Popolamento player_events dalle statistiche di giornata FPL (element-summary).
Idempotente: per ogni gameweek cancella gli eventi delle fixture concluse e li
ricrea. Ogni evento salvato porta i punti calcolati dallo scoring.
"""

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.analytics.scoring_rules import get_event_points
from app.models import Fixture, Player, PlayerEvent
from app.services.fpl_client import FplClient

logger = logging.getLogger(__name__)

# (campo statistiche FPL, event_type, ruoli ammessi o None = tutti)
REPEATED_EVENTS: list[tuple[str, str, tuple[str, ...] | None]] = [
    ("goals_scored", "goal", None),
    ("assists", "assist", None),
    ("yellow_cards", "yellow_card", None),
    ("red_cards", "red_card", None),
    ("own_goals", "own_goal", None),
    ("penalties_missed", "penalty_miss", None),
    ("penalties_saved", "penalty_save", ("GK",)),
    ("saves", "save", ("GK",)),
]


def _stat(stats: dict[str, Any], key: str) -> int:
    try:
        return int(stats.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def build_events_from_stats(player: Player, stats: dict[str, Any], fixture_id: int) -> list[PlayerEvent]:
    """
    Statistiche di una partita -> lista di PlayerEvent (non ancora aggiunti alla sessione).
    Giocatori con 0 minuti non producono eventi.
    """
    minutes = _stat(stats, "minutes")
    if minutes <= 0:
        return []

    position = player.position
    raw_events: list[tuple[str, dict[str, Any] | None]] = [("appearance", {"minutes": minutes})]

    for stat_key, event_type, positions in REPEATED_EVENTS:
        if positions and position not in positions:
            continue
        raw_events.extend((event_type, None) for _ in range(_stat(stats, stat_key)))

    if _stat(stats, "clean_sheets") > 0 and position != "FWD":
        raw_events.append(("clean_sheet", None))

    conceded = _stat(stats, "goals_conceded")
    if conceded > 0 and position in ("GK", "DEF"):
        raw_events.append(("goals_conceded", {"goals_conceded": conceded}))

    bonus = _stat(stats, "bonus")
    if bonus > 0:
        raw_events.append(("bonus", {"bonus_points": bonus}))

    return [
        PlayerEvent(
            fixture_id=fixture_id,
            player_id=player.id,
            event_type=event_type,
            points=get_event_points(event_type, position, data),
            data=data,
        )
        for event_type, data in raw_events
    ]


def _fixture_for_player(
    player: Player,
    stats: dict[str, Any],
    fixtures: list[Fixture],
    taken: set[int] | None = None,
) -> Fixture | None:
    """
    Fixture FPL se mappata, altrimenti una partita della squadra del giocatore
    non ancora assegnata a un'altra entry (doppia gameweek).
    """
    taken = taken or set()
    fpl_fixture_id = stats.get("fixture")
    if fpl_fixture_id is not None:
        for fixture in fixtures:
            if fixture.fpl_id == fpl_fixture_id:
                return fixture
    for fixture in fixtures:
        if fixture.id in taken:
            continue
        if player.team_id in (fixture.home_team_id, fixture.away_team_id):
            return fixture
    return None


async def _populate_gameweek(
    db: Session,
    gameweek: int,
    fixtures: list[Fixture],
    client: FplClient,
) -> dict[str, Any]:
    team_ids = {f.home_team_id for f in fixtures} | {f.away_team_id for f in fixtures}
    players = (
        db.query(Player)
        .filter(Player.team_id.in_(team_ids), Player.fpl_id.isnot(None))
        .order_by(Player.id)
        .all()
    )
    stats_by_fpl_id = await client.fetch_player_gameweek_stats([p.fpl_id for p in players], gameweek)

    fixture_ids = [f.id for f in fixtures]
    deleted = (
        db.query(PlayerEvent)
        .filter(PlayerEvent.fixture_id.in_(fixture_ids))
        .delete(synchronize_session=False)
    )

    created = 0
    skipped = 0
    for player in players:
        entries = [s for s in stats_by_fpl_id.get(player.fpl_id, []) if _stat(s, "minutes") > 0]
        if not entries:
            skipped += 1
            continue
        taken: set[int] = set()
        for stats in entries:
            fixture = _fixture_for_player(player, stats, fixtures, taken)
            if fixture is None or fixture.id in taken:
                logger.warning("Nessuna fixture gw=%s per player %s (team %s)", gameweek, player.id, player.team_id)
                continue
            taken.add(fixture.id)
            events = build_events_from_stats(player, stats, fixture.id)
            db.add_all(events)
            created += len(events)
        if not taken:
            skipped += 1

    db.commit()
    logger.info(
        "populate gw=%s: %s fixture, %s giocatori, %s eventi creati, %s eliminati, %s saltati",
        gameweek, len(fixtures), len(players), created, deleted, skipped,
    )
    return {
        "gameweek": gameweek,
        "fixtures": len(fixtures),
        "players": len(players),
        "events_created": created,
        "events_deleted": deleted,
        "players_skipped": skipped,
    }


async def populate_player_events(
    db: Session,
    gameweek: int | None = None,
    client: FplClient | None = None,
) -> dict[str, Any]:
    """
    Ricostruisce player_events per le fixture concluse (tutte o di una gameweek).
    Returns: { gameweeks, events_created, details }
    """
    query = db.query(Fixture).filter(Fixture.finished.is_(True), Fixture.gameweek.isnot(None))
    if gameweek is not None:
        query = query.filter(Fixture.gameweek == gameweek)
    fixtures = query.order_by(Fixture.gameweek, Fixture.id).all()
    if not fixtures:
        raise ValueError(
            f"No finished fixtures for gameweek {gameweek}" if gameweek else "No finished fixtures"
        )

    by_gameweek: dict[int, list[Fixture]] = {}
    for fixture in fixtures:
        by_gameweek.setdefault(fixture.gameweek, []).append(fixture)

    client = client or FplClient()
    details = []
    for gw, gw_fixtures in sorted(by_gameweek.items()):
        details.append(await _populate_gameweek(db, gw, gw_fixtures, client))

    return {
        "gameweeks": sorted(by_gameweek),
        "events_created": sum(d["events_created"] for d in details),
        "details": details,
    }


def player_events_sample(db: Session, limit: int = 5) -> dict[str, Any]:
    total = db.query(PlayerEvent).count()
    sample = db.query(PlayerEvent).order_by(PlayerEvent.id.desc()).limit(limit).all()
    return {"total_events": total, "sample": [e.to_dict() for e in sample]}
