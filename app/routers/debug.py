"""
Endpoint di debug per verificare i dati salvati in DB dopo sync e settlement.
Solo lettura; nessuna modifica strutturale al database.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, inspect
from sqlalchemy.orm import Session

from app.core.database import engine, get_db
from app.core.responses import NotFoundError, http_error, ok
from app.models import Fixture, Lineup, LineupPlayer, Player, PlayerEvent, Room, RoomMember, Team, User
from app.services import teams_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/debug", tags=["Debug"])

OVERVIEW_MODELS = {
    "teams": Team,
    "players": Player,
    "fixtures": Fixture,
    "player_events": PlayerEvent,
    "users": User,
    "rooms": Room,
    "room_members": RoomMember,
    "lineups": Lineup,
    "lineup_players": LineupPlayer,
}


@router.get("/db-status")
def db_status():
    """Elenco delle tabelle presenti nel database."""
    try:
        return ok({"tables": sorted(inspect(engine).get_table_names())})
    except Exception as e:
        raise http_error(e, "db_status")


@router.get("/db-overview")
def db_overview(db: Session = Depends(get_db)):
    """Conteggi righe per tabella."""
    try:
        return ok({name: db.query(model).count() for name, model in OVERVIEW_MODELS.items()})
    except Exception as e:
        raise http_error(e, "db_overview")


@router.get("/lineups")
def debug_lineups(user_id: str | None = None, db: Session = Depends(get_db)):
    """Ultime 20 lineup con numero di giocatori."""
    try:
        query = db.query(Lineup)
        if user_id:
            query = query.filter(Lineup.user_id == user_id)
        lineups = query.order_by(Lineup.id.desc()).limit(20).all()
        return ok([
            {
                "id": lu.id,
                "user_id": lu.user_id,
                "room_id": lu.room_id,
                "gameweek": lu.gameweek,
                "is_submitted": lu.is_submitted,
                "player_count": len(lu.players),
                "gameweek_points": lu.gameweek_points,
                "total_points": lu.total_points,
            }
            for lu in lineups
        ])
    except Exception as e:
        raise http_error(e, "debug_lineups")


@router.get("/check-events")
def check_events(fixture_id: int | None = Query(None), db: Session = Depends(get_db)):
    """Conteggio eventi per tipo, globale o di una fixture."""
    try:
        if fixture_id is not None and not db.query(Fixture.id).filter(Fixture.id == fixture_id).first():
            raise NotFoundError(f"Fixture {fixture_id} not found")
        query = db.query(PlayerEvent.event_type, func.count(PlayerEvent.id))
        if fixture_id is not None:
            query = query.filter(PlayerEvent.fixture_id == fixture_id)
        by_type = dict(query.group_by(PlayerEvent.event_type).all())
        return ok({"fixture_id": fixture_id, "total": sum(by_type.values()), "by_type": by_type})
    except Exception as e:
        raise http_error(e, "check_events")


@router.get("/fpl-mapping")
async def fpl_mapping(db: Session = Depends(get_db)):
    """Squadre FPL e squadra interna risolta (senza salvare)."""
    try:
        return ok(await teams_service.fpl_team_mapping(db))
    except Exception as e:
        raise http_error(e, "fpl_mapping")
