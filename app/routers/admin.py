"""
Router admin: settlement, popolamento eventi, mappatura squadre,
migrazione colonne fixture, test Football-Data.org.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import AuthUser, require_admin
from app.core.database import get_db, migrate_fixture_columns
from app.core.responses import http_error, ok
from app.ingestion.player_events_service import player_events_sample, populate_player_events
from app.schemas.admin import PopulateEventsRequest, SettlementRequest, TeamMappingUpdate
from app.services import settlement_service, teams_service
from app.services.football_data_client import FootballDataClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/settlement")
def run_settlement(
    payload: SettlementRequest,
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        result = settlement_service.settle_gameweek(
            db, payload.gameweek, payload.room_id, payload.force_recalculate,
        )
        return ok(result, message=f"Settlement completed for gameweek {payload.gameweek}")
    except Exception as e:
        db.rollback()
        raise http_error(e, f"settlement gw={payload.gameweek}")


@router.get("/settlement")
def get_settlement_status(
    gameweek: int = Query(..., ge=1, le=38),
    room_id: int | None = None,
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return ok(settlement_service.settlement_status(db, gameweek, room_id))
    except Exception as e:
        raise http_error(e, f"settlement_status gw={gameweek}")


@router.post("/populate-player-events")
async def populate_events(
    payload: PopulateEventsRequest | None = None,
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Ricostruisce player_events dalle statistiche FPL delle fixture concluse."""
    gameweek = payload.gameweek if payload else None
    try:
        result = await populate_player_events(db, gameweek)
        return ok(result, message=f"Created {result['events_created']} player events")
    except Exception as e:
        db.rollback()
        raise http_error(e, "populate_player_events")


@router.get("/populate-player-events")
def player_events_overview(
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return ok(player_events_sample(db))
    except Exception as e:
        raise http_error(e, "player_events_overview")


@router.get("/team-mapping")
async def team_mapping(
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Per ogni squadra Football-Data.org: squadra interna e regola usata."""
    try:
        return ok(await teams_service.football_data_team_mapping(db))
    except Exception as e:
        raise http_error(e, "team_mapping")


@router.post("/team-mapping")
def pin_team_mapping(
    payload: TeamMappingUpdate,
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        team = teams_service.pin_team_mapping(db, payload.team_id, payload.fpl_id, payload.football_data_id)
        return ok(team.to_dict(), message="Team mapping updated")
    except Exception as e:
        db.rollback()
        raise http_error(e, "pin_team_mapping")


@router.post("/add-fixture-columns")
def add_fixture_columns(admin: AuthUser = Depends(require_admin)):
    try:
        added = migrate_fixture_columns()
        message = f"Added columns: {', '.join(added)}" if added else "Fixture columns already present"
        return ok({"added": added}, message=message)
    except Exception as e:
        raise http_error(e, "add_fixture_columns")


@router.get("/test-football-data")
async def test_football_data(admin: AuthUser = Depends(require_admin)):
    """Test connessione leggero con quota residua."""
    try:
        return ok(await FootballDataClient().test_connection())
    except Exception as e:
        raise http_error(e, "test_football_data")
