"""
Router sync dati esterni (FPL, Football-Data.org) -> database.
Operazioni admin; le chiamate restano nel ciclo della richiesta.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import AuthUser, require_admin
from app.core.database import get_db
from app.core.responses import http_error, ok
from app.schemas.admin import FixtureSyncRequest
from app.services import player_service
from app.services.fixture_sync_service import sync_fixtures
from app.services.fpl_client import FplClient
from app.services.player_sync_service import sync_players, sync_teams

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sync", tags=["sync"])


@router.get("/status")
def sync_status(db: Session = Depends(get_db)):
    """Conteggi tabelle e ultimo aggiornamento giocatori."""
    try:
        return ok(player_service.sync_status(db))
    except Exception as e:
        raise http_error(e, "sync_status")


@router.post("/teams")
async def sync_teams_endpoint(
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        result = await sync_teams(db)
        return ok(result, message=f"Teams synced: {result['created']} created, {result['updated']} updated")
    except Exception as e:
        db.rollback()
        raise http_error(e, "sync_teams")


@router.post("/fpl")
async def sync_fpl(
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Giocatori da FPL bootstrap (upsert per fpl_id)."""
    try:
        result = await sync_players(db)
        return ok(result, message=f"Players synced: {result['new']} new, {result['updated']} updated")
    except Exception as e:
        db.rollback()
        raise http_error(e, "sync_fpl")


@router.post("/fixtures")
async def sync_fixtures_endpoint(
    payload: FixtureSyncRequest | None = None,
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    payload = payload or FixtureSyncRequest()
    try:
        result = await sync_fixtures(db, payload.source, payload.gameweek, payload.season)
        return ok(result)
    except Exception as e:
        db.rollback()
        raise http_error(e, "sync_fixtures")


@router.post("/full")
async def sync_full(
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Squadre, giocatori e fixture FPL in sequenza."""
    client = FplClient()
    try:
        teams = await sync_teams(db, client)
        players = await sync_players(db, client)
        fixtures = await sync_fixtures(db, "fpl", fpl_client=client)
        return ok({"teams": teams, "players": players, "fixtures": fixtures}, message="Full sync completed")
    except Exception as e:
        db.rollback()
        raise http_error(e, "sync_full")
