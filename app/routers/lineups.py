"""Router Lineups: lettura, salvataggio (bozza/invio), invio in una room."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.auth import AuthUser, ensure_user_profile, get_current_user
from app.core.database import get_db
from app.core.responses import http_error, ok
from app.schemas.lineups import LineupCreate, LineupSubmit
from app.services import lineup_service, room_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["lineups"])


@router.get("/lineups")
def get_lineups(
    user_id: str | None = None,
    room_id: int | None = None,
    gameweek: int | None = Query(None, ge=1, le=38),
    lineup_id: int | None = None,
    db: Session = Depends(get_db),
):
    try:
        lineups = lineup_service.list_lineups(db, user_id, room_id, gameweek, lineup_id)
        return ok([lu.to_dict() for lu in lineups])
    except Exception as e:
        raise http_error(e, "get_lineups")


@router.post("/lineups")
def save_lineup(
    payload: LineupCreate,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        ensure_user_profile(db, user)
        lineup, warnings = lineup_service.save_lineup(
            db,
            user.id,
            gameweek=payload.gameweek,
            players=[p.model_dump() for p in payload.players],
            room_id=payload.room_id,
            formation=payload.formation,
            is_submitted=payload.is_submitted,
            chip=payload.chip,
        )
        message = "Lineup submitted successfully" if payload.is_submitted else "Lineup saved as draft"
        return ok(lineup.to_dict(), message=message, warnings=warnings)
    except lineup_service.LineupValidationError as e:
        db.rollback()
        logger.info("Lineup non valida per %s: %s", user.id, e.details)
        raise HTTPException(status_code=400, detail={"error": str(e), "details": e.details})
    except Exception as e:
        db.rollback()
        raise http_error(e, "save_lineup")


@router.post("/lineups/submit")
def submit_lineup(
    payload: LineupSubmit,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        lineup = lineup_service.submit_lineup(db, user.id, payload.lineup_id, payload.room_id)
        return ok(lineup.to_dict(), message="Lineup submitted successfully")
    except Exception as e:
        db.rollback()
        raise http_error(e, "submit_lineup")


@router.get("/leaderboard")
def leaderboard(
    room_id: int | None = None,
    gameweek: int | None = Query(None, ge=1, le=38),
    scope: str = Query("gameweek", pattern="^(gameweek|total)$"),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Classifica globale o di una room per punti di giornata o totali."""
    try:
        rows = room_service.global_leaderboard(db, room_id, gameweek, scope, limit)
        return ok(rows)
    except Exception as e:
        raise http_error(e, "leaderboard")
