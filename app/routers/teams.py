"""Router letture squadre, giocatori, fixture."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.responses import http_error, ok
from app.services import player_service

router = APIRouter(prefix="/api", tags=["teams"])


@router.get("/teams")
def get_teams(db: Session = Depends(get_db)):
    try:
        teams = player_service.list_teams(db)
        return ok([t.to_dict() for t in teams])
    except Exception as e:
        raise http_error(e, "get_teams")


@router.get("/players")
def get_players(
    position: str | None = Query(None, pattern="^(GK|DEF|MID|FWD|gk|def|mid|fwd)$"),
    team_id: int | None = None,
    search: str | None = None,
    max_price: float | None = Query(None, gt=0),
    sort: str = "total_points",
    limit: int = Query(500, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Giocatori disponibili con filtri."""
    try:
        players = player_service.list_players(db, position, team_id, search, max_price, sort, limit)
        return ok([p.to_dict() for p in players], count=len(players))
    except Exception as e:
        raise http_error(e, "get_players")


@router.get("/players/stats")
def get_player_stats(
    gameweek: int | None = Query(None, ge=1, le=38),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Classifiche stagionali; con gameweek punti calcolati dagli eventi."""
    try:
        return ok(player_service.player_stats(db, gameweek, limit))
    except Exception as e:
        raise http_error(e, "get_player_stats")


@router.get("/players/{player_id}")
def get_player(player_id: int, db: Session = Depends(get_db)):
    try:
        return ok(player_service.get_player(db, player_id).to_dict())
    except Exception as e:
        raise http_error(e, f"get_player {player_id}")


@router.get("/fixtures")
def get_fixtures(
    gameweek: int | None = Query(None, ge=1, le=38),
    finished: bool | None = None,
    db: Session = Depends(get_db),
):
    try:
        fixtures = player_service.list_fixtures(db, gameweek, finished)
        return ok([f.to_dict() for f in fixtures], count=len(fixtures))
    except Exception as e:
        raise http_error(e, "get_fixtures")


@router.get("/fixtures/{fixture_id}/events")
def get_fixture_events(fixture_id: int, db: Session = Depends(get_db)):
    """Eventi giocatore della fixture con i punti calcolati."""
    try:
        return ok(player_service.fixture_events(db, fixture_id))
    except Exception as e:
        raise http_error(e, f"get_fixture_events {fixture_id}")
