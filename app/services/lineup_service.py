"""
Lineup: salvataggio (bozza o invio), lettura, invio di una bozza in una room.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from app.analytics.lineup_validation import (
    DEFAULT_BUDGET,
    LineupConstraints,
    PlayerSelection,
    calculate_lineup_cost,
    formation_string,
    validate_lineup,
)
from app.analytics.scoring_rules import MULTIPLIERS
from app.core.responses import NotFoundError
from app.models import Lineup, LineupPlayer, Player, Room, Team
from app.services.room_service import active_membership

logger = logging.getLogger(__name__)


class LineupValidationError(ValueError):
    """Formazione non valida: details contiene tutti gli errori."""

    def __init__(self, details: list[str], warnings: list[str] | None = None):
        self.details = details
        self.warnings = warnings or []
        message = f"Lineup validation failed: {details[0]}" if details else "Lineup validation failed"
        super().__init__(message)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _build_selections(db: Session, players: list[dict[str, Any]]) -> list[PlayerSelection]:
    """Unisce i flag del client con ruolo/squadra/prezzo dal database."""
    ids = [p["id"] for p in players]
    db_players = {p.id: p for p in db.query(Player).filter(Player.id.in_(ids)).all()}
    missing = [pid for pid in set(ids) if pid not in db_players]
    if missing:
        raise ValueError("Some selected players do not exist")
    unavailable = sorted({pid for pid in ids if not db_players[pid].is_available})
    if unavailable:
        raise ValueError(f"Some players are no longer available: {', '.join(str(pid) for pid in unavailable)}")

    return [
        PlayerSelection(
            id=p["id"],
            position=db_players[p["id"]].position,
            team_id=db_players[p["id"]].team_id,
            price=db_players[p["id"]].price,
            is_starter=p.get("is_starter", True),
            is_captain=p.get("is_captain", False),
            is_vice_captain=p.get("is_vice_captain", False),
        )
        for p in players
    ]


def _apply_team_names(db: Session, errors: list[str], selections: list[PlayerSelection]) -> list[str]:
    """Nei messaggi "Team {id}" sostituisce l'id con il nome della squadra."""
    team_ids = {s.team_id for s in selections if s.team_id is not None}
    names = {t.id: t.name for t in db.query(Team).filter(Team.id.in_(team_ids)).all()} if team_ids else {}
    mapped = []
    for err in errors:
        for team_id, name in names.items():
            err = err.replace(f"Team {team_id} has", f"{name} has")
        mapped.append(err)
    return mapped


def _replace_players(lineup: Lineup, selections: list[PlayerSelection]) -> None:
    lineup.players.clear()
    for s in selections:
        lineup.players.append(LineupPlayer(
            player_id=s.id,
            position=s.position,
            is_starter=s.is_starter,
            is_captain=s.is_captain,
            is_vice_captain=s.is_vice_captain,
            multiplier=MULTIPLIERS["captain"] if s.is_captain else MULTIPLIERS["normal"],
            points_scored=0.0,
        ))


def save_lineup(
    db: Session,
    user_id: str,
    gameweek: int,
    players: list[dict[str, Any]],
    room_id: int | None = None,
    formation: str | None = None,
    is_submitted: bool = False,
    chip: str | None = None,
) -> tuple[Lineup, list[str]]:
    """
    Salva la formazione. Ritorna (lineup, warnings).
    Raises: ValueError / LineupValidationError (400), PermissionError (403), NotFoundError (404).
    """
    if not players:
        raise ValueError("Missing required fields: gameweek, players")

    room = None
    if room_id is not None:
        room = db.query(Room).filter(Room.id == room_id).first()
        if not room:
            raise NotFoundError(f"Room {room_id} not found")
    if is_submitted:
        if room is None:
            raise ValueError("room_id required when submitting lineup")
        if not active_membership(db, room.id, user_id):
            raise PermissionError("User is not a member of this room")

    selections = _build_selections(db, players)
    constraints = LineupConstraints(max_budget=room.budget_limit if room else DEFAULT_BUDGET)
    validation = validate_lineup(selections, constraints)
    if not validation.is_valid:
        raise LineupValidationError(_apply_team_names(db, validation.errors, selections), validation.warnings)

    captain = next((s for s in selections if s.is_captain), None)
    vice = next((s for s in selections if s.is_vice_captain), None)

    if room_id is None:
        deleted = (
            db.query(Lineup)
            .filter(Lineup.user_id == user_id, Lineup.room_id.is_(None))
            .all()
        )
        for old in deleted:
            db.delete(old)
        if deleted:
            db.flush()
            logger.info("Rimosse %s bozze precedenti di %s", len(deleted), user_id)
        lineup = None
    else:
        lineup = (
            db.query(Lineup)
            .filter(Lineup.user_id == user_id, Lineup.room_id == room_id, Lineup.gameweek == gameweek)
            .first()
        )

    if lineup is None:
        lineup = Lineup(user_id=user_id, room_id=room_id, gameweek=gameweek)
        db.add(lineup)

    lineup.formation = formation or formation_string([s for s in selections if s.is_starter])
    lineup.captain_id = captain.id if captain else None
    lineup.vice_captain_id = vice.id if vice else None
    lineup.chip = chip
    lineup.total_cost = calculate_lineup_cost(selections)
    lineup.is_submitted = is_submitted
    lineup.submitted_at = _now() if is_submitted else None
    lineup.updated_at = _now()
    _replace_players(lineup, selections)

    db.commit()
    db.refresh(lineup)
    logger.info(
        "Lineup %s salvata: user=%s room=%s gw=%s submitted=%s",
        lineup.id, user_id, room_id, gameweek, is_submitted,
    )
    return lineup, validation.warnings


def list_lineups(
    db: Session,
    user_id: str | None = None,
    room_id: int | None = None,
    gameweek: int | None = None,
    lineup_id: int | None = None,
) -> list[Lineup]:
    query = db.query(Lineup)
    if lineup_id is not None:
        query = query.filter(Lineup.id == lineup_id)
    if user_id:
        query = query.filter(Lineup.user_id == user_id)
    if room_id is not None:
        query = query.filter(Lineup.room_id == room_id)
    if gameweek is not None:
        query = query.filter(Lineup.gameweek == gameweek)
    return query.order_by(Lineup.created_at.desc(), Lineup.id.desc()).all()


def submit_lineup(db: Session, user_id: str, lineup_id: int, room_id: int) -> Lineup:
    """
    Invia una bozza in una room per la gameweek della room.
    Una lineup già inviata per quella gameweek blocca l'operazione; una non inviata viene sovrascritta.
    """
    if not active_membership(db, room_id, user_id):
        raise PermissionError("You are not a member of this league")

    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise NotFoundError("Room not found")

    draft = db.query(Lineup).filter(Lineup.id == lineup_id, Lineup.user_id == user_id).first()
    if not draft:
        raise NotFoundError(f"Lineup {lineup_id} not found")

    existing = (
        db.query(Lineup)
        .filter(Lineup.user_id == user_id, Lineup.room_id == room_id, Lineup.gameweek == room.gameweek)
        .first()
    )
    if existing and existing.is_submitted:
        raise ValueError(f"You have already submitted a lineup for gameweek {room.gameweek} in this league")

    if existing and existing.id == draft.id:
        target = existing
    else:
        target = existing or Lineup(user_id=user_id, room_id=room_id, gameweek=room.gameweek)
        if existing is None:
            db.add(target)
        target.players.clear()
        for lp in draft.players:
            target.players.append(LineupPlayer(
                player_id=lp.player_id,
                position=lp.position,
                is_starter=lp.is_starter,
                is_captain=lp.is_captain,
                is_vice_captain=lp.is_vice_captain,
                multiplier=lp.multiplier,
                points_scored=0.0,
            ))

    target.formation = draft.formation
    target.captain_id = draft.captain_id
    target.vice_captain_id = draft.vice_captain_id
    target.chip = draft.chip
    target.total_cost = draft.total_cost
    target.is_submitted = True
    target.submitted_at = _now()
    target.total_points = 0.0
    target.gameweek_points = 0.0

    db.commit()
    db.refresh(target)
    logger.info("Lineup %s inviata in room %s gw=%s (bozza %s)", target.id, room_id, room.gameweek, lineup_id)
    return target
