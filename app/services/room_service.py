"""Room: creazione, join/leave, membri, classifica."""

import logging
import secrets
import string
from typing import Any

from sqlalchemy.orm import Session

from app.core.responses import NotFoundError
from app.models import Lineup, Room, RoomMember

logger = logging.getLogger(__name__)

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
MIN_PLAYERS = 2
MAX_PLAYERS = 20
MAX_CODE_ATTEMPTS = 20


def generate_room_code() -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def _unique_room_code(db: Session) -> str:
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_room_code()
        if not db.query(Room.id).filter(Room.room_code == code).first():
            return code
    raise RuntimeError("Could not generate a unique room code")


def get_room(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise NotFoundError(f"Room {room_id} not found")
    return room


def active_membership(db: Session, room_id: int, user_id: str) -> RoomMember | None:
    return (
        db.query(RoomMember)
        .filter(RoomMember.room_id == room_id, RoomMember.user_id == user_id, RoomMember.is_active.is_(True))
        .first()
    )


def create_room(
    db: Session,
    user_id: str,
    name: str,
    description: str | None = None,
    max_players: int = 10,
    is_public: bool = False,
    budget_limit: float = 100.0,
    gameweek: int | None = None,
) -> Room:
    name = (name or "").strip()
    if not name or len(name) > 50:
        raise ValueError("Room name must be between 1 and 50 characters")
    if not MIN_PLAYERS <= max_players <= MAX_PLAYERS:
        raise ValueError(f"Max players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")

    room = Room(
        room_code=_unique_room_code(db),
        name=name,
        description=description,
        created_by=user_id,
        max_players=max_players,
        current_players=1,
        is_public=is_public,
        budget_limit=budget_limit,
        gameweek=gameweek or 1,
    )
    db.add(room)
    db.flush()
    db.add(RoomMember(room_id=room.id, user_id=user_id, is_active=True))
    db.commit()
    db.refresh(room)
    logger.info("Room %s (%s) creata da %s", room.id, room.room_code, user_id)
    return room


def list_public_rooms(db: Session) -> list[Room]:
    return (
        db.query(Room)
        .filter(Room.is_public.is_(True), Room.is_active.is_(True))
        .order_by(Room.created_at.desc(), Room.id.desc())
        .all()
    )


def list_joined_rooms(db: Session, user_id: str) -> list[Room]:
    return (
        db.query(Room)
        .join(RoomMember, RoomMember.room_id == Room.id)
        .filter(RoomMember.user_id == user_id, RoomMember.is_active.is_(True), Room.is_active.is_(True))
        .order_by(RoomMember.joined_at.desc(), Room.id.desc())
        .all()
    )


def join_room(db: Session, user_id: str, room_code: str) -> Room:
    code = (room_code or "").strip().upper()
    room = db.query(Room).filter(Room.room_code == code, Room.is_active.is_(True)).first()
    if not room:
        raise NotFoundError("Room not found or inactive")

    member = db.query(RoomMember).filter(RoomMember.room_id == room.id, RoomMember.user_id == user_id).first()
    if member and member.is_active:
        raise ValueError("You are already a member of this room")
    if room.current_players >= room.max_players:
        raise ValueError("Room is full")

    if member:
        member.is_active = True
    else:
        db.add(RoomMember(room_id=room.id, user_id=user_id, is_active=True))
    room.current_players += 1
    db.commit()
    db.refresh(room)
    logger.info("User %s entrato in room %s", user_id, room.id)
    return room


def leave_room(db: Session, user_id: str, room_id: int) -> None:
    room = get_room(db, room_id)
    member = active_membership(db, room_id, user_id)
    if not member:
        raise ValueError("You are not a member of this room")
    member.is_active = False
    room.current_players = max(0, (room.current_players or 0) - 1)
    db.commit()
    logger.info("User %s uscito da room %s", user_id, room_id)


def room_members(db: Session, room_id: int) -> list[RoomMember]:
    get_room(db, room_id)
    return (
        db.query(RoomMember)
        .filter(RoomMember.room_id == room_id, RoomMember.is_active.is_(True))
        .order_by(RoomMember.joined_at, RoomMember.id)
        .all()
    )


def rank_lineups(lineups: list[Lineup], score_field: str = "total_points") -> list[dict[str, Any]]:
    """Ordina per punti desc, a parità vince l'invio più vecchio. rank 1..n."""
    def sort_key(lineup: Lineup):
        submitted = lineup.submitted_at.timestamp() if lineup.submitted_at else float("inf")
        return (-(getattr(lineup, score_field) or 0.0), submitted, lineup.id)

    ranked = []
    for rank, lineup in enumerate(sorted(lineups, key=sort_key), start=1):
        entry = lineup.to_dict(include_players=False)
        entry["rank"] = rank
        ranked.append(entry)
    return ranked


def room_leaderboard(db: Session, room_id: int, gameweek: int | None = None) -> dict[str, Any]:
    room = get_room(db, room_id)
    gameweek = gameweek or room.gameweek
    lineups = (
        db.query(Lineup)
        .filter(Lineup.room_id == room_id, Lineup.gameweek == gameweek, Lineup.is_submitted.is_(True))
        .all()
    )
    return {"room": room.to_dict(), "gameweek": gameweek, "leaderboard": rank_lineups(lineups)}


def global_leaderboard(
    db: Session,
    room_id: int | None = None,
    gameweek: int | None = None,
    scope: str = "gameweek",
    limit: int = 50,
) -> list[dict[str, Any]]:
    if scope not in ("gameweek", "total"):
        raise ValueError("scope must be 'gameweek' or 'total'")
    query = db.query(Lineup).filter(Lineup.is_submitted.is_(True))
    if room_id is not None:
        query = query.filter(Lineup.room_id == room_id)
    if gameweek is not None:
        query = query.filter(Lineup.gameweek == gameweek)
    field = "gameweek_points" if scope == "gameweek" else "total_points"
    return rank_lineups(query.all(), field)[:limit]
