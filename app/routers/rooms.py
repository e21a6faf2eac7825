"""
Router Rooms: creazione, join/leave, membri, classifica.
Le operazioni che modificano richiedono l'utente autenticato.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import AuthUser, ensure_user_profile, get_current_user
from app.core.database import get_db
from app.core.responses import http_error, ok
from app.schemas.rooms import RoomCreate, RoomJoin
from app.services import room_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.get("")
def list_rooms(public: bool = True, db: Session = Depends(get_db)):
    """Room pubbliche attive."""
    try:
        rooms = room_service.list_public_rooms(db) if public else []
        return ok([r.to_dict() for r in rooms])
    except Exception as e:
        raise http_error(e, "list_rooms")


@router.get("/joined")
def joined_rooms(user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        rooms = room_service.list_joined_rooms(db, user.id)
        return ok([r.to_dict() for r in rooms])
    except Exception as e:
        raise http_error(e, "joined_rooms")


@router.post("", status_code=201)
def create_room(
    payload: RoomCreate,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        ensure_user_profile(db, user)
        room = room_service.create_room(
            db,
            user.id,
            name=payload.name,
            description=payload.description,
            max_players=payload.max_players,
            is_public=payload.is_public,
            budget_limit=payload.budget_limit,
            gameweek=payload.gameweek,
        )
        return ok(room.to_dict(), message="Room created successfully")
    except Exception as e:
        db.rollback()
        raise http_error(e, "create_room")


@router.post("/join")
def join_room(
    payload: RoomJoin,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        ensure_user_profile(db, user)
        room = room_service.join_room(db, user.id, payload.room_code)
        return ok(room.to_dict(), message=f"Joined room {room.name}")
    except Exception as e:
        db.rollback()
        raise http_error(e, "join_room")


@router.get("/{room_id}")
def get_room(room_id: int, db: Session = Depends(get_db)):
    try:
        room = room_service.get_room(db, room_id)
        data = room.to_dict()
        data["members"] = [m.to_dict() for m in room_service.room_members(db, room_id)]
        return ok(data)
    except Exception as e:
        raise http_error(e, f"get_room {room_id}")


@router.get("/{room_id}/members")
def get_members(room_id: int, db: Session = Depends(get_db)):
    try:
        members = room_service.room_members(db, room_id)
        return ok([m.to_dict() for m in members])
    except Exception as e:
        raise http_error(e, f"get_members {room_id}")


@router.post("/{room_id}/leave")
def leave_room(
    room_id: int,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        room_service.leave_room(db, user.id, room_id)
        return ok(None, message="Left room successfully")
    except Exception as e:
        db.rollback()
        raise http_error(e, f"leave_room {room_id}")


@router.get("/{room_id}/leaderboard")
def room_leaderboard(
    room_id: int,
    gameweek: int | None = Query(None, ge=1, le=38),
    db: Session = Depends(get_db),
):
    """Lineup inviate ordinate per punti; a parità vince l'invio più vecchio."""
    try:
        return ok(room_service.room_leaderboard(db, room_id, gameweek))
    except Exception as e:
        raise http_error(e, f"room_leaderboard {room_id}")
