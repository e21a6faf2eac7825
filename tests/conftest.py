from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_USER_IDS"] = "admin-1"
os.environ["APP_ENV"] = "development"
os.environ.pop("FOOTBALL_DATA_API_KEY", None)

from datetime import datetime, timedelta, timezone  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi import Header, HTTPException  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.auth import AuthUser, get_current_user  # noqa: E402
from app.core.database import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import (  # noqa: E402
    Fixture,
    Lineup,
    LineupPlayer,
    Player,
    PlayerEvent,
    Room,
    RoomMember,
    Team,
    User,
)

TEAMS = [
    ("Arsenal", "ARS"),
    ("Chelsea", "CHE"),
    ("Liverpool", "LIV"),
    ("Manchester City", "MCI"),
    ("Tottenham Hotspur", "TOT"),
    ("Aston Villa", "AVL"),
]

# name, position, team index, price
PLAYERS = [
    ("David Raya", "GK", 0, 5.5),
    ("William Saliba", "DEF", 0, 6.0),
    ("Reece James", "DEF", 1, 5.5),
    ("Virgil van Dijk", "DEF", 2, 6.0),
    ("Ruben Dias", "DEF", 3, 5.5),
    ("Bukayo Saka", "MID", 0, 6.0),
    ("Cole Palmer", "MID", 1, 6.0),
    ("Mohamed Salah", "MID", 2, 7.0),
    ("Phil Foden", "MID", 3, 6.0),
    ("Erling Haaland", "FWD", 3, 7.5),
    ("Dominic Solanke", "FWD", 4, 6.0),
    ("Nicolas Jackson", "FWD", 1, 6.5),
]

STARTING_XI = [name for name, *_ in PLAYERS[:11]]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded(db):
    teams = [Team(name=name, short_name=code) for name, code in TEAMS]
    db.add_all(teams)
    db.flush()

    players = {}
    for name, position, team_idx, price in PLAYERS:
        player = Player(name=name, web_name=name.split()[-1], position=position, team_id=teams[team_idx].id, price=price)
        players[name] = player
    players["Injured Guy"] = Player(name="Injured Guy", position="MID", team_id=teams[4].id, price=5.0, is_available=False)
    db.add_all(players.values())

    ars, che, liv, mci, tot, avl = teams
    fixtures = [
        Fixture(gameweek=1, home_team_id=ars.id, away_team_id=che.id, home_score=2, away_score=1, finished=True),
        Fixture(gameweek=1, home_team_id=liv.id, away_team_id=mci.id, home_score=1, away_score=1, finished=True),
        Fixture(gameweek=1, home_team_id=tot.id, away_team_id=avl.id, home_score=0, away_score=0, finished=True),
        Fixture(gameweek=2, home_team_id=che.id, away_team_id=ars.id, finished=False),
    ]
    db.add_all(fixtures)
    db.commit()
    return SimpleNamespace(teams=teams, players=players, fixtures=fixtures)


def make_user(db, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        user = User(id=user_id, username=user_id, display_name=user_id)
        db.add(user)
        db.flush()
    return user


def make_room(db, owner_id: str = "user-a", gameweek: int = 1, members: tuple[str, ...] = ()) -> Room:
    make_user(db, owner_id)
    room = Room(room_code="ABC123", name="Test Room", created_by=owner_id, gameweek=gameweek, current_players=1)
    db.add(room)
    db.flush()
    db.add(RoomMember(room_id=room.id, user_id=owner_id))
    for user_id in members:
        make_user(db, user_id)
        db.add(RoomMember(room_id=room.id, user_id=user_id))
        room.current_players += 1
    db.commit()
    return room


def make_lineup(
    db,
    players: dict[str, Player],
    user_id: str = "user-a",
    room: Room | None = None,
    gameweek: int = 1,
    captain: str | None = "Erling Haaland",
    vice: str | None = "Mohamed Salah",
    chip: str | None = None,
    bench: tuple[str, ...] = (),
    submitted_at: datetime | None = None,
) -> Lineup:
    make_user(db, user_id)
    lineup = Lineup(
        user_id=user_id,
        room_id=room.id if room else None,
        gameweek=gameweek,
        chip=chip,
        is_submitted=True,
        submitted_at=submitted_at or datetime.now(timezone.utc),
        gameweek_points=0.0,
        total_points=0.0,
    )
    for name in STARTING_XI + list(bench):
        player = players[name]
        lineup.players.append(LineupPlayer(
            player_id=player.id,
            position=player.position,
            is_starter=name not in bench,
            is_captain=name == captain,
            is_vice_captain=name == vice,
            multiplier=2 if name == captain else 1,
        ))
    db.add(lineup)
    db.commit()
    return lineup


def add_events(db, fixture: Fixture, player: Player, minutes: int, *events: str, **data) -> None:
    db.add(PlayerEvent(fixture_id=fixture.id, player_id=player.id, event_type="appearance", data={"minutes": minutes}))
    for event_type in events:
        db.add(PlayerEvent(fixture_id=fixture.id, player_id=player.id, event_type=event_type, data=data or None))
    db.commit()


@pytest.fixture
def helpers():
    return SimpleNamespace(
        make_user=make_user,
        make_room=make_room,
        make_lineup=make_lineup,
        add_events=add_events,
        earlier=lambda minutes: datetime.now(timezone.utc) - timedelta(minutes=minutes),
        auth=auth,
    )


async def _fake_current_user(authorization: str | None = Header(default=None)) -> AuthUser:
    """Nei test il token è direttamente l'id utente."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")
    user_id = authorization.removeprefix("Bearer ").strip()
    return AuthUser(id=user_id, email=f"{user_id}@example.com")


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user] = _fake_current_user
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}"}
