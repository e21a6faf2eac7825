from app.models.fixture import Fixture
from app.models.lineup import Lineup, LineupPlayer
from app.models.player import Player
from app.models.player_event import PlayerEvent
from app.models.room import Room, RoomMember
from app.models.team import Team
from app.models.user import User

__all__ = [
    "Team",
    "Player",
    "Fixture",
    "PlayerEvent",
    "User",
    "Room",
    "RoomMember",
    "Lineup",
    "LineupPlayer",
]
