"""Lineup (formazione di giornata) e giocatori schierati."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Lineup(Base):
    __tablename__ = "lineups"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=True, index=True)
    gameweek = Column(Integer, nullable=False, index=True)
    formation = Column(String(16), nullable=False, default="4-4-2")
    captain_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    vice_captain_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    chip = Column(String(32), nullable=True)  # "triple_captain"
    total_cost = Column(Float, nullable=False, default=0.0)
    is_submitted = Column(Boolean, nullable=False, default=False, index=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    total_points = Column(Float, nullable=False, default=0.0)
    gameweek_points = Column(Float, nullable=True, default=0.0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    room = relationship("Room")
    players = relationship(
        "LineupPlayer",
        back_populates="lineup",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "room_id", "gameweek", name="uq_lineups_user_room_gw"),
    )

    def to_dict(self, include_players: bool = True) -> dict:
        user = self.user
        room = self.room
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "room_id": self.room_id,
            "gameweek": self.gameweek,
            "formation": self.formation,
            "captain_id": self.captain_id,
            "vice_captain_id": self.vice_captain_id,
            "chip": self.chip,
            "total_cost": round(self.total_cost or 0.0, 1),
            "is_submitted": self.is_submitted,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "total_points": self.total_points,
            "gameweek_points": self.gameweek_points,
            "user": user.to_dict() if user else None,
            "room": {"id": room.id, "name": room.name, "room_code": room.room_code} if room else None,
        }
        if include_players:
            data["lineup_players"] = [lp.to_dict() for lp in self.players]
        return data


class LineupPlayer(Base):
    __tablename__ = "lineup_players"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    lineup_id = Column(Integer, ForeignKey("lineups.id", ondelete="CASCADE"), nullable=False)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    position = Column(String(3), nullable=False)
    is_starter = Column(Boolean, nullable=False, default=True)
    is_captain = Column(Boolean, nullable=False, default=False)
    is_vice_captain = Column(Boolean, nullable=False, default=False)
    multiplier = Column(Integer, nullable=False, default=1)
    points_scored = Column(Float, nullable=False, default=0.0)

    lineup = relationship("Lineup", back_populates="players")
    player = relationship("Player", lazy="joined")

    __table_args__ = (
        Index("ix_lineup_players_lineup_id", "lineup_id"),
    )

    def to_dict(self) -> dict:
        player = self.player
        return {
            "id": self.id,
            "player_id": self.player_id,
            "position": self.position,
            "is_starter": self.is_starter,
            "is_captain": self.is_captain,
            "is_vice_captain": self.is_vice_captain,
            "multiplier": self.multiplier,
            "points_scored": self.points_scored,
            "player": player.to_dict() if player else None,
        }
