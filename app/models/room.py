"""Room (lega privata/pubblica) e membership."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    room_code = Column(String(8), unique=True, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    max_players = Column(Integer, nullable=False, default=10)
    current_players = Column(Integer, nullable=False, default=0)
    is_public = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    budget_limit = Column(Float, nullable=False, default=100.0)
    gameweek = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User", foreign_keys=[created_by])
    members = relationship("RoomMember", back_populates="room", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        owner = self.owner
        return {
            "id": self.id,
            "room_code": self.room_code,
            "name": self.name,
            "description": self.description,
            "created_by": self.created_by,
            "owner": owner.to_dict() if owner else None,
            "max_players": self.max_players,
            "current_players": self.current_players,
            "is_public": self.is_public,
            "is_active": self.is_active,
            "budget_limit": self.budget_limit,
            "gameweek": self.gameweek,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class RoomMember(Base):
    __tablename__ = "room_members"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    room = relationship("Room", back_populates="members")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_room_members_room_user"),
    )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "is_active": self.is_active,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
            "user": self.user.to_dict() if self.user else None,
        }
