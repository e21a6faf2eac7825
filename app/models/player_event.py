"""
Eventi di un giocatore in una fixture: gol, assist, cartellini, parate, bonus.
Sorgente per il calcolo dei punti di giornata (settlement).
"""

from sqlalchemy import JSON, Column, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base


class PlayerEvent(Base):
    __tablename__ = "player_events"

    id = Column(Integer, primary_key=True, index=True)
    fixture_id = Column(
        Integer, ForeignKey("fixtures.id", ondelete="CASCADE"),
        nullable=False,
    )
    player_id = Column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
    )
    event_type = Column(String(32), nullable=False)
    minute = Column(Integer, nullable=True)
    points = Column(Float, nullable=False, default=0.0)
    # Payload ausiliario: minutes, goals_conceded, bonus_points
    data = Column(JSON, nullable=True)

    # --- Relazioni ---
    fixture = relationship("Fixture", backref="player_events")
    player = relationship("Player")

    # --- Indici ---
    __table_args__ = (
        Index("ix_player_events_fixture_id", "fixture_id"),
        Index("ix_player_events_player", "player_id"),
        Index("ix_player_events_type", "event_type"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fixture_id": self.fixture_id,
            "player_id": self.player_id,
            "event_type": self.event_type,
            "minute": self.minute,
            "points": self.points,
            "data": self.data or {},
        }
