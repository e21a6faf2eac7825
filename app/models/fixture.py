"""Fixture ORM model."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Fixture(Base):
    __tablename__ = "fixtures"

    id = Column(Integer, primary_key=True, index=True)
    fpl_id = Column(Integer, unique=True, nullable=True, index=True)
    football_data_id = Column(Integer, unique=True, nullable=True, index=True)
    gameweek = Column(Integer, nullable=True, index=True)
    home_team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    away_team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    finished = Column(Boolean, nullable=False, default=False, index=True)
    minutes_played = Column(Integer, nullable=True)
    kickoff_time = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    home_team = relationship("Team", foreign_keys=[home_team_id])
    away_team = relationship("Team", foreign_keys=[away_team_id])

    # Chiave naturale per l'upsert idempotente
    __table_args__ = (
        UniqueConstraint("gameweek", "home_team_id", "away_team_id", name="uq_fixtures_gw_home_away"),
    )

    def to_dict(self) -> dict:
        home = self.home_team
        away = self.away_team
        return {
            "id": self.id,
            "fpl_id": self.fpl_id,
            "football_data_id": self.football_data_id,
            "gameweek": self.gameweek,
            "home_team": {"id": home.id, "name": home.name, "short_name": home.short_name} if home else None,
            "away_team": {"id": away.id, "name": away.name, "short_name": away.short_name} if away else None,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "finished": self.finished,
            "minutes_played": self.minutes_played,
            "kickoff_time": self.kickoff_time.isoformat() if self.kickoff_time else None,
        }
