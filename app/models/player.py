"""Player ORM model. Anagrafica e statistiche cumulative (FPL bootstrap-static)."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    fpl_id = Column(Integer, unique=True, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    web_name = Column(String(128), nullable=True)
    position = Column(String(3), nullable=False, index=True)  # GK | DEF | MID | FWD
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True, index=True)
    price = Column(Float, nullable=False, default=0.0)

    total_points = Column(Integer, nullable=False, default=0)
    goals = Column(Integer, nullable=False, default=0)
    assists = Column(Integer, nullable=False, default=0)
    clean_sheets = Column(Integer, nullable=False, default=0)
    yellow_cards = Column(Integer, nullable=False, default=0)
    red_cards = Column(Integer, nullable=False, default=0)
    saves = Column(Integer, nullable=False, default=0)
    bonus_points = Column(Integer, nullable=False, default=0)
    form = Column(Float, nullable=True)
    selected_by_percent = Column(Float, nullable=True)
    photo_url = Column(String(512), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    team = relationship("Team", backref="players")

    def to_dict(self) -> dict:
        team = self.team
        return {
            "id": self.id,
            "fpl_id": self.fpl_id,
            "name": self.name,
            "web_name": self.web_name,
            "position": self.position,
            "team_id": self.team_id,
            "team": {"id": team.id, "name": team.name, "short_name": team.short_name} if team else None,
            "price": self.price,
            "total_points": self.total_points,
            "goals": self.goals,
            "assists": self.assists,
            "clean_sheets": self.clean_sheets,
            "yellow_cards": self.yellow_cards,
            "red_cards": self.red_cards,
            "saves": self.saves,
            "bonus_points": self.bonus_points,
            "form": self.form,
            "selected_by_percent": self.selected_by_percent,
            "photo_url": self.photo_url,
            "is_available": self.is_available,
        }
