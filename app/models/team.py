"""Team ORM model. Squadre di Premier League con gli id dei provider esterni."""

from sqlalchemy import Column, Integer, String

from app.core.database import Base


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    short_name = Column(String(8), nullable=False, index=True)
    code = Column(Integer, nullable=True)

    # Mappatura esplicita verso i provider: consultata prima del matching per nome
    fpl_id = Column(Integer, unique=True, nullable=True, index=True)
    football_data_id = Column(Integer, unique=True, nullable=True, index=True)

    primary_color = Column(String(16), nullable=True)
    secondary_color = Column(String(16), nullable=True)
    logo_url = Column(String(512), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "short_name": self.short_name,
            "code": self.code,
            "fpl_id": self.fpl_id,
            "football_data_id": self.football_data_id,
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
            "logo_url": self.logo_url,
        }
