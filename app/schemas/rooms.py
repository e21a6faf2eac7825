"""Pydantic schemas per API Rooms."""

from pydantic import BaseModel, Field


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str | None = None
    max_players: int = Field(10, ge=2, le=20)
    is_public: bool = False
    budget_limit: float = Field(100.0, gt=0)
    gameweek: int | None = Field(None, ge=1, le=38)


class RoomJoin(BaseModel):
    room_code: str = Field(..., min_length=1, max_length=8)
