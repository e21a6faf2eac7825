"""Pydantic schemas per API Lineups."""

from pydantic import BaseModel, Field


class LineupPlayerIn(BaseModel):
    id: int
    is_starter: bool = True
    is_captain: bool = False
    is_vice_captain: bool = False


class LineupCreate(BaseModel):
    room_id: int | None = None
    gameweek: int = Field(..., ge=1, le=38)
    players: list[LineupPlayerIn] = Field(..., min_length=1)
    formation: str | None = None
    is_submitted: bool = False
    chip: str | None = Field(None, pattern="^triple_captain$")


class LineupSubmit(BaseModel):
    lineup_id: int
    room_id: int
