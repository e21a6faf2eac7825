"""Pydantic schemas per API admin e sync."""

from typing import Literal

from pydantic import BaseModel, Field


class FixtureSyncRequest(BaseModel):
    source: Literal["fpl", "football_data", "auto"] = "fpl"
    gameweek: int | None = Field(None, ge=1, le=38)
    season: int | None = None


class SettlementRequest(BaseModel):
    gameweek: int = Field(..., ge=1, le=38)
    room_id: int | None = None
    force_recalculate: bool = False


class PopulateEventsRequest(BaseModel):
    gameweek: int | None = Field(None, ge=1, le=38)


class TeamMappingUpdate(BaseModel):
    team_id: int
    fpl_id: int | None = None
    football_data_id: int | None = None
