"""
Client per Football-Data.org (v4), competizione PL.
Richiede FOOTBALL_DATA_API_KEY; usato dal sync fixture e dagli endpoint admin.
"""

import logging
from typing import Any

import httpx

from app.core.config import get_football_data_key, get_football_data_season

logger = logging.getLogger(__name__)

BASE_URL = "https://api.football-data.org/v4"
COMPETITION = "PL"


def _header_int(headers: httpx.Headers, *keys: str) -> int | str | None:
    """Primo header trovato (case-insensitive), convertito a int se possibile."""
    for key in keys:
        value = headers.get(key)
        if value is None:
            continue
        return int(value) if value.isdigit() else value
    return None


class FootballDataClient:
    """Client async per Football-Data.org."""

    def __init__(self, api_key: str | None = None):
        self._api_key = api_key or get_football_data_key()

    def _headers(self) -> dict[str, str]:
        return {"X-Auth-Token": self._api_key}

    async def get_matches(self, season: int | None = None) -> list[dict[str, Any]]:
        """
        Ritorna le partite della stagione PL.
        Formato: lista di dict con id, matchday, status, utcDate, homeTeam, awayTeam, score.
        """
        season = season or get_football_data_season()
        async with httpx.AsyncClient(timeout=30.0) as client:
            r = await client.get(
                f"{BASE_URL}/competitions/{COMPETITION}/matches",
                params={"season": season},
                headers=self._headers(),
            )
            r.raise_for_status()
            data = r.json()
        matches = data.get("matches", [])
        logger.info("get_matches season=%s -> %s partite", season, len(matches))
        return matches

    async def get_teams(self, season: int | None = None) -> list[dict[str, Any]]:
        """Squadre PL della stagione: id, name, shortName, tla."""
        season = season or get_football_data_season()
        async with httpx.AsyncClient(timeout=30.0) as client:
            r = await client.get(
                f"{BASE_URL}/competitions/{COMPETITION}/teams",
                params={"season": season},
                headers=self._headers(),
            )
            r.raise_for_status()
            data = r.json()
        teams = data.get("teams", [])
        logger.info("get_teams season=%s -> %s squadre", season, len(teams))
        return teams

    async def test_connection(self) -> dict[str, Any]:
        """
        Test connessione leggero: chiama /competitions/PL.
        Restituisce status HTTP e quota residua dagli header X-Requests-Available-Minute.
        """
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                r = await client.get(
                    f"{BASE_URL}/competitions/{COMPETITION}",
                    headers=self._headers(),
                )
            return {
                "status_code": r.status_code,
                "remaining_requests": _header_int(r.headers, "x-requests-available-minute"),
                "reset_seconds": _header_int(r.headers, "x-requestcounter-reset"),
                "ok": 200 <= r.status_code < 300,
            }
        except httpx.HTTPError as e:
            logger.warning("test_connection Football-Data error: %s", e)
            return {
                "status_code": None,
                "remaining_requests": None,
                "reset_seconds": None,
                "ok": False,
                "error": str(e),
            }
