"""
Client per la Fantasy Premier League public API.
Nessuna autenticazione. Usato dai servizi di sync e di ingestion eventi.
"""

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

BASE_URL = "https://fantasy.premierleague.com/api"

# Fetch per-giocatore: 5 richieste concorrenti, 200 ms tra un batch e l'altro
STATS_BATCH_SIZE = 5
STATS_BATCH_DELAY = 0.2

POSITION_BY_ELEMENT_TYPE = {1: "GK", 2: "DEF", 3: "MID", 4: "FWD"}

PHOTO_URL = "https://resources.premierleague.com/premierleague/photos/players/250x250/p{code}.png"
BADGE_URL = "https://resources.premierleague.com/premierleague/badges/50/t{code}.png"


def convert_position(element_type: int | None) -> str:
    """element_type FPL (1-4) -> GK/DEF/MID/FWD. Default MID."""
    return POSITION_BY_ELEMENT_TYPE.get(element_type, "MID")


def convert_price(now_cost: int | float | None) -> float:
    """FPL salva il prezzo in decimi di milione."""
    return round((now_cost or 0) / 10.0, 1)


def player_photo_url(photo: str | None) -> str | None:
    if not photo:
        return None
    return PHOTO_URL.format(code=photo.replace(".jpg", "").replace(".png", ""))


def team_badge_url(code: int | None) -> str | None:
    return BADGE_URL.format(code=code) if code else None


class FplClient:
    """Client async per la FPL API."""

    def __init__(self, timeout: float = 30.0):
        self._timeout = timeout

    async def _get_json(self, path: str, params: dict | None = None) -> Any:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            r = await client.get(f"{BASE_URL}/{path}", params=params)
            r.raise_for_status()
            return r.json()

    async def get_bootstrap(self) -> dict[str, Any]:
        """bootstrap-static: elements (giocatori), teams, events (gameweek)."""
        data = await self._get_json("bootstrap-static/")
        logger.info(
            "get_bootstrap -> %s players, %s teams, %s events",
            len(data.get("elements", [])), len(data.get("teams", [])), len(data.get("events", [])),
        )
        return data

    async def get_fixtures(self, gameweek: int | None = None) -> list[dict[str, Any]]:
        """Fixture della stagione, o di una singola gameweek."""
        params = {"event": gameweek} if gameweek else None
        data = await self._get_json("fixtures/", params=params)
        logger.info("get_fixtures gameweek=%s -> %s fixture", gameweek, len(data))
        return data

    async def get_element_summary(self, fpl_id: int) -> dict[str, Any]:
        """element-summary/{id}: history contiene una entry per partita giocata."""
        return await self._get_json(f"element-summary/{fpl_id}/")

    async def get_current_gameweek(self) -> int:
        data = await self.get_bootstrap()
        return current_gameweek_from_bootstrap(data)

    async def _fetch_gameweek_stats(self, fpl_id: int, gameweek: int) -> list[dict[str, Any]]:
        """Tutte le entry history della giornata: due in una doppia gameweek."""
        try:
            summary = await self.get_element_summary(fpl_id)
        except Exception as e:
            logger.warning("Fetch stats fallito per FPL id %s: %s", fpl_id, e)
            return []
        return [entry for entry in summary.get("history", []) if entry.get("round") == gameweek]

    async def fetch_player_gameweek_stats(
        self,
        fpl_ids: list[int],
        gameweek: int,
    ) -> dict[int, list[dict[str, Any]]]:
        """
        Statistiche di giornata per una lista di giocatori, una entry per partita.
        Batch di STATS_BATCH_SIZE richieste concorrenti con pausa tra i batch.
        Un fallimento singolo viene loggato e il giocatore manca dal risultato.
        """
        result: dict[int, list[dict[str, Any]]] = {}
        for start in range(0, len(fpl_ids), STATS_BATCH_SIZE):
            batch = fpl_ids[start:start + STATS_BATCH_SIZE]
            stats = await asyncio.gather(*(self._fetch_gameweek_stats(fid, gameweek) for fid in batch))
            for fpl_id, entries in zip(batch, stats):
                if entries:
                    result[fpl_id] = entries
            if start + STATS_BATCH_SIZE < len(fpl_ids):
                await asyncio.sleep(STATS_BATCH_DELAY)

        logger.info(
            "fetch_player_gameweek_stats gameweek=%s: %s/%s giocatori con dati",
            gameweek, len(result), len(fpl_ids),
        )
        return result


def current_gameweek_from_bootstrap(data: dict[str, Any]) -> int:
    """Gameweek corrente (is_current), altrimenti la prossima, altrimenti 1."""
    events = data.get("events", [])
    for key in ("is_current", "is_next"):
        for event in events:
            if event.get(key):
                return int(event["id"])
    return 1
