"""
Servizio di sync fixture: FPL o Football-Data.org -> tabella fixtures.
Upsert idempotente: id provider se presente, altrimenti chiave naturale
(gameweek + home_team_id + away_team_id). Rilanciato con gli stessi dati
non crea duplicati e non modifica righe.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from app.core.config import has_football_data_key
from app.models import Fixture
from app.services.fpl_client import FplClient
from app.services.football_data_client import FootballDataClient
from app.services.reconciliation import TeamResolver

logger = logging.getLogger(__name__)

SOURCES = ("fpl", "football_data", "auto")

UPDATABLE_FIELDS = (
    "gameweek",
    "home_team_id",
    "away_team_id",
    "home_score",
    "away_score",
    "finished",
    "minutes_played",
    "kickoff_time",
)


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _same_instant(a: datetime | None, b: datetime | None) -> bool:
    """Confronto tollerante a datetime naive (SQLite) vs aware."""
    if a is None or b is None:
        return a is b
    if (a.tzinfo is None) != (b.tzinfo is None):
        return a.replace(tzinfo=None) == b.replace(tzinfo=None)
    return a == b


def normalize_fpl_fixture(raw: dict[str, Any], resolver: TeamResolver, fpl_teams: dict[int, dict]) -> dict[str, Any] | None:
    """Fixture FPL -> campi tabella fixtures. None se una squadra non è risolvibile."""
    home_raw = fpl_teams.get(raw.get("team_h"), {})
    away_raw = fpl_teams.get(raw.get("team_a"), {})
    home_id = resolver.resolve(raw.get("team_h"), home_raw.get("name"), home_raw.get("short_name"))
    away_id = resolver.resolve(raw.get("team_a"), away_raw.get("name"), away_raw.get("short_name"))
    if not home_id or not away_id:
        return None
    return {
        "fpl_id": raw.get("id"),
        "gameweek": raw.get("event"),
        "home_team_id": home_id,
        "away_team_id": away_id,
        "home_score": raw.get("team_h_score"),
        "away_score": raw.get("team_a_score"),
        "finished": bool(raw.get("finished")),
        "minutes_played": raw.get("minutes") or 0,
        "kickoff_time": _parse_datetime(raw.get("kickoff_time")),
    }


def normalize_football_data_match(raw: dict[str, Any], resolver: TeamResolver) -> dict[str, Any] | None:
    """Partita Football-Data.org -> campi tabella fixtures."""
    home = raw.get("homeTeam") or {}
    away = raw.get("awayTeam") or {}
    home_id = resolver.resolve(home.get("id"), home.get("name"), home.get("tla"))
    away_id = resolver.resolve(away.get("id"), away.get("name"), away.get("tla"))
    if not home_id or not away_id:
        return None
    full_time = ((raw.get("score") or {}).get("fullTime")) or {}
    finished = raw.get("status") == "FINISHED"
    return {
        "football_data_id": raw.get("id"),
        "gameweek": raw.get("matchday"),
        "home_team_id": home_id,
        "away_team_id": away_id,
        "home_score": full_time.get("home"),
        "away_score": full_time.get("away"),
        "finished": finished,
        "minutes_played": 90 if finished else 0,
        "kickoff_time": _parse_datetime(raw.get("utcDate")),
    }


def _find_existing(db: Session, data: dict[str, Any]) -> Fixture | None:
    for provider_col in ("fpl_id", "football_data_id"):
        provider_id = data.get(provider_col)
        if provider_id is not None:
            existing = db.query(Fixture).filter(getattr(Fixture, provider_col) == provider_id).first()
            if existing:
                return existing
    return (
        db.query(Fixture)
        .filter(
            Fixture.gameweek == data.get("gameweek"),
            Fixture.home_team_id == data["home_team_id"],
            Fixture.away_team_id == data["away_team_id"],
        )
        .first()
    )


def upsert_fixture(db: Session, data: dict[str, Any]) -> str:
    """
    Inserisce o aggiorna una fixture. Ritorna "inserted", "updated" o "unchanged".
    Non committa: il chiamante decide quando.
    """
    existing = _find_existing(db, data)
    if existing is None:
        db.add(Fixture(**data))
        db.flush()
        return "inserted"

    changed = False
    for field in UPDATABLE_FIELDS:
        if field not in data:
            continue
        new_value = data[field]
        old_value = getattr(existing, field)
        if field == "kickoff_time":
            if _same_instant(old_value, new_value):
                continue
        elif old_value == new_value:
            continue
        setattr(existing, field, new_value)
        changed = True

    for provider_col in ("fpl_id", "football_data_id"):
        if data.get(provider_col) is not None and getattr(existing, provider_col) is None:
            setattr(existing, provider_col, data[provider_col])
            changed = True

    if changed:
        db.flush()
        return "updated"
    return "unchanged"


def _apply_rows(db: Session, rows: list[dict[str, Any] | None], summary: dict[str, Any]) -> None:
    for row in rows:
        if row is None:
            summary["skipped"] += 1
            continue
        outcome = upsert_fixture(db, row)
        summary[outcome] += 1
    db.commit()


async def sync_fixtures(
    db: Session,
    source: str = "fpl",
    gameweek: int | None = None,
    season: int | None = None,
    fpl_client: FplClient | None = None,
    football_data_client: FootballDataClient | None = None,
) -> dict[str, Any]:
    """
    Scarica le fixture dalla sorgente scelta e le salva.
    source="auto": Football-Data.org se la chiave è configurata, fallback su FPL.
    Returns: { source, total, inserted, updated, unchanged, skipped, errors }
    """
    if source not in SOURCES:
        raise ValueError(f"Invalid source: {source}. Allowed values: {', '.join(SOURCES)}")

    summary: dict[str, Any] = {
        "source": source,
        "total": 0,
        "inserted": 0,
        "updated": 0,
        "unchanged": 0,
        "skipped": 0,
        "errors": [],
    }

    if source in ("football_data", "auto") and (football_data_client or has_football_data_key()):
        try:
            client = football_data_client or FootballDataClient()
            matches = await client.get_matches(season=season)
            if gameweek:
                matches = [m for m in matches if m.get("matchday") == gameweek]
            resolver = TeamResolver(db, "football_data")
            rows = [normalize_football_data_match(m, resolver) for m in matches]
            summary["source"] = "football_data"
            summary["total"] = len(rows)
            _apply_rows(db, rows, summary)
            logger.info("Sync fixture Football-Data completato: %s", summary)
            return summary
        except Exception as e:
            db.rollback()
            if source == "football_data":
                raise
            logger.warning("Football-Data.org fallito, fallback su FPL: %s", e)
            summary["errors"].append(f"Football-Data.org: {e}")
    elif source == "football_data":
        raise RuntimeError("FOOTBALL_DATA_API_KEY is not configured")

    client = fpl_client or FplClient()
    bootstrap = await client.get_bootstrap()
    raw_fixtures = await client.get_fixtures(gameweek=gameweek)
    fpl_teams = {t["id"]: t for t in bootstrap.get("teams", [])}
    resolver = TeamResolver(db, "fpl")
    rows = [normalize_fpl_fixture(f, resolver, fpl_teams) for f in raw_fixtures]
    summary["source"] = "fpl"
    summary["total"] = len(rows)
    _apply_rows(db, rows, summary)
    logger.info("Sync fixture FPL completato: %s", summary)
    return summary
