"""
Sync squadre e giocatori da FPL bootstrap-static.
Squadre: risolte con TeamResolver (id esplicito, poi euristica) e create se mancanti.
Giocatori: upsert per fpl_id (o match per nome nello stesso ruolo).
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from app.models import Player, Team
from app.services.fpl_client import (
    FplClient,
    convert_position,
    convert_price,
    current_gameweek_from_bootstrap,
    player_photo_url,
    team_badge_url,
)
from app.services.reconciliation import TeamResolver, match_player

logger = logging.getLogger(__name__)

# Colori sociali per short name FPL
TEAM_COLORS: dict[str, tuple[str, str]] = {
    "ARS": ("#EF0107", "#FFFFFF"),
    "AVL": ("#670E36", "#95BFE5"),
    "BOU": ("#DA291C", "#000000"),
    "BRE": ("#E30613", "#FFFFFF"),
    "BHA": ("#0057B8", "#FFFFFF"),
    "BUR": ("#6C1D45", "#99D6EA"),
    "CHE": ("#034694", "#FFFFFF"),
    "CRY": ("#1B458F", "#C4122E"),
    "EVE": ("#003399", "#FFFFFF"),
    "FUL": ("#FFFFFF", "#000000"),
    "LEE": ("#FFFFFF", "#1D428A"),
    "LIV": ("#C8102E", "#FFFFFF"),
    "MCI": ("#6CABDD", "#FFFFFF"),
    "MUN": ("#DA291C", "#FBE122"),
    "NEW": ("#241F20", "#FFFFFF"),
    "NFO": ("#DD0000", "#FFFFFF"),
    "SUN": ("#EB172B", "#FFFFFF"),
    "TOT": ("#132257", "#FFFFFF"),
    "WHU": ("#7A263A", "#1BB1E7"),
    "WOL": ("#FDB913", "#231F20"),
}


def sync_teams_from_bootstrap(db: Session, bootstrap: dict[str, Any]) -> dict[str, int]:
    """Upsert delle squadre FPL. Ritorna conteggi created/updated."""
    resolver = TeamResolver(db, "fpl")
    created = updated = 0
    for raw in bootstrap.get("teams", []):
        short_name = raw.get("short_name") or ""
        primary, secondary = TEAM_COLORS.get(short_name, (None, None))
        team = None
        found = resolver.match(raw.get("id"), raw.get("name"), short_name)
        if found:
            team = found.team
            updated += 1
        else:
            team = Team(name=raw.get("name"), short_name=short_name, fpl_id=raw.get("id"))
            db.add(team)
            resolver.teams.append(team)
            created += 1
        team.code = raw.get("code")
        team.logo_url = team_badge_url(raw.get("code"))
        if primary:
            team.primary_color = primary
            team.secondary_color = secondary
    db.commit()
    logger.info("sync_teams: %s create, %s aggiornate", created, updated)
    return {"created": created, "updated": updated}


def _player_fields(raw: dict[str, Any], team_id: int | None) -> dict[str, Any]:
    first = (raw.get("first_name") or "").strip()
    second = (raw.get("second_name") or "").strip()
    return {
        "fpl_id": raw.get("id"),
        "name": f"{first} {second}".strip() or raw.get("web_name"),
        "web_name": raw.get("web_name"),
        "position": convert_position(raw.get("element_type")),
        "team_id": team_id,
        "price": convert_price(raw.get("now_cost")),
        "total_points": raw.get("total_points") or 0,
        "goals": raw.get("goals_scored") or 0,
        "assists": raw.get("assists") or 0,
        "clean_sheets": raw.get("clean_sheets") or 0,
        "yellow_cards": raw.get("yellow_cards") or 0,
        "red_cards": raw.get("red_cards") or 0,
        "saves": raw.get("saves") or 0,
        "bonus_points": raw.get("bonus") or 0,
        "form": float(raw.get("form") or 0),
        "selected_by_percent": float(raw.get("selected_by_percent") or 0),
        "photo_url": player_photo_url(raw.get("photo")),
        "is_available": raw.get("status") == "a",
    }


def sync_players_from_bootstrap(db: Session, bootstrap: dict[str, Any]) -> dict[str, int]:
    """Upsert dei giocatori. Giocatori con squadra non risolvibile sono saltati."""
    resolver = TeamResolver(db, "fpl")
    fpl_teams = {t["id"]: t for t in bootstrap.get("teams", [])}
    new = updated = skipped = 0

    for raw in bootstrap.get("elements", []):
        team_raw = fpl_teams.get(raw.get("team"), {})
        team_id = resolver.resolve(raw.get("team"), team_raw.get("name"), team_raw.get("short_name"))
        if team_id is None:
            skipped += 1
            continue
        fields = _player_fields(raw, team_id)
        player = match_player(db, fields["fpl_id"], fields["name"], fields["position"], fields["web_name"])
        if player is None:
            db.add(Player(**fields))
            new += 1
        else:
            for key, value in fields.items():
                setattr(player, key, value)
            player.updated_at = datetime.now(timezone.utc)
            updated += 1

    db.commit()
    logger.info("sync_players: %s nuovi, %s aggiornati, %s saltati", new, updated, skipped)
    return {"new": new, "updated": updated, "skipped": skipped}


async def sync_teams(db: Session, client: FplClient | None = None) -> dict[str, Any]:
    client = client or FplClient()
    bootstrap = await client.get_bootstrap()
    return sync_teams_from_bootstrap(db, bootstrap)


async def sync_players(db: Session, client: FplClient | None = None) -> dict[str, Any]:
    """Sync giocatori; ritorna anche la gameweek corrente."""
    client = client or FplClient()
    bootstrap = await client.get_bootstrap()
    result = sync_players_from_bootstrap(db, bootstrap)
    result["current_gameweek"] = current_gameweek_from_bootstrap(bootstrap)
    return result
