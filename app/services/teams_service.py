"""
Mappatura squadre provider -> squadre interne (admin/debug).
Usa il resolver senza persistere: mostra cosa succederebbe al prossimo sync.
"""

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.core.responses import NotFoundError
from app.models import Team
from app.services.fpl_client import FplClient
from app.services.football_data_client import FootballDataClient
from app.services.reconciliation import PROVIDER_COLUMNS, TeamResolver

logger = logging.getLogger(__name__)


def _mapping_rows(db: Session, provider: str, external_teams: list[dict[str, Any]]) -> list[dict[str, Any]]:
    resolver = TeamResolver(db, provider, persist=False)
    rows = []
    for ext in external_teams:
        found = resolver.match(ext["id"], ext["name"], ext.get("code"))
        rows.append({
            "external_id": ext["id"],
            "external_name": ext["name"],
            "external_code": ext.get("code"),
            "team_id": found.team.id if found else None,
            "team_name": found.team.name if found else None,
            "rule": found.rule if found else None,
            "matched": found is not None,
        })
    return rows


async def football_data_team_mapping(db: Session, client: FootballDataClient | None = None) -> dict[str, Any]:
    client = client or FootballDataClient()
    teams = await client.get_teams()
    external = [{"id": t.get("id"), "name": t.get("name"), "code": t.get("tla")} for t in teams]
    rows = _mapping_rows(db, "football_data", external)
    return {"mappings": rows, "unmatched": sum(1 for r in rows if not r["matched"])}


async def fpl_team_mapping(db: Session, client: FplClient | None = None) -> dict[str, Any]:
    client = client or FplClient()
    bootstrap = await client.get_bootstrap()
    external = [
        {"id": t.get("id"), "name": t.get("name"), "code": t.get("short_name")}
        for t in bootstrap.get("teams", [])
    ]
    rows = _mapping_rows(db, "fpl", external)
    return {"mappings": rows, "unmatched": sum(1 for r in rows if not r["matched"])}


def pin_team_mapping(
    db: Session,
    team_id: int,
    fpl_id: int | None = None,
    football_data_id: int | None = None,
) -> Team:
    """Imposta esplicitamente gli id provider su una squadra. Un id già usato da un'altra squadra -> errore."""
    if fpl_id is None and football_data_id is None:
        raise ValueError("Provide at least one of fpl_id or football_data_id")
    team = db.query(Team).filter(Team.id == team_id).first()
    if not team:
        raise NotFoundError(f"Team {team_id} not found")

    for provider, value in (("fpl", fpl_id), ("football_data", football_data_id)):
        if value is None:
            continue
        column = PROVIDER_COLUMNS[provider]
        owner = db.query(Team).filter(getattr(Team, column) == value, Team.id != team_id).first()
        if owner:
            raise ValueError(f"{column}={value} is already assigned to {owner.name} (id {owner.id})")
        setattr(team, column, value)

    db.commit()
    db.refresh(team)
    logger.info("Mappatura esplicita team %s: fpl_id=%s football_data_id=%s", team_id, team.fpl_id, team.football_data_id)
    return team
