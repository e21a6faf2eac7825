"""
Riconciliazione identificativi esterni -> chiavi interne.

Squadre: prima la mappatura esplicita (teams.fpl_id / teams.football_data_id),
poi l'euristica per nome in 4 regole, applicate in ordine:
  1. nome completo uguale (case-insensitive)
  2. nome interno contiene la prima parola del nome esterno
  3. nome esterno contiene il nome interno
  4. short code (TLA) uguale
Vince il primo match nell'ordine delle squadre passate: nessun punteggio di
confidenza. Quando l'euristica trova una squadra, l'id provider viene salvato
sulla riga così i sync successivi usano la mappatura esplicita.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.models import Player, Team

logger = logging.getLogger(__name__)

PROVIDER_COLUMNS = {
    "fpl": "fpl_id",
    "football_data": "football_data_id",
}

RULE_EXPLICIT = "explicit_id"
RULE_EXACT_NAME = "exact_name"
RULE_FIRST_WORD = "first_word"
RULE_CONTAINS_INTERNAL = "contains_internal"
RULE_SHORT_CODE = "short_code"


@dataclass
class TeamMatch:
    team: Team
    rule: str


def match_team_by_name(
    external_name: str | None,
    external_code: str | None,
    teams: list[Team],
) -> TeamMatch | None:
    """Euristica a 4 regole. Ogni regola scorre tutte le squadre prima della successiva."""
    name = (external_name or "").strip().lower()
    code = (external_code or "").strip().lower()

    if name:
        for team in teams:
            if (team.name or "").lower() == name:
                return TeamMatch(team, RULE_EXACT_NAME)

        first_word = name.split()[0]
        for team in teams:
            if first_word in (team.name or "").lower():
                return TeamMatch(team, RULE_FIRST_WORD)

        for team in teams:
            internal = (team.name or "").lower()
            if internal and internal in name:
                return TeamMatch(team, RULE_CONTAINS_INTERNAL)

    if code:
        for team in teams:
            if (team.short_name or "").lower() == code:
                return TeamMatch(team, RULE_SHORT_CODE)

    return None


class TeamResolver:
    """
    Risolve gli id squadra di un provider (fpl | football_data) in teams.id.
    Carica le squadre una volta; pensato per vivere quanto una richiesta.
    """

    def __init__(self, db: Session, provider: str, persist: bool = True):
        if provider not in PROVIDER_COLUMNS:
            raise ValueError(f"Unknown provider: {provider}")
        self._db = db
        self._column = PROVIDER_COLUMNS[provider]
        self._persist = persist
        self._teams: list[Team] = db.query(Team).order_by(Team.id).all()

    @property
    def teams(self) -> list[Team]:
        return self._teams

    def match(
        self,
        external_id: int | None,
        name: str | None,
        code: str | None = None,
    ) -> TeamMatch | None:
        if external_id is not None:
            for team in self._teams:
                if getattr(team, self._column) == external_id:
                    return TeamMatch(team, RULE_EXPLICIT)

        # Squadre già mappate su un altro id non sono candidate per l'euristica
        candidates = [t for t in self._teams if getattr(t, self._column) is None] if external_id is not None else self._teams
        found = match_team_by_name(name, code, candidates)
        if found is None:
            logger.warning("Nessuna squadra interna per %s=%s (%s / %s)", self._column, external_id, name, code)
            return None

        if self._persist and external_id is not None:
            setattr(found.team, self._column, external_id)
            self._db.flush()
            logger.info(
                "Mappata %s=%s -> team %s (%s) via %s",
                self._column, external_id, found.team.id, found.team.name, found.rule,
            )
        return found

    def resolve(self, external_id: int | None, name: str | None, code: str | None = None) -> int | None:
        found = self.match(external_id, name, code)
        return found.team.id if found else None


def match_player(
    db: Session,
    fpl_id: int | None,
    full_name: str,
    position: str,
    web_name: str | None = None,
) -> Player | None:
    """Giocatore interno per fpl_id, altrimenti per nome (completo o web_name) nello stesso ruolo."""
    if fpl_id is not None:
        player = db.query(Player).filter(Player.fpl_id == fpl_id).first()
        if player:
            return player

    names = {full_name.lower()}
    if web_name:
        names.add(web_name.lower())
    candidates = (
        db.query(Player)
        .filter(Player.position == position, Player.fpl_id.is_(None))
        .order_by(Player.id)
        .all()
    )
    for player in candidates:
        if (player.name or "").lower() in names or (player.web_name or "").lower() in names:
            return player
    return None
