"""
Validazione formazioni (modalità 11 giocatori, nessuna panchina).

Errori bloccanti: numero giocatori, titolari, budget, limiti per ruolo,
massimo 3 giocatori per squadra reale, capitano/vice, duplicati.
Warning: budget inutilizzato, capitano/vice mancanti, modulo insolito.
"""

from collections import Counter
from dataclasses import dataclass, field

DEFAULT_BUDGET = 70.0

POSITION_LIMITS: dict[str, tuple[int, int]] = {
    "GK": (1, 1),
    "DEF": (3, 5),
    "MID": (2, 5),
    "FWD": (1, 3),
}

COMMON_FORMATIONS = frozenset({"3-4-3", "3-5-2", "4-3-3", "4-4-2", "4-5-1", "5-3-2", "5-4-1"})


@dataclass
class PlayerSelection:
    id: int
    position: str
    team_id: int | None
    price: float
    is_starter: bool = True
    is_captain: bool = False
    is_vice_captain: bool = False


@dataclass
class LineupConstraints:
    max_budget: float = DEFAULT_BUDGET
    max_players_per_team: int = 3
    total_players: int = 11
    starting_xi: int = 11
    position_limits: dict[str, tuple[int, int]] = field(default_factory=lambda: dict(POSITION_LIMITS))


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": self.errors, "warnings": self.warnings}


def calculate_lineup_cost(players: list[PlayerSelection]) -> float:
    return round(sum(p.price for p in players), 1)


def formation_string(starters: list[PlayerSelection]) -> str:
    """Modulo DEF-MID-FWD dei titolari (es. 4-4-2)."""
    counts = Counter(p.position for p in starters)
    return f"{counts.get('DEF', 0)}-{counts.get('MID', 0)}-{counts.get('FWD', 0)}"


def _check_positions(counts: Counter, limits: dict[str, tuple[int, int]], label: str) -> list[str]:
    errors = []
    for position, (low, high) in limits.items():
        count = counts.get(position, 0)
        if count < low:
            errors.append(f"{label} needs at least {low} {position}. Currently have {count}.")
        if count > high:
            errors.append(f"{label} can have at most {high} {position}. Currently have {count}.")
    return errors


def validate_lineup(
    players: list[PlayerSelection],
    constraints: LineupConstraints | None = None,
) -> ValidationResult:
    constraints = constraints or LineupConstraints()
    result = ValidationResult()

    if len(players) != constraints.total_players:
        result.errors.append(
            f"Must select exactly {constraints.total_players} players. Currently have {len(players)}."
        )

    starters = [p for p in players if p.is_starter]
    if len(starters) != constraints.starting_xi:
        result.errors.append(
            f"Must have exactly {constraints.starting_xi} starting players. Currently have {len(starters)}."
        )

    total_cost = calculate_lineup_cost(players)
    if total_cost > constraints.max_budget:
        result.errors.append(
            f"Total cost (£{total_cost:.1f}m) exceeds budget limit of £{constraints.max_budget}m."
        )

    result.errors.extend(
        _check_positions(Counter(p.position for p in players), constraints.position_limits, "Squad")
    )
    result.errors.extend(
        _check_positions(Counter(p.position for p in starters), constraints.position_limits, "Starting XI")
    )

    team_counts = Counter(p.team_id for p in players)
    for team_id, count in team_counts.items():
        if count > constraints.max_players_per_team:
            result.errors.append(
                f"Cannot have more than {constraints.max_players_per_team} players from the same team. "
                f"Team {team_id} has {count} players."
            )

    captains = [p for p in players if p.is_captain]
    vice_captains = [p for p in players if p.is_vice_captain]
    if len(captains) > 1:
        result.errors.append("Can only have one captain.")
    if len(vice_captains) > 1:
        result.errors.append("Can only have one vice-captain.")
    if len(captains) == 1 and not captains[0].is_starter:
        result.errors.append("Captain must be in starting XI.")
    if len(vice_captains) == 1 and not vice_captains[0].is_starter:
        result.errors.append("Vice-captain must be in starting XI.")
    if len(captains) == 1 and len(vice_captains) == 1 and captains[0].id == vice_captains[0].id:
        result.errors.append("Captain and vice-captain must be different players.")

    ids = [p.id for p in players]
    if len(ids) != len(set(ids)):
        result.errors.append("Cannot select the same player multiple times.")

    if total_cost < constraints.max_budget - 5.0:
        result.warnings.append(
            f"You have £{constraints.max_budget - total_cost:.1f}m remaining. Consider upgrading players."
        )
    if not captains:
        result.warnings.append("You should select a captain for double points.")
    if not vice_captains:
        result.warnings.append("You should select a vice-captain as backup.")

    formation = formation_string(starters)
    if result.is_valid and formation not in COMMON_FORMATIONS:
        result.warnings.append(f"Formation {formation} is unusual. Consider a more balanced setup.")

    return result
