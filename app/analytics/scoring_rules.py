"""
Scoring rules: punti fantasy per evento e per giornata.

Architettura:
  1. get_event_points: singolo evento + ruolo -> delta punti (lookup puro)
  2. appearance_points: punti presenza derivati UNA volta dai minuti giocati
  3. calculate_player_gameweek_points: somma presenza + delta di tutti gli eventi

Tabella per ruolo:
  - goal: GK/DEF 6, MID 5, FWD 4
  - assist: 3 per tutti
  - clean_sheet: GK/DEF 4, MID 1, FWD 0
  - yellow_card -1, red_card -3, penalty_miss -2, own_goal -2
  - penalty_save: solo GK 5
  - save: solo GK, 1/3 per ogni parata (1 punto ogni 3 parate)
  - bonus: valore bonus_points del payload
  - appearance 1 (minuti > 0), minutes_60 +1 (minuti >= 60)
  - goals_conceded: GK/DEF -1 ogni 2 gol subiti

Nessun moltiplicatore capitano a questo livello: lo applica il settlement.
Evento o ruolo sconosciuto -> 0, mai un errore.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any

# ---------------------------------------------------------------------------
# Costanti
# ---------------------------------------------------------------------------

POSITIONS = ("GK", "DEF", "MID", "FWD")

EVENT_TYPES = frozenset({
    "goal",
    "assist",
    "clean_sheet",
    "yellow_card",
    "red_card",
    "penalty_miss",
    "own_goal",
    "penalty_save",
    "save",
    "bonus",
    "appearance",
    "minutes_60",
    "goals_conceded",
})

# Eventi di tempo giocato: nell'aggregato contano solo i minuti
PLAYING_TIME_EVENTS = frozenset({"appearance", "minutes_60"})

SCORING_RULES: dict[str, Any] = {
    "playing": {"appearance": 1, "minutes_60_bonus": 1},
    "goal": {"GK": 6, "DEF": 6, "MID": 5, "FWD": 4},
    "assist": 3,
    "clean_sheet": {"GK": 4, "DEF": 4, "MID": 1, "FWD": 0},
    "penalties": {"yellow_card": -1, "red_card": -3, "penalty_miss": -2, "own_goal": -2},
    "goalkeeper": {"penalty_save": 5, "saves_per_point": 3},
    "goals_conceded": {"per_goals": 2, "points": -1},
}

MULTIPLIERS = {"normal": 1, "captain": 2, "vice_captain": 2, "triple_captain": 3}


def _payload_int(event_data: Mapping[str, Any] | None, *keys: str) -> int:
    """Primo valore intero trovato nel payload (chiavi alternative), 0 se assente."""
    if not event_data:
        return 0
    for key in keys:
        value = event_data.get(key)
        if value is None:
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0
    return 0


def get_event_points(
    event_type: str,
    position: str,
    event_data: Mapping[str, Any] | None = None,
) -> float:
    """Delta punti di un singolo evento per un giocatore del ruolo dato."""
    if position not in POSITIONS:
        return 0

    if event_type == "goal":
        return SCORING_RULES["goal"][position]
    if event_type == "assist":
        return SCORING_RULES["assist"]
    if event_type == "clean_sheet":
        return SCORING_RULES["clean_sheet"][position]
    if event_type in SCORING_RULES["penalties"]:
        return SCORING_RULES["penalties"][event_type]
    if event_type == "penalty_save":
        return SCORING_RULES["goalkeeper"]["penalty_save"] if position == "GK" else 0
    if event_type == "save":
        return 1 / SCORING_RULES["goalkeeper"]["saves_per_point"] if position == "GK" else 0
    if event_type == "bonus":
        return _payload_int(event_data, "bonus_points", "bonusPoints", "bonus")
    if event_type == "appearance":
        return SCORING_RULES["playing"]["appearance"]
    if event_type == "minutes_60":
        return SCORING_RULES["playing"]["minutes_60_bonus"]
    if event_type == "goals_conceded":
        if position not in ("GK", "DEF"):
            return 0
        conceded = _payload_int(event_data, "goals_conceded", "goalsConceded")
        rule = SCORING_RULES["goals_conceded"]
        return (conceded // rule["per_goals"]) * rule["points"]
    return 0


def appearance_points(minutes_played: int | None) -> int:
    """0 minuti -> 0, 1-59 -> 1, 60+ -> 2."""
    minutes = minutes_played or 0
    if minutes <= 0:
        return 0
    points = SCORING_RULES["playing"]["appearance"]
    if minutes >= 60:
        points += SCORING_RULES["playing"]["minutes_60_bonus"]
    return points


def _event_field(event: Any, name: str) -> Any:
    if isinstance(event, Mapping):
        return event.get(name)
    return getattr(event, name, None)


def calculate_player_gameweek_points(
    player_events: Iterable[Any],
    position: str,
    minutes_played: int = 0,
) -> float:
    """
    Totale punti giornata di un giocatore, senza moltiplicatori.

    Accetta eventi come dict o righe ORM (event_type + data).
    Le parate sono sommate e arrotondate per difetto ogni 3.
    """
    total: float = appearance_points(minutes_played)
    save_ticks = 0

    for event in player_events:
        event_type = _event_field(event, "event_type")
        if event_type in PLAYING_TIME_EVENTS:
            continue
        if event_type == "save":
            if position == "GK":
                save_ticks += 1
            continue
        event_data = _event_field(event, "data")
        if event_data is None and isinstance(event, Mapping):
            event_data = event
        total += get_event_points(event_type, position, event_data)

    total += save_ticks // SCORING_RULES["goalkeeper"]["saves_per_point"]
    return total


def minutes_from_events(player_events: Iterable[Any]) -> int:
    """Minuti giocati registrati sugli eventi appearance (massimo), 0 se assenti."""
    minutes = 0
    for event in player_events:
        if _event_field(event, "event_type") != "appearance":
            continue
        minutes = max(minutes, _payload_int(_event_field(event, "data"), "minutes"))
    return minutes


def round_points(value: float) -> float:
    """Arrotonda a 2 decimali evitando -0.0."""
    rounded = round(value, 2)
    return 0.0 if math.isclose(rounded, 0.0) else rounded
