import time
from typing import Any, List, Mapping

from match_tracker.config import APP_VERSION, NUM_PLAYERS, NUM_SETS, TEAM_SIZE
from match_tracker.exceptions import InvalidStructureError
from match_tracker.models import MatchState, Player, SetScore


def now_ms() -> int:
    return int(time.time() * 1000)


def create_initial_state() -> MatchState:
    """
    Fresh match: empty names, zeroed sets, no team assignments.
    """
    return MatchState(
        players=[
            Player(name="", sets=[SetScore() for _ in range(NUM_SETS)], total=0)
            for _ in range(NUM_PLAYERS)
        ],
        team_history=[[] for _ in range(NUM_SETS)],
        version=APP_VERSION,
        last_updated=now_ms(),
    )


def ensure_data_integrity(candidate: Any) -> MatchState:
    """
    Validate a loosely typed state (stored blob or imported file) and
    upgrade it to a complete MatchState.

    - version / lastUpdated filled in when missing
    - sum and total recomputed from won / lost
    - teamHistory rebuilt from team flags when absent (older format)

    Raises InvalidStructureError on anything that cannot be repaired.
    The candidate itself is never mutated.
    """
    if not isinstance(candidate, Mapping):
        raise InvalidStructureError("Match data must be an object")

    raw_players = candidate.get("players")
    if not isinstance(raw_players, list):
        raise InvalidStructureError("Missing players list")

    if len(raw_players) != NUM_PLAYERS:
        raise InvalidStructureError(
            f"Expected {NUM_PLAYERS} players, got {len(raw_players)}"
        )

    players = [_load_player(p, idx) for idx, p in enumerate(raw_players)]

    raw_history = candidate.get("teamHistory")
    if raw_history is None:
        team_history = _rebuild_team_history(players)
    else:
        team_history = _load_team_history(raw_history)

    version = candidate.get("version") or APP_VERSION
    last_updated = candidate.get("lastUpdated")
    if last_updated is None:
        last_updated = now_ms()

    return MatchState(
        players=players,
        team_history=team_history,
        version=str(version),
        last_updated=_to_int(last_updated, "lastUpdated"),
    )


# =========================================================
# PLAYERS
# =========================================================

def _load_player(raw: Any, idx: int) -> Player:
    if not isinstance(raw, Mapping):
        raise InvalidStructureError(f"Player {idx} must be an object")

    name = raw.get("name", "")
    if name is None:
        name = ""
    if not isinstance(name, str):
        raise InvalidStructureError(f"Player {idx} name must be a string")

    raw_sets = raw.get("sets")
    if not isinstance(raw_sets, list) or len(raw_sets) != NUM_SETS:
        raise InvalidStructureError(
            f"Player {idx} must have exactly {NUM_SETS} sets"
        )

    sets = [_load_set(s, idx, set_idx) for set_idx, s in enumerate(raw_sets)]

    return Player(name=name, sets=sets, total=sum(s.sum for s in sets))


def _load_set(raw: Any, idx: int, set_idx: int) -> SetScore:
    where = f"player {idx} set {set_idx}"

    if not isinstance(raw, Mapping):
        raise InvalidStructureError(f"Score for {where} must be an object")

    won = _to_count(raw.get("won", 0), f"won of {where}")
    lost = _to_count(raw.get("lost", 0), f"lost of {where}")

    team = raw.get("team", False)
    if not isinstance(team, bool):
        raise InvalidStructureError(f"Team flag of {where} must be true or false")

    return SetScore(won=won, lost=lost, sum=won - lost, team=team)


def _to_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidStructureError(f"Invalid {what}: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidStructureError(f"Invalid {what}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidStructureError(f"Invalid {what}: {value!r}")


def _to_count(value: Any, what: str) -> int:
    number = _to_int(value, what)
    if number < 0:
        raise InvalidStructureError(f"Negative {what}: {number}")
    return number


# =========================================================
# TEAM HISTORY
# =========================================================

def _rebuild_team_history(players: List[Player]) -> List[List[int]]:
    history: List[List[int]] = []

    for set_idx in range(NUM_SETS):
        members = [
            idx for idx, p in enumerate(players) if p.sets[set_idx].team
        ]
        history.append(sorted(members) if len(members) == TEAM_SIZE else [])

    return history


def _load_team_history(raw: Any) -> List[List[int]]:
    if not isinstance(raw, list) or len(raw) != NUM_SETS:
        raise InvalidStructureError(
            f"teamHistory must have exactly {NUM_SETS} entries"
        )

    history: List[List[int]] = []
    for set_idx, entry in enumerate(raw):
        if not isinstance(entry, list) or len(entry) > TEAM_SIZE:
            raise InvalidStructureError(f"Invalid teamHistory entry for set {set_idx}")

        indices = [_player_index(v, set_idx) for v in entry]
        if len(set(indices)) != len(indices):
            raise InvalidStructureError(f"Repeated player in teamHistory set {set_idx}")
        history.append(sorted(indices))

    return history


def _player_index(value: Any, set_idx: int) -> int:
    if (
        isinstance(value, bool)
        or not isinstance(value, int)
        or not 0 <= value < NUM_PLAYERS
    ):
        raise InvalidStructureError(
            f"Invalid player index {value!r} in teamHistory set {set_idx}"
        )
    return value
