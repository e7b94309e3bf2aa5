"""
Score/team engine.

Every operation takes the current MatchState and returns a new one.
The caller's state is deep-copied before any change, so a rejection
(raised before returning) can never leave it half-updated.
"""

from copy import deepcopy
from dataclasses import replace
from typing import Any, List

from match_tracker.config import (
    NUM_PLAYERS,
    NUM_SETS,
    MAX_SCORE_DIGITS,
    REFERENCE_PLAYER,
    SCORE_FIELDS,
    TEAM_SIZE,
)
from match_tracker.exceptions import (
    DuplicateTeamCombinationError,
    TeamLimitExceededError,
)
from match_tracker.models import MatchState, Player

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)


# =========================================================
# PUBLIC API
# =========================================================

def update_name(state: MatchState, player_index: int, raw_name: str) -> MatchState:
    _validate_player_index(player_index)

    new_state = deepcopy(state)
    new_state.players[player_index].name = sanitize_name(raw_name)
    return new_state


def update_score(state: MatchState, set_index: int, field: str, raw_value: Any) -> MatchState:
    """
    Enter the reference player's won/lost for one set and derive
    everyone else's score from it.
    """
    _validate_set_index(set_index)
    if field not in SCORE_FIELDS:
        raise ValueError(f"Invalid score field: {field}")

    players = deepcopy(state.players)

    score = players[REFERENCE_PLAYER].sets[set_index]
    setattr(score, field, parse_score(raw_value))
    score.sum = score.won - score.lost

    players = propagate_team_scores(players, set_index)

    return replace(state, players=recalculate_totals(players), team_history=deepcopy(state.team_history))


def update_team(state: MatchState, player_index: int, set_index: int, is_checked: bool) -> MatchState:
    """
    Check or uncheck a player's team flag for one set.

    Raises TeamLimitExceededError when two other players are already on
    the team, DuplicateTeamCombinationError when the resulting pair was
    already used in another set.
    """
    _validate_player_index(player_index)
    _validate_set_index(set_index)

    players = deepcopy(state.players)
    history = deepcopy(state.team_history)

    if not is_checked:
        players[player_index].sets[set_index].team = False
        history[set_index] = [i for i in history[set_index] if i != player_index]
    else:
        others = [
            idx for idx, p in enumerate(players)
            if idx != player_index and p.sets[set_index].team
        ]

        if len(others) >= TEAM_SIZE:
            raise TeamLimitExceededError(
                f"Set {set_index + 1} already has {TEAM_SIZE} team members"
            )

        if len(others) == 1:
            pair = sorted([player_index, others[0]])
            _check_pair_unused(history, set_index, pair)
            history[set_index] = pair
        else:
            history[set_index] = [player_index]

        players[player_index].sets[set_index].team = True

    players = propagate_team_scores(players, set_index)

    return replace(state, players=recalculate_totals(players), team_history=history)


# =========================================================
# DERIVATION
# =========================================================

def propagate_team_scores(players: List[Player], set_index: int) -> List[Player]:
    """
    Derive the other players' set score from the reference player.

    With a complete team (exactly two flags set) teammates of the
    reference player copy its score and opponents get it reversed.
    Otherwise the derived scores are reset to zero.
    """
    new_players = deepcopy(players)

    team_count = sum(1 for p in new_players if p.sets[set_index].team)
    reference = new_players[REFERENCE_PLAYER].sets[set_index]

    for idx, player in enumerate(new_players):
        if idx == REFERENCE_PLAYER:
            continue

        score = player.sets[set_index]

        if team_count != TEAM_SIZE:
            score.won = 0
            score.lost = 0
        elif score.team == reference.team:
            score.won = reference.won
            score.lost = reference.lost
        else:
            score.won = reference.lost
            score.lost = reference.won

        score.sum = score.won - score.lost

    return new_players


def recalculate_totals(players: List[Player]) -> List[Player]:
    return [
        replace(p, sets=deepcopy(p.sets), total=sum(s.sum for s in p.sets))
        for p in players
    ]


# =========================================================
# INPUT COERCION
# =========================================================

def sanitize_name(raw_name: str) -> str:
    name = raw_name
    for char, entity in _HTML_ESCAPES:
        name = name.replace(char, entity)
    return name.strip()


def parse_score(raw_value: Any) -> int:
    """
    Non-negative integer from user input; anything else counts as 0.
    """
    if isinstance(raw_value, bool):
        return 0

    if isinstance(raw_value, int):
        return raw_value if raw_value >= 0 else 0

    if isinstance(raw_value, str):
        text = raw_value.strip()
        if text.isdigit() and text.isascii() and len(text) <= MAX_SCORE_DIGITS:
            return int(text)

    return 0


# =========================================================
# VALIDATION
# =========================================================

def _validate_player_index(player_index: int):
    if not 0 <= player_index < NUM_PLAYERS:
        raise ValueError(f"Invalid player index: {player_index}")


def _validate_set_index(set_index: int):
    if not 0 <= set_index < NUM_SETS:
        raise ValueError(f"Invalid set index: {set_index}")


def _check_pair_unused(history: List[List[int]], set_index: int, pair: List[int]):
    for other_set, entry in enumerate(history):
        if other_set == set_index or len(entry) != TEAM_SIZE:
            continue

        if set(entry) == set(pair):
            raise DuplicateTeamCombinationError(
                f"Players {pair[0] + 1} and {pair[1] + 1} were already a team "
                f"in set {other_set + 1}"
            )
