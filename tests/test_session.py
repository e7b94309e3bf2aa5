import json
import logging
import random

import pytest

from match_tracker.config import NUM_PLAYERS, NUM_SETS
from match_tracker.exceptions import (
    DuplicateTeamCombinationError,
    InvalidStructureError,
    TeamLimitExceededError,
)
from match_tracker.session import MatchSession


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def named_session():
    session = MatchSession()
    for idx, name in enumerate(["A", "B", "C", "D"]):
        session.rename(idx, name)
    return session


def dump(state):
    return json.dumps(state.to_dict(), sort_keys=True)


def assert_invariants(state):
    for p in state.players:
        for s in p.sets:
            assert s.sum == s.won - s.lost
        assert p.total == sum(s.sum for s in p.sets)

    pairs = [frozenset(e) for e in state.team_history if len(e) == 2]
    assert len(pairs) == len(set(pairs))


# ---------------------------------------------------------
# Edits
# ---------------------------------------------------------

def test_scenario_team_and_score():
    session = named_session()
    session.set_team(0, 0, True)
    session.set_team(1, 0, True)
    session.set_score(0, "won", "6")
    result = session.set_score(0, "lost", "4")

    assert result.accepted is True
    sets = [p.sets[0] for p in result.state.players]
    assert [(s.won, s.lost, s.sum) for s in sets] == [
        (6, 4, 2),
        (6, 4, 2),
        (4, 6, -2),
        (4, 6, -2),
    ]


def test_third_member_rejected():
    session = named_session()
    session.set_team(0, 0, True)
    session.set_team(1, 0, True)
    before = dump(session.state)

    result = session.set_team(2, 0, True)

    assert result.accepted is False
    assert isinstance(result.error, TeamLimitExceededError)
    assert result.reason
    assert dump(result.state) == before
    assert dump(session.state) == before


def test_duplicate_pair_rejected():
    session = named_session()
    session.set_team(1, 0, True)
    session.set_team(2, 0, True)
    session.set_team(2, 1, True)

    result = session.set_team(1, 1, True)

    assert result.accepted is False
    assert isinstance(result.error, DuplicateTeamCombinationError)
    assert session.state.team_history == [[1, 2], [2], []]


def test_rejection_is_logged(caplog):
    session = named_session()
    for idx in (0, 1):
        session.set_team(idx, 0, True)

    with caplog.at_level(logging.WARNING, logger="match_tracker.session"):
        session.set_team(3, 0, True)

    assert "Rejected" in caplog.text


def test_rename_truncates_input():
    session = MatchSession()

    result = session.rename(0, "x" * 30)

    assert result.state.players[0].name == "x" * 20


def test_state_is_a_copy():
    session = named_session()

    state = session.state
    state.players[0].name = "Changed"

    assert session.state.players[0].name == "A"


def test_invalid_index_raises():
    session = MatchSession()

    with pytest.raises(ValueError):
        session.set_team(4, 0, True)


def test_random_edits_keep_invariants():
    rng = random.Random(7)
    session = named_session()

    for _ in range(300):
        action = rng.choice(["team", "score"])
        if action == "team":
            session.set_team(
                rng.randrange(NUM_PLAYERS),
                rng.randrange(NUM_SETS),
                rng.choice([True, False]),
            )
        else:
            session.set_score(
                rng.randrange(NUM_SETS),
                rng.choice(["won", "lost"]),
                rng.choice([str(rng.randint(0, 9)), "", "-2", "x"]),
            )

        assert_invariants(session.state)


# ---------------------------------------------------------
# Import / export / reset
# ---------------------------------------------------------

def test_import_three_players_keeps_state():
    session = named_session()
    before = dump(session.state)

    data = json.loads(session.export_state())
    data["players"] = data["players"][:3]

    result = session.import_state(data)

    assert result.accepted is False
    assert isinstance(result.error, InvalidStructureError)
    assert dump(session.state) == before


def test_import_bad_json_keeps_state():
    session = named_session()

    result = session.import_state("{oops")

    assert result.accepted is False
    assert session.state.players[0].name == "A"


def test_export_import_round_trip():
    session = named_session()
    session.set_team(0, 2, True)
    session.set_team(3, 2, True)
    session.set_score(2, "won", 5)

    other = MatchSession()
    result = other.import_state(session.export_state())

    assert result.accepted is True
    assert other.state.players == session.state.players
    assert other.state.team_history == [[], [], [0, 3]]


def test_import_old_format_rebuilds_history():
    session = named_session()
    session.set_team(1, 0, True)
    session.set_team(3, 0, True)

    data = json.loads(session.export_state())
    del data["teamHistory"]
    del data["version"]

    other = MatchSession()
    other.import_state(data)

    assert other.state.team_history == [[1, 3], [], []]


def test_reset():
    session = named_session()
    session.set_score(0, "won", 3)

    session.reset()

    state = session.state
    assert all(p.name == "" for p in state.players)
    assert all(p.total == 0 for p in state.players)
    assert state.team_history == [[], [], []]


def test_rankings_from_session():
    session = named_session()
    for set_index, pair in enumerate([(0, 1), (0, 2), (0, 3)]):
        for idx in pair:
            session.set_team(idx, set_index, True)
    session.set_score(0, "won", 2)

    result = session.rankings()

    assert result.ready is True
    assert [r.name for r in result.winner_tie] == ["A", "B"]
    assert result.movement is None


def test_import_infinite_score_keeps_state():
    session = named_session()
    before = dump(session.state)

    text = session.export_state().replace('"won": 0', '"won": Infinity', 1)

    result = session.import_state(text)

    assert result.accepted is False
    assert isinstance(result.error, InvalidStructureError)
    assert dump(session.state) == before


def test_oversized_score_input_accepted_as_zero():
    session = named_session()

    result = session.set_score(0, "won", "9" * 5000)

    assert result.accepted is True
    assert result.state.players[0].sets[0].won == 0
