from typing import List

from match_tracker.config import NUM_SETS, TEAM_SIZE
from match_tracker.models import MatchState, Movement, RankedPlayer, RankingResult


def teams_valid(state: MatchState) -> bool:
    for set_index in range(NUM_SETS):
        team_count = sum(1 for p in state.players if p.sets[set_index].team)
        if team_count != TEAM_SIZE:
            return False
    return True


def names_complete(state: MatchState) -> bool:
    return all(p.name for p in state.players)


def compute_rankings(state: MatchState) -> RankingResult:
    """
    Rank players by total and report ties at the top and bottom.

    Only computed once every player has a name and every set has a
    complete team; otherwise the result is not ready.

    Equal totals keep original player order. Movement (up / stay /
    down) is only produced when neither end of the ranking is tied.
    """
    if not names_complete(state) or not teams_valid(state):
        return RankingResult(ready=False)

    ordered = sorted(
        (
            RankedPlayer(index=idx, name=p.name, total=p.total)
            for idx, p in enumerate(state.players)
        ),
        key=lambda r: -r.total,
    )

    winner_tie: List[RankedPlayer] = []
    if ordered[0].total == ordered[1].total:
        winner_tie = [r for r in ordered if r.total == ordered[0].total]

    loser_tie: List[RankedPlayer] = []
    if ordered[2].total == ordered[3].total:
        loser_tie = [r for r in ordered if r.total == ordered[-1].total]

    movement = None
    if not winner_tie and not loser_tie:
        movement = Movement(
            move_up=ordered[0],
            stay=[ordered[1], ordered[2]],
            move_down=ordered[3],
        )

    return RankingResult(
        ready=True,
        ordered=ordered,
        winner_tie=winner_tie,
        loser_tie=loser_tie,
        movement=movement,
    )
