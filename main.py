import argparse
import logging
import sys

from match_tracker.config import NUM_SETS
from match_tracker.models import MatchState
from match_tracker.session import MatchSession

logger = logging.getLogger("match_tracker")


def play_demo(session: MatchSession):
    for idx, name in enumerate(["Ana", "Ben", "Carla", "Dani"]):
        session.rename(idx, name)

    # (team pair, won, lost) per set, entered for the reference player
    sets = [
        ((0, 1), 6, 4),
        ((0, 2), 6, 3),
        ((0, 3), 2, 6),
    ]

    for set_index, (pair, won, lost) in enumerate(sets):
        for player_index in pair:
            session.set_team(player_index, set_index, True)
        session.set_score(set_index, "won", won)
        session.set_score(set_index, "lost", lost)

    print("Trying to add a third team member...")
    result = session.set_team(1, 2, True)
    print("Rejected:", result.reason)


def print_state(state: MatchState):
    for set_index in range(NUM_SETS):
        print(f"\nSet {set_index + 1}")
        for p in state.players:
            s = p.sets[set_index]
            team = "x" if s.team else " "
            print(f"  [{team}] {p.name or '-':<20} {s.won:>3} {s.lost:>3} {s.sum:>4}")

    print("\nTotals")
    for p in state.players:
        print(f"  {p.name or '-':<20} {p.total:>4}")


def print_rankings(session: MatchSession):
    result = session.rankings()

    if not result.ready:
        print("\nResults not ready: names or teams incomplete")
        return

    if result.winner_tie:
        print("\nTie for first:", ", ".join(r.name for r in result.winner_tie))
    if result.loser_tie:
        print("\nTie for last:", ", ".join(r.name for r in result.loser_tie))

    if result.movement:
        m = result.movement
        print(f"\n{m.move_up.name} moves up")
        for r in m.stay:
            print(f"{r.name} stays")
        print(f"{m.move_down.name} moves down")


def main():
    parser = argparse.ArgumentParser(description="Paddle match results")
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="read an exported match (JSON) from stdin instead of playing the demo",
    )
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    session = MatchSession()

    if args.stdin:
        result = session.import_state(sys.stdin.read())
        if not result.accepted:
            logger.error("Could not import match: %s", result.reason)
            sys.exit(1)
    else:
        play_demo(session)

    print_state(session.state)
    print_rankings(session)


if __name__ == "__main__":
    main()
