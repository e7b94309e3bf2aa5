from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SetScore:
    won: int = 0
    lost: int = 0
    sum: int = 0
    team: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "won": self.won,
            "lost": self.lost,
            "sum": self.sum,
            "team": self.team,
        }


@dataclass
class Player:
    name: str = ""
    sets: List[SetScore] = field(default_factory=list)
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "sets": [s.to_dict() for s in self.sets],
            "total": self.total,
        }


@dataclass
class MatchState:
    """
    Whole match: four players, per-set team history, format version and
    last-modified time (epoch milliseconds).

    team_history[set_index] is [], [i] while a team is half assigned,
    or [i, j] (ascending) once complete.
    """
    players: List[Player]
    team_history: List[List[int]]
    version: str
    last_updated: int

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-ready dict using the camelCase wire keys.
        """
        return {
            "players": [p.to_dict() for p in self.players],
            "teamHistory": [list(entry) for entry in self.team_history],
            "version": self.version,
            "lastUpdated": self.last_updated,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MatchState":
        """
        Inverse of to_dict. Validates and migrates through
        ensure_data_integrity; raises InvalidStructureError.
        """
        from match_tracker.integrity import ensure_data_integrity

        return ensure_data_integrity(d)


# --- RANKING RESULT TYPES ---

@dataclass(frozen=True)
class RankedPlayer:
    index: int
    name: str
    total: int


@dataclass(frozen=True)
class Movement:
    move_up: RankedPlayer
    stay: List[RankedPlayer]
    move_down: RankedPlayer


@dataclass(frozen=True)
class RankingResult:
    ready: bool
    ordered: List[RankedPlayer] = field(default_factory=list)
    winner_tie: List[RankedPlayer] = field(default_factory=list)
    loser_tie: List[RankedPlayer] = field(default_factory=list)
    movement: Optional[Movement] = None

    @property
    def has_winner_tie(self) -> bool:
        return bool(self.winner_tie)

    @property
    def has_loser_tie(self) -> bool:
        return bool(self.loser_tie)
