import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from match_tracker import engine
from match_tracker.config import MAX_NAME_LENGTH
from match_tracker.exceptions import MatchValidationError
from match_tracker.integrity import create_initial_state, ensure_data_integrity
from match_tracker.models import MatchState, RankingResult
from match_tracker.ranking import compute_rankings
from match_tracker.serialization import dumps_state, loads_state

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    accepted: bool
    state: MatchState
    error: Optional[MatchValidationError] = None

    @property
    def reason(self) -> Optional[str]:
        return str(self.error) if self.error else None


class MatchSession:
    """
    Single local match session.

    Responsibilities:
    - Hold the current MatchState
    - Apply one edit at a time (atomic: rejected edits change nothing)
    - Turn engine rejections into EditResult outcomes
    - Import / export state as JSON
    """

    def __init__(self, state: Optional[MatchState] = None):
        self._state = deepcopy(state) if state is not None else create_initial_state()

    @property
    def state(self) -> MatchState:
        return deepcopy(self._state)

    # ---------------------------------------------------------
    # Edits
    # ---------------------------------------------------------

    def rename(self, player_index: int, raw_name: str) -> EditResult:
        name = raw_name[:MAX_NAME_LENGTH]
        return self._apply(
            f"rename player {player_index}",
            lambda s: engine.update_name(s, player_index, name),
        )

    def set_score(self, set_index: int, field: str, raw_value: Any) -> EditResult:
        return self._apply(
            f"set {field} of set {set_index}",
            lambda s: engine.update_score(s, set_index, field, raw_value),
        )

    def set_team(self, player_index: int, set_index: int, is_checked: bool) -> EditResult:
        return self._apply(
            f"team player {player_index} set {set_index} -> {is_checked}",
            lambda s: engine.update_team(s, player_index, set_index, is_checked),
        )

    def _apply(self, label: str, edit: Callable[[MatchState], MatchState]) -> EditResult:
        try:
            new_state = edit(self._state)
        except MatchValidationError as e:
            logger.warning("Rejected %s: %s", label, e)
            return EditResult(accepted=False, state=self.state, error=e)

        # Commit only after the edit fully succeeded
        self._state = new_state
        logger.debug("Applied %s", label)
        return EditResult(accepted=True, state=self.state)

    # ---------------------------------------------------------
    # Import / export
    # ---------------------------------------------------------

    def import_state(self, data: Union[str, Mapping[str, Any]]) -> EditResult:
        """
        Replace the session state with imported data.
        Atomic: invalid data leaves the current state in place.
        """
        try:
            if isinstance(data, str):
                imported = loads_state(data)
            else:
                imported = ensure_data_integrity(data)
        except MatchValidationError as e:
            logger.warning("Import failed: %s", e)
            return EditResult(accepted=False, state=self.state, error=e)

        self._state = imported
        logger.info("Imported match state (version %s)", imported.version)
        return EditResult(accepted=True, state=self.state)

    def export_state(self) -> str:
        return dumps_state(self._state)

    # ---------------------------------------------------------
    # Results
    # ---------------------------------------------------------

    def rankings(self) -> RankingResult:
        return compute_rankings(self._state)

    def reset(self):
        self._state = create_initial_state()
        logger.info("Match reset")
