import json
from datetime import date
from typing import Optional

from match_tracker.config import EXPORT_FILENAME_PREFIX
from match_tracker.exceptions import InvalidStructureError
from match_tracker.integrity import ensure_data_integrity, now_ms
from match_tracker.models import MatchState


def dumps_state(state: MatchState, now: Optional[int] = None) -> str:
    """
    Serialize for saving or export, stamping lastUpdated.
    """
    data = state.to_dict()
    data["lastUpdated"] = now_ms() if now is None else now
    return json.dumps(data, indent=4)


def loads_state(text: str) -> MatchState:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise InvalidStructureError(f"Invalid JSON: {e}")

    return ensure_data_integrity(data)


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{EXPORT_FILENAME_PREFIX}-{day.isoformat()}.json"
