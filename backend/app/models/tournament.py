from enum import Enum
from typing import Any


class TournamentStatus(str, Enum):
    draft = "draft"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


def normalize_status(value: Any) -> TournamentStatus:
    """
    Map an external status value to TournamentStatus.

    Case-insensitive ("ACTIVE", " Active " and "active" are the same).
    Anything unrecognized, None included, falls back to draft.
    """
    if isinstance(value, TournamentStatus):
        return value
    key = str(value or "").strip().lower()
    try:
        return TournamentStatus(key)
    except ValueError:
        return TournamentStatus.draft
