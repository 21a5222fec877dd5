import math
from typing import List, Optional, Sequence

from ..models.db_models import HistoryEntry, MarkStatus

RECENT_HISTORY_LIMIT = 5


def attendance_percentage(attended_classes: int, total_classes: int) -> int:
    """Attended share of all classes as a whole percentage; 0 when nothing was held yet."""
    if not total_classes:
        return 0
    # half-up: 12.5 -> 13
    return math.floor(attended_classes / total_classes * 100 + 0.5)


def recent_history(history: Sequence[HistoryEntry], limit: int = RECENT_HISTORY_LIMIT) -> List[HistoryEntry]:
    """Most recent entries first."""
    return list(reversed(history))[:limit]


def last_undoable_mark(history: Sequence[HistoryEntry]) -> Optional[MarkStatus]:
    """
    Returns the status of the latest Present/Absent mark that has not been
    undone yet, or None when there is nothing left to undo.

    Every Undo entry cancels the closest earlier mark still standing, so
    repeated Undo calls walk back through the marks one by one.
    """
    standing: List[MarkStatus] = []
    for entry in history:
        if entry.status == MarkStatus.UNDO:
            if standing:
                standing.pop()
        else:
            standing.append(entry.status)
    return standing[-1] if standing else None
