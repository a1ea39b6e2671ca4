"""Progress status state machine.

COMPLETED is not absorbing: a completed activity may be re-attempted.
A transition to the same status is not in the table and is therefore illegal.
"""

from typing import Union

from progress_guard.models.progress import ProgressStatus

VALID_TRANSITIONS: dict[ProgressStatus, tuple[ProgressStatus, ...]] = {
    ProgressStatus.NOT_STARTED: (ProgressStatus.IN_PROGRESS, ProgressStatus.COMPLETED),
    ProgressStatus.IN_PROGRESS: (ProgressStatus.COMPLETED, ProgressStatus.PAUSED, ProgressStatus.NOT_STARTED),
    ProgressStatus.COMPLETED: (ProgressStatus.IN_PROGRESS,),
    ProgressStatus.PAUSED: (ProgressStatus.IN_PROGRESS, ProgressStatus.COMPLETED, ProgressStatus.NOT_STARTED),
}


def allowed_transitions(current: Union[ProgressStatus, str]) -> list[ProgressStatus]:
    """Statuses reachable from ``current``; empty for unknown statuses."""
    try:
        return list(VALID_TRANSITIONS[ProgressStatus(current)])
    except ValueError:
        return []


def is_valid_transition(current: Union[ProgressStatus, str], requested: Union[ProgressStatus, str]) -> bool:
    try:
        requested = ProgressStatus(requested)
    except ValueError:
        return False
    return requested in allowed_transitions(current)
