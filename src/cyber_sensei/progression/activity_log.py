"""Bounded, newest-first activity log."""

from cyber_sensei.models.progress import ACTIVITY_LOG_LIMIT, ActivityLogEntry, ProgressState


def record_activity(
    state: ProgressState,
    entry: ActivityLogEntry,
    limit: int = ACTIVITY_LOG_LIMIT,
) -> ProgressState:
    """Return a copy of ``state`` with ``entry`` prepended.

    The oldest entries beyond ``limit`` are dropped. Existing entries are
    shared with the input, never modified.
    """
    return state.model_copy(
        update={"activity_log": [entry, *state.activity_log][:limit]},
    )
