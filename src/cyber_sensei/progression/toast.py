"""Achievement toast: a read-only observer of newly earned achievements."""

from collections.abc import Callable
from datetime import datetime, timedelta

import structlog

from cyber_sensei.models.achievement import ACHIEVEMENTS_BY_ID, Achievement
from cyber_sensei.models.progress import ProgressState
from cyber_sensei.progression.store import ProgressStore

logger = structlog.get_logger()

DEFAULT_TOAST_SECONDS = 5.0


class AchievementToast:
    """Shows the most recently unlocked achievement for a fixed duration.

    Watches the store's earned set. When it grows, the catalog entry of the
    first new id is displayed until ``duration_seconds`` have passed. A reset
    (set shrinking) just re-baselines without showing anything.
    """

    def __init__(
        self,
        store: ProgressStore,
        clock: Callable[[], datetime] = datetime.now,
        duration_seconds: float = DEFAULT_TOAST_SECONDS,
    ) -> None:
        self._clock = clock
        self._duration = timedelta(seconds=duration_seconds)
        self._seen: list[str] = list(store.state.achievements_earned)
        self._current: Achievement | None = None
        self._expires_at: datetime | None = None
        self._unsubscribe = store.subscribe(self._on_progress)

    def _on_progress(self, state: ProgressState) -> None:
        seen = set(self._seen)
        new_ids = [a for a in state.achievements_earned if a not in seen]
        self._seen = list(state.achievements_earned)
        if not new_ids:
            return
        achievement = ACHIEVEMENTS_BY_ID.get(new_ids[0])
        if achievement is None:
            return
        self._current = achievement
        self._expires_at = self._clock() + self._duration
        logger.info("achievement_toast_shown", achievement=achievement.id)

    def current(self) -> Achievement | None:
        """The achievement on display, or None once it has expired."""
        if self._current is None or self._expires_at is None:
            return None
        if self._clock() >= self._expires_at:
            self._current = None
            self._expires_at = None
            return None
        return self._current

    def close(self) -> None:
        self._unsubscribe()
