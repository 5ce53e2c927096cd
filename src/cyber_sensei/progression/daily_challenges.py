"""Daily challenges: day-scoped goals whose rewards are paid through grant_xp."""

import threading
from collections.abc import Callable
from datetime import datetime, timedelta

import structlog
from pydantic import BaseModel

from cyber_sensei.models.daily import (
    CHALLENGES_PER_DAY,
    DAILY_CHALLENGES,
    Challenge,
    ChallengeType,
    DailyProgress,
)
from cyber_sensei.progression.store import ProgressStore
from cyber_sensei.storage.kv_store import JsonFileStore

logger = structlog.get_logger()

DEFAULT_DAILY_KEY = "cyber_sensei_daily_progress"

_COUNTER_FIELDS: dict[ChallengeType, str] = {
    ChallengeType.LESSON: "lessons_today",
    ChallengeType.QUIZ: "quizzes_today",
    ChallengeType.EXERCISE: "exercises_today",
    ChallengeType.CHAT: "chat_today",
}


class DailySummary(BaseModel):
    completed: int
    total: int
    total_xp: int
    earned_xp: int


class DailyChallengeBoard:
    """Tracks today's challenge counters and pays out claimed rewards.

    Counters live in their own persisted record, separate from the progress
    state. A record from an earlier day (or one that cannot be read) is
    replaced by a fresh one for today.
    """

    def __init__(
        self,
        store: ProgressStore,
        kv_store: JsonFileStore | None = None,
        key: str = DEFAULT_DAILY_KEY,
        clock: Callable[[], datetime] = datetime.now,
        challenges: list[Challenge] = DAILY_CHALLENGES,
    ) -> None:
        self._store = store
        self._kv_store = kv_store
        self._key = key
        self._clock = clock
        self._challenges = challenges
        self._lock = threading.RLock()
        self._progress = self._load()

    @property
    def progress(self) -> DailyProgress:
        self._roll_over()
        return self._progress.model_copy(deep=True)

    def todays_challenges(self) -> list[Challenge]:
        return self._challenges[:CHALLENGES_PER_DAY]

    def get_challenge(self, challenge_id: str) -> Challenge | None:
        for challenge in self._challenges:
            if challenge.id == challenge_id:
                return challenge
        return None

    def increment(self, kind: ChallengeType) -> None:
        """Count one activity of ``kind`` toward today's challenges."""
        counter = _COUNTER_FIELDS.get(kind)
        if counter is None:
            # Streak progress is read from the store, not counted here.
            return
        with self._lock:
            self._roll_over()
            setattr(self._progress, counter, getattr(self._progress, counter) + 1)
            self._save()

    def challenge_progress(self, challenge: Challenge) -> int:
        if challenge.type == ChallengeType.STREAK:
            return 1 if self._store.state.current_streak > 0 else 0
        self._roll_over()
        return getattr(self._progress, _COUNTER_FIELDS[challenge.type])

    def is_complete(self, challenge: Challenge) -> bool:
        self._roll_over()
        return challenge.id in self._progress.completed_challenges

    def can_claim(self, challenge: Challenge) -> bool:
        return (
            self.challenge_progress(challenge) >= challenge.requirement
            and not self.is_complete(challenge)
        )

    def todays_challenge(self, challenge_id: str) -> Challenge | None:
        for challenge in self.todays_challenges():
            if challenge.id == challenge_id:
                return challenge
        return None

    def claim(self, challenge_id: str) -> bool:
        """Pay out the reward of one of today's challenges, once per day.

        Returns:
            True if the reward was granted.
        """
        challenge = self.todays_challenge(challenge_id)
        if challenge is None:
            return False
        with self._lock:
            if not self.can_claim(challenge):
                return False
            granted = self._store.grant_xp(
                challenge.xp_reward, f"Daily Challenge: {challenge.title}"
            )
            if granted is None:
                logger.warning("daily_challenge_grant_failed", challenge_id=challenge.id)
                return False
            self._progress.completed_challenges.append(challenge.id)
            self._save()
        logger.info("daily_challenge_claimed", challenge_id=challenge.id, xp=challenge.xp_reward)
        return True

    def summary(self) -> DailySummary:
        todays = self.todays_challenges()
        done = [c for c in todays if self.is_complete(c)]
        return DailySummary(
            completed=len(done),
            total=len(todays),
            total_xp=sum(c.xp_reward for c in todays),
            earned_xp=sum(c.xp_reward for c in done),
        )

    def time_until_reset(self) -> timedelta:
        """Time left until the counters reset at the next local midnight."""
        now = self._clock()
        midnight = datetime.combine(now.date() + timedelta(days=1), datetime.min.time(), now.tzinfo)
        return midnight - now

    def _today(self) -> str:
        return self._clock().date().isoformat()

    def _fresh(self) -> DailyProgress:
        return DailyProgress(date=self._today())

    def _roll_over(self) -> None:
        if self._progress.date != self._today():
            logger.info("daily_progress_rolled_over", previous_date=self._progress.date)
            self._progress = self._fresh()

    def _load(self) -> DailyProgress:
        if self._kv_store is None:
            return self._fresh()
        try:
            data = self._kv_store.get(self._key)
            if data is None:
                return self._fresh()
            progress = DailyProgress.model_validate(data)
        except (OSError, ValueError, RecursionError) as e:
            # ValidationError is a ValueError too.
            logger.warning("daily_progress_load_failed", key=self._key, error=str(e))
            return self._fresh()
        if progress.date != self._today():
            return self._fresh()
        return progress

    def _save(self) -> None:
        if self._kv_store is None:
            return
        try:
            self._kv_store.set(self._key, self._progress.model_dump(mode="json", by_alias=True))
        except OSError as e:
            logger.warning("daily_progress_save_failed", key=self._key, error=str(e))
