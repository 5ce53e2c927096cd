"""Progression store: the single owner of a learner's ProgressState."""

import threading
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

import structlog

from cyber_sensei.models.achievement import ACHIEVEMENTS, Achievement, AchievementStatus
from cyber_sensei.models.progress import (
    LEVEL_SIZE,
    ActivityLogEntry,
    ActivityType,
    LessonProgress,
    ProgressState,
)
from cyber_sensei.progression.achievements import evaluate_achievements, with_status
from cyber_sensei.progression.activity_log import record_activity
from cyber_sensei.progression.rewards import (
    EXERCISE_XP,
    LESSON_XP,
    PERFECT_SCORE,
    lesson_reward,
    quiz_reward,
)
from cyber_sensei.storage.progress import ProgressRepository

logger = structlog.get_logger()

Subscriber = Callable[[ProgressState], None]
Transition = Callable[[ProgressState], ProgressState | None]


class ProgressStore:
    """Owns the canonical progress state and every mutation of it.

    Each operation computes the next state from a deep copy of the committed
    one, runs achievement evaluation, then commits with a single assignment.
    A failure while computing the next state leaves the committed state
    untouched. After a commit the state is saved through the repository
    (best effort) and subscribers are notified in registration order.

    Callers are trusted: ``amount`` must be non-negative and quiz scores
    within 0-100. These are not checked here.

    Args:
        repository: Persistence adapter. ``None`` keeps state in memory only.
        clock: Returns the current local time; drives timestamps and streaks.
        catalog: Achievement catalog to evaluate against.
    """

    def __init__(
        self,
        repository: ProgressRepository | None = None,
        clock: Callable[[], datetime] = datetime.now,
        catalog: Iterable[Achievement] = ACHIEVEMENTS,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._catalog: list[Achievement] = list(catalog)
        self._lock = threading.RLock()
        self._subscribers: list[Subscriber] = []

        loaded = repository.load() if repository is not None else None
        self._state: ProgressState = loaded if loaded is not None else ProgressState()
        logger.info(
            "progress_loaded",
            restored=loaded is not None,
            xp=self._state.xp,
            level=self._state.level,
        )

    @property
    def state(self) -> ProgressState:
        """A detached copy of the committed state."""
        return self._state.model_copy(deep=True)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` to receive the state after every commit.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # -- mutations ---------------------------------------------------------

    def grant_xp(self, amount: int, reason: str) -> list[str] | None:
        """Add XP and log it.

        Returns:
            Newly unlocked achievement ids, or None if the grant failed and
            nothing was committed.
        """

        def transition(state: ProgressState) -> ProgressState:
            state.xp += amount
            return record_activity(
                state,
                self._entry(ActivityType.XP, f"+{amount} XP", reason, amount),
            )

        return self._apply(
            "grant_xp", transition, event="xp_granted", fields={"amount": amount, "reason": reason}
        )

    def complete_lesson(self, lesson_id: str, module_id: str) -> list[str] | None:
        """Mark a lesson completed, granting XP on the first completion only.

        Every call logs a "Lesson Completed" entry carrying the base lesson
        reward, including repeat calls that grant nothing.
        """
        now = self._clock()
        fields: dict = {"lesson_id": lesson_id}

        def transition(state: ProgressState) -> ProgressState:
            existing = state.find_lesson(lesson_id)
            if existing is not None and existing.completed:
                granted = 0
            else:
                granted = lesson_reward(first_time=existing is None)
                if existing is None:
                    state.lessons_completed.append(
                        LessonProgress(
                            lesson_id=lesson_id,
                            module_id=module_id,
                            completed=True,
                            completed_at=now,
                        )
                    )
                else:
                    existing.module_id = module_id
                    existing.completed = True
                    existing.completed_at = now
                state.xp += granted
            fields["xp_granted"] = granted
            return record_activity(
                state,
                self._entry(
                    ActivityType.LESSON,
                    "Lesson Completed",
                    f"Completed lesson {lesson_id}",
                    LESSON_XP,
                ),
            )

        return self._apply("complete_lesson", transition, event="lesson_completed", fields=fields)

    def pass_quiz(self, lesson_id: str, score: int) -> list[str] | None:
        xp_earned = quiz_reward(score)
        perfect = score == PERFECT_SCORE

        def transition(state: ProgressState) -> ProgressState:
            self._lesson_record(state, lesson_id).quiz_score = score
            state.xp += xp_earned
            state.total_quizzes_passed += 1
            return record_activity(
                state,
                self._entry(
                    ActivityType.QUIZ,
                    "Perfect Quiz!" if perfect else "Quiz Passed",
                    f"Scored {score}%",
                    xp_earned,
                ),
            )

        return self._apply(
            "pass_quiz",
            transition,
            event="quiz_passed",
            fields={"lesson_id": lesson_id, "score": score, "xp_granted": xp_earned},
        )

    def complete_exercise(self, lesson_id: str) -> list[str] | None:
        def transition(state: ProgressState) -> ProgressState:
            self._lesson_record(state, lesson_id).exercise_completed = True
            state.xp += EXERCISE_XP
            state.total_exercises_completed += 1
            return record_activity(
                state,
                self._entry(ActivityType.EXERCISE, "Exercise Completed", None, EXERCISE_XP),
            )

        return self._apply(
            "complete_exercise",
            transition,
            event="exercise_completed",
            fields={"lesson_id": lesson_id, "xp_granted": EXERCISE_XP},
        )

    def increment_chat_messages(self) -> None:
        """Count one chat message.

        Unlike the other mutations this grants no XP, writes no activity
        entry and does not run achievement evaluation.
        """

        def transition(state: ProgressState) -> ProgressState:
            state.total_chat_messages += 1
            return state

        self._apply("increment_chat_messages", transition, evaluate=False)

    def update_streak(self) -> list[str] | None:
        """Advance, keep or restart the daily streak for today's date.

        Should run once per session before other mutations are relied on.
        Returns [] when the streak was already updated today.
        """
        today = self._clock().date()
        today_key = today.isoformat()
        yesterday_key = (today - timedelta(days=1)).isoformat()
        fields: dict = {}

        def transition(state: ProgressState) -> ProgressState | None:
            if state.last_active_date == today_key:
                return None
            if state.last_active_date == yesterday_key:
                state.current_streak += 1
            else:
                state.current_streak = 1
            state.longest_streak = max(state.longest_streak, state.current_streak)
            state.last_active_date = today_key
            fields.update(
                current_streak=state.current_streak,
                longest_streak=state.longest_streak,
            )
            return state

        return self._apply("update_streak", transition, event="streak_updated", fields=fields)

    def reset_progress(self) -> None:
        """Replace all progress with defaults and clear the persisted copy."""
        with self._lock:
            self._state = ProgressState()
            if self._repository is not None:
                self._repository.clear()
            logger.warning("progress_reset")
            self._notify()

    # -- read accessors ----------------------------------------------------

    @property
    def level(self) -> int:
        return self._state.level

    def xp_for_next_level(self) -> int:
        return LEVEL_SIZE

    def current_level_xp(self) -> int:
        return self._state.xp % LEVEL_SIZE

    def level_progress_percent(self) -> float:
        return self.current_level_xp() / self.xp_for_next_level() * 100

    def is_active_today(self) -> bool:
        return self._state.last_active_date == self._clock().date().isoformat()

    def achievements_with_status(self) -> list[AchievementStatus]:
        return with_status(self._state.achievements_earned, self._catalog)

    # -- internals ---------------------------------------------------------

    def _apply(
        self,
        operation: str,
        transition: Transition,
        evaluate: bool = True,
        event: str | None = None,
        fields: dict | None = None,
    ) -> list[str] | None:
        """Run ``transition`` and commit its result.

        Returns the newly unlocked ids, [] when the transition was a no-op,
        or None when it raised and the committed state was left untouched.
        ``event`` is logged with ``fields`` only after a commit.
        """
        with self._lock:
            try:
                next_state = transition(self._state.model_copy(deep=True))
                if next_state is None:
                    return []
                unlocked = evaluate_achievements(next_state, self._catalog) if evaluate else []
                if unlocked:
                    next_state.achievements_earned = [*next_state.achievements_earned, *unlocked]
            except Exception:
                logger.exception("progress_transition_failed", operation=operation)
                return None

            self._state = next_state
            if event is not None:
                logger.info(event, **(fields or {}))
            if unlocked:
                logger.info("achievements_unlocked", operation=operation, achievements=unlocked)
            if self._repository is not None:
                self._repository.save(self._state)
            self._notify()
            return unlocked

    def _notify(self) -> None:
        snapshot = self.state
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("progress_subscriber_failed")

    def _entry(
        self,
        activity_type: ActivityType,
        title: str,
        description: str | None,
        xp_earned: int | None,
    ) -> ActivityLogEntry:
        return ActivityLogEntry(
            type=activity_type,
            title=title,
            description=description,
            xp_earned=xp_earned,
            timestamp=self._clock(),
        )

    @staticmethod
    def _lesson_record(state: ProgressState, lesson_id: str) -> LessonProgress:
        """Find the lesson's record, creating a minimal one on first touch."""
        record = state.find_lesson(lesson_id)
        if record is None:
            record = LessonProgress(lesson_id=lesson_id)
            state.lessons_completed.append(record)
        return record
