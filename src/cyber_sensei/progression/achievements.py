"""Achievement evaluation against the static catalog."""

from collections.abc import Iterable

from cyber_sensei.models.achievement import (
    ACHIEVEMENTS,
    Achievement,
    AchievementStatus,
    Requirement,
    RequirementType,
)
from cyber_sensei.models.progress import ProgressState


def requirement_met(requirement: Requirement, state: ProgressState) -> bool:
    """Check a single requirement against the state's aggregate counters."""
    value = requirement.value
    match requirement.type:
        case RequirementType.LESSONS:
            return state.completed_lesson_count >= value
        case RequirementType.XP:
            return state.xp >= value
        case RequirementType.STREAK:
            return state.current_streak >= value or state.longest_streak >= value
        case RequirementType.QUIZZES:
            return state.total_quizzes_passed >= value
        case RequirementType.EXERCISES:
            return state.total_exercises_completed >= value
        case RequirementType.MODULES:
            # Nothing tracks completed modules, so this never qualifies.
            return False
    return False


def evaluate_achievements(
    state: ProgressState,
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> list[str]:
    """Return ids of catalog entries that newly qualify, in catalog order.

    Already-earned ids are skipped. The result is meant to be unioned into
    ``state.achievements_earned``; evaluation never removes ids and never
    grants XP.
    """
    earned = set(state.achievements_earned)
    return [
        achievement.id
        for achievement in catalog
        if achievement.id not in earned and requirement_met(achievement.requirement, state)
    ]


def with_status(
    earned_ids: Iterable[str],
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> list[AchievementStatus]:
    earned = set(earned_ids)
    return [
        AchievementStatus(**achievement.model_dump(), earned=achievement.id in earned)
        for achievement in catalog
    ]
