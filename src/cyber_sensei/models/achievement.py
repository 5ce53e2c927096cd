"""Achievement catalog models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class RequirementType(StrEnum):
    """Aggregate counter an achievement requirement is measured against."""

    LESSONS = "lessons"
    XP = "xp"
    STREAK = "streak"
    QUIZZES = "quizzes"
    EXERCISES = "exercises"
    MODULES = "modules"


class Requirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: RequirementType
    value: int


class Achievement(BaseModel):
    """A static milestone badge. Earning one never grants XP."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    icon: str
    requirement: Requirement


class AchievementStatus(Achievement):
    """Catalog entry annotated with whether the learner has earned it."""

    earned: bool = False


def _achievement(
    achievement_id: str,
    title: str,
    description: str,
    icon: str,
    requirement_type: RequirementType,
    value: int,
) -> Achievement:
    return Achievement(
        id=achievement_id,
        title=title,
        description=description,
        icon=icon,
        requirement=Requirement(type=requirement_type, value=value),
    )


ACHIEVEMENTS: list[Achievement] = [
    _achievement("first_steps", "First Steps", "Complete your first lesson", "🎯",
                 RequirementType.LESSONS, 1),
    _achievement("quick_learner", "Quick Learner", "Complete 5 lessons", "⚡",
                 RequirementType.LESSONS, 5),
    _achievement("dedicated", "Dedicated", "Complete 10 lessons", "📚",
                 RequirementType.LESSONS, 10),
    _achievement("streak_starter", "Streak Starter", "Maintain a 3-day streak", "🔥",
                 RequirementType.STREAK, 3),
    _achievement("streak_master", "Streak Master", "Maintain a 7-day streak", "🔥",
                 RequirementType.STREAK, 7),
    _achievement("streak_legend", "Streak Legend", "Maintain a 30-day streak", "⭐",
                 RequirementType.STREAK, 30),
    _achievement("quiz_novice", "Quiz Novice", "Pass 5 quizzes", "✅",
                 RequirementType.QUIZZES, 5),
    _achievement("quiz_master", "Quiz Master", "Pass 25 quizzes", "🏆",
                 RequirementType.QUIZZES, 25),
    _achievement("hands_on", "Hands-On", "Complete 5 exercises", "🛠️",
                 RequirementType.EXERCISES, 5),
    _achievement("practitioner", "Practitioner", "Complete 15 exercises", "💪",
                 RequirementType.EXERCISES, 15),
    _achievement("xp_hunter", "XP Hunter", "Earn 1000 XP", "💎",
                 RequirementType.XP, 1000),
    _achievement("xp_legend", "XP Legend", "Earn 5000 XP", "👑",
                 RequirementType.XP, 5000),
    _achievement("module_complete", "Module Master", "Complete a full module", "🎓",
                 RequirementType.MODULES, 1),
    # Counts completed lessons, not chat messages.
    _achievement("curious_mind", "Curious Mind", "Send 50 chat messages", "🧠",
                 RequirementType.LESSONS, 50),
]

ACHIEVEMENTS_BY_ID: dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}
