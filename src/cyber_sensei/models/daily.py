"""Daily challenge models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChallengeType(StrEnum):
    LESSON = "lesson"
    QUIZ = "quiz"
    EXERCISE = "exercise"
    STREAK = "streak"
    CHAT = "chat"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Challenge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    type: ChallengeType
    requirement: int
    xp_reward: int
    difficulty: Difficulty


class DailyProgress(BaseModel):
    """Day-scoped activity counters, persisted apart from ProgressState."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    date: str  # ISO calendar day the counters belong to
    completed_challenges: list[str] = Field(default_factory=list)
    lessons_today: int = 0
    quizzes_today: int = 0
    exercises_today: int = 0
    chat_today: int = 0


DAILY_CHALLENGES: list[Challenge] = [
    Challenge(
        id="complete_lesson",
        title="Knowledge Seeker",
        description="Complete 2 lessons today",
        type=ChallengeType.LESSON,
        requirement=2,
        xp_reward=100,
        difficulty=Difficulty.EASY,
    ),
    Challenge(
        id="pass_quiz",
        title="Quiz Champion",
        description="Pass a quiz with 80%+ score",
        type=ChallengeType.QUIZ,
        requirement=1,
        xp_reward=150,
        difficulty=Difficulty.MEDIUM,
    ),
    Challenge(
        id="complete_exercise",
        title="Hands-On Hacker",
        description="Complete 2 interactive exercises",
        type=ChallengeType.EXERCISE,
        requirement=2,
        xp_reward=200,
        difficulty=Difficulty.MEDIUM,
    ),
    Challenge(
        id="maintain_streak",
        title="Consistency King",
        description="Maintain your learning streak",
        type=ChallengeType.STREAK,
        requirement=1,
        xp_reward=75,
        difficulty=Difficulty.EASY,
    ),
    Challenge(
        id="chat_ai",
        title="Curious Mind",
        description="Ask the AI Sensei 5 questions",
        type=ChallengeType.CHAT,
        requirement=5,
        xp_reward=50,
        difficulty=Difficulty.EASY,
    ),
]

CHALLENGES_PER_DAY = 3
# Lowest quiz score that counts toward the daily quiz challenge.
QUIZ_CHALLENGE_MIN_SCORE = 80
