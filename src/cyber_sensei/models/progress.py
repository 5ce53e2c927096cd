"""Learner progress models.

The persisted layout uses camelCase keys so records written by the browser
client (``currentStreak``, ``lessonsCompleted``, ...) load unchanged. Missing
fields take their defaults, and unknown keys (including a stored ``level``)
are ignored.
"""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

LEVEL_SIZE = 500
ACTIVITY_LOG_LIMIT = 50


def level_for_xp(xp: int) -> int:
    """Level is a fixed-size bucket of lifetime XP, starting at 1."""
    return xp // LEVEL_SIZE + 1


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ActivityType(StrEnum):
    LESSON = "lesson"
    QUIZ = "quiz"
    EXERCISE = "exercise"
    ACHIEVEMENT = "achievement"
    CHAT = "chat"
    XP = "xp"


class ActivityLogEntry(_CamelModel):
    """A single human-readable event. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    type: ActivityType
    title: str
    description: str | None = None
    xp_earned: int | None = None
    timestamp: datetime = Field(default_factory=datetime.now)


class LessonProgress(_CamelModel):
    lesson_id: str
    module_id: str = ""
    completed: bool = False
    completed_at: datetime | None = None
    quiz_score: int | None = None  # 0-100 by caller contract, not enforced on load
    exercise_completed: bool | None = None


class ProgressState(_CamelModel):
    """Root aggregate of a learner's gamification progress."""

    xp: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_active_date: str = ""  # ISO calendar day, "" when never active
    lessons_completed: list[LessonProgress] = Field(default_factory=list)
    achievements_earned: list[str] = Field(default_factory=list)
    total_quizzes_passed: int = Field(default=0, ge=0)
    total_exercises_completed: int = Field(default=0, ge=0)
    total_chat_messages: int = Field(default=0, ge=0)
    activity_log: list[ActivityLogEntry] = Field(default_factory=list)

    @computed_field
    @property
    def level(self) -> int:
        return level_for_xp(self.xp)

    @field_validator("lessons_completed")
    @classmethod
    def _one_record_per_lesson(cls, lessons: list[LessonProgress]) -> list[LessonProgress]:
        by_id: dict[str, LessonProgress] = {}
        for lesson in lessons:
            by_id[lesson.lesson_id] = lesson
        return list(by_id.values())

    @field_validator("achievements_earned")
    @classmethod
    def _unique_achievements(cls, ids: list[str]) -> list[str]:
        return list(dict.fromkeys(ids))

    @field_validator("activity_log")
    @classmethod
    def _cap_activity_log(cls, entries: list[ActivityLogEntry]) -> list[ActivityLogEntry]:
        return entries[:ACTIVITY_LOG_LIMIT]

    def find_lesson(self, lesson_id: str) -> LessonProgress | None:
        for lesson in self.lessons_completed:
            if lesson.lesson_id == lesson_id:
                return lesson
        return None

    @property
    def completed_lesson_count(self) -> int:
        return sum(1 for lesson in self.lessons_completed if lesson.completed)

    def to_storage(self) -> dict:
        """Serialize to the persisted camelCase JSON layout."""
        return self.model_dump(mode="json", by_alias=True)
