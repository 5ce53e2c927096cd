"""XP reward table."""

LESSON_XP = 50
FIRST_TIME_BONUS = 25
QUIZ_XP = 100
PERFECT_QUIZ_BONUS = 50  # on top of QUIZ_XP for a 100% score
EXERCISE_XP = 75
STREAK_BONUS = 25  # declared reward, not granted by any operation yet

PERFECT_SCORE = 100


def lesson_reward(first_time: bool) -> int:
    return LESSON_XP + (FIRST_TIME_BONUS if first_time else 0)


def quiz_reward(score: int) -> int:
    return QUIZ_XP + (PERFECT_QUIZ_BONUS if score == PERFECT_SCORE else 0)
