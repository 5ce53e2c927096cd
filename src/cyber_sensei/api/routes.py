"""REST API routes for learner progress, achievements and daily challenges."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from cyber_sensei.models.achievement import Achievement, AchievementStatus
from cyber_sensei.models.daily import QUIZ_CHALLENGE_MIN_SCORE, Challenge, ChallengeType
from cyber_sensei.progression.daily_challenges import DailyChallengeBoard, DailySummary
from cyber_sensei.progression.store import ProgressStore
from cyber_sensei.progression.toast import AchievementToast

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


class GrantXPRequest(BaseModel):
    amount: int = Field(ge=0)
    reason: str


class CompleteLessonRequest(BaseModel):
    module_id: str = Field(min_length=1)


class PassQuizRequest(BaseModel):
    score: int = Field(ge=0, le=100)


class MutationResponse(BaseModel):
    progress: dict
    unlocked: list[str] = Field(default_factory=list)


class LevelResponse(BaseModel):
    level: int
    xp: int
    current_level_xp: int
    xp_for_next_level: int
    percent: float


class ChallengeStatus(Challenge):
    progress: int
    completed: bool
    can_claim: bool


class ChallengesResponse(BaseModel):
    challenges: list[ChallengeStatus]
    summary: DailySummary
    resets_in_seconds: int


def get_store(request: Request) -> ProgressStore:
    return request.app.state.store


def get_board(request: Request) -> DailyChallengeBoard:
    return request.app.state.daily_challenges


def get_toast(request: Request) -> AchievementToast:
    return request.app.state.achievement_toast


def _respond(store: ProgressStore, unlocked: list[str] | None = None) -> MutationResponse:
    return MutationResponse(progress=store.state.to_storage(), unlocked=unlocked or [])


def _lesson_completed(store: ProgressStore, lesson_id: str) -> bool:
    lesson = store.state.find_lesson(lesson_id)
    return lesson is not None and lesson.completed


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/progress")
def get_progress(store: ProgressStore = Depends(get_store)) -> dict:
    return store.state.to_storage()


@router.get("/progress/level")
def get_level(store: ProgressStore = Depends(get_store)) -> LevelResponse:
    return LevelResponse(
        level=store.level,
        xp=store.state.xp,
        current_level_xp=store.current_level_xp(),
        xp_for_next_level=store.xp_for_next_level(),
        percent=store.level_progress_percent(),
    )


@router.post("/progress/xp")
def grant_xp(body: GrantXPRequest, store: ProgressStore = Depends(get_store)) -> MutationResponse:
    return _respond(store, store.grant_xp(body.amount, body.reason))


@router.delete("/progress")
def reset_progress(store: ProgressStore = Depends(get_store)) -> MutationResponse:
    store.reset_progress()
    return _respond(store)


@router.post("/streak")
def update_streak(store: ProgressStore = Depends(get_store)) -> MutationResponse:
    return _respond(store, store.update_streak())


@router.post("/lessons/{lesson_id}/complete")
def complete_lesson(
    lesson_id: str,
    body: CompleteLessonRequest,
    store: ProgressStore = Depends(get_store),
    board: DailyChallengeBoard = Depends(get_board),
) -> MutationResponse:
    was_completed = _lesson_completed(store, lesson_id)
    unlocked = store.complete_lesson(lesson_id, body.module_id)
    if not was_completed and _lesson_completed(store, lesson_id):
        board.increment(ChallengeType.LESSON)
    return _respond(store, unlocked)


@router.post("/lessons/{lesson_id}/quiz")
def pass_quiz(
    lesson_id: str,
    body: PassQuizRequest,
    store: ProgressStore = Depends(get_store),
    board: DailyChallengeBoard = Depends(get_board),
) -> MutationResponse:
    unlocked = store.pass_quiz(lesson_id, body.score)
    if unlocked is not None and body.score >= QUIZ_CHALLENGE_MIN_SCORE:
        board.increment(ChallengeType.QUIZ)
    return _respond(store, unlocked)


@router.post("/lessons/{lesson_id}/exercise")
def complete_exercise(
    lesson_id: str,
    store: ProgressStore = Depends(get_store),
    board: DailyChallengeBoard = Depends(get_board),
) -> MutationResponse:
    unlocked = store.complete_exercise(lesson_id)
    if unlocked is not None:
        board.increment(ChallengeType.EXERCISE)
    return _respond(store, unlocked)


@router.post("/chat/messages")
def record_chat_message(
    store: ProgressStore = Depends(get_store),
    board: DailyChallengeBoard = Depends(get_board),
) -> MutationResponse:
    store.increment_chat_messages()
    board.increment(ChallengeType.CHAT)
    return _respond(store)


@router.get("/achievements")
def list_achievements(store: ProgressStore = Depends(get_store)) -> list[AchievementStatus]:
    return store.achievements_with_status()


@router.get("/achievements/toast")
def current_toast(toast: AchievementToast = Depends(get_toast)) -> Achievement | None:
    return toast.current()


@router.get("/challenges")
def list_challenges(board: DailyChallengeBoard = Depends(get_board)) -> ChallengesResponse:
    statuses = [
        ChallengeStatus(
            **challenge.model_dump(),
            progress=board.challenge_progress(challenge),
            completed=board.is_complete(challenge),
            can_claim=board.can_claim(challenge),
        )
        for challenge in board.todays_challenges()
    ]
    return ChallengesResponse(
        challenges=statuses,
        summary=board.summary(),
        resets_in_seconds=int(board.time_until_reset().total_seconds()),
    )


@router.post("/challenges/{challenge_id}/claim")
def claim_challenge(
    challenge_id: str,
    store: ProgressStore = Depends(get_store),
    board: DailyChallengeBoard = Depends(get_board),
) -> MutationResponse:
    if board.todays_challenge(challenge_id) is None:
        raise HTTPException(status_code=404, detail="Challenge not found")
    if not board.claim(challenge_id):
        logger.info("daily_challenge_claim_rejected", challenge_id=challenge_id)
        raise HTTPException(status_code=409, detail="Challenge cannot be claimed")
    return _respond(store)
