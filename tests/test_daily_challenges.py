"""Tests for the daily challenge board."""

from datetime import datetime, timedelta

import pytest

from cyber_sensei.models.daily import ChallengeType
from cyber_sensei.progression import store as store_module
from cyber_sensei.progression.daily_challenges import DailyChallengeBoard


@pytest.fixture
def board(store, kv_store, clock):
    return DailyChallengeBoard(store, kv_store, clock=clock)


def test_todays_challenges_are_first_three(board):
    assert [c.id for c in board.todays_challenges()] == [
        "complete_lesson", "pass_quiz", "complete_exercise",
    ]


def test_claim_requires_progress(board, store):
    assert board.claim("complete_lesson") is False
    board.increment(ChallengeType.LESSON)
    assert board.claim("complete_lesson") is False
    board.increment(ChallengeType.LESSON)

    assert board.claim("complete_lesson") is True
    assert store.state.xp == 100
    entry = store.state.activity_log[0]
    assert entry.description == "Daily Challenge: Knowledge Seeker"
    assert entry.xp_earned == 100


def test_claim_only_once_per_day(board, store):
    board.increment(ChallengeType.QUIZ)
    assert board.claim("pass_quiz") is True
    board.increment(ChallengeType.QUIZ)
    assert board.claim("pass_quiz") is False
    assert store.state.xp == 150


def test_failed_grant_leaves_challenge_claimable(board, store, monkeypatch):
    board.increment(ChallengeType.QUIZ)

    def explode(*args, **kwargs):
        raise RuntimeError("evaluator failure")

    monkeypatch.setattr(store_module, "evaluate_achievements", explode)
    assert board.claim("pass_quiz") is False
    assert store.state.xp == 0
    assert board.progress.completed_challenges == []

    monkeypatch.undo()
    assert board.claim("pass_quiz") is True
    assert store.state.xp == 150


def test_unknown_challenge(board):
    assert board.get_challenge("nope") is None
    assert board.claim("nope") is False


def test_streak_challenge_reads_store(board, store):
    challenge = board.get_challenge("maintain_streak")
    assert board.challenge_progress(challenge) == 0
    store.update_streak()
    assert board.challenge_progress(challenge) == 1


def test_only_todays_challenges_can_be_claimed(board, store):
    store.update_streak()
    assert board.can_claim(board.get_challenge("maintain_streak"))
    assert board.todays_challenge("maintain_streak") is None

    assert board.claim("maintain_streak") is False
    assert store.state.xp == 0
    assert board.progress.completed_challenges == []


def test_streak_increment_is_ignored(board):
    board.increment(ChallengeType.STREAK)
    progress = board.progress
    assert progress.lessons_today == 0
    assert progress.chat_today == 0


def test_counters_roll_over_at_midnight(board, clock):
    board.increment(ChallengeType.CHAT)
    board.increment(ChallengeType.QUIZ)
    board.claim("pass_quiz")
    clock.advance(days=1)
    progress = board.progress
    assert progress.date == "2026-03-11"
    assert progress.chat_today == 0
    assert progress.completed_challenges == []


def test_counters_persist_across_instances(board, store, kv_store, clock):
    board.increment(ChallengeType.EXERCISE)
    board.increment(ChallengeType.EXERCISE)
    reopened = DailyChallengeBoard(store, kv_store, clock=clock)
    assert reopened.progress.exercises_today == 2
    assert reopened.can_claim(reopened.get_challenge("complete_exercise"))


def test_yesterdays_record_is_discarded(board, store, kv_store, clock):
    board.increment(ChallengeType.LESSON)
    clock.advance(days=1)
    reopened = DailyChallengeBoard(store, kv_store, clock=clock)
    assert reopened.progress.lessons_today == 0


def test_corrupt_record_starts_fresh(store, kv_store, clock):
    kv_store.root.mkdir(parents=True, exist_ok=True)
    kv_store.path_for("cyber_sensei_daily_progress").write_text("[[[")
    board = DailyChallengeBoard(store, kv_store, clock=clock)
    assert board.progress.date == "2026-03-10"


@pytest.mark.parametrize(
    "payload",
    ['{"date": "2026-03-10", "lessonsToday": ' + "9" * 5000 + "}", "[" * 200000],
    ids=["oversized-integer", "deep-nesting"],
)
def test_unparseable_record_starts_fresh(store, kv_store, clock, payload):
    kv_store.root.mkdir(parents=True, exist_ok=True)
    kv_store.path_for("cyber_sensei_daily_progress").write_text(payload)
    board = DailyChallengeBoard(store, kv_store, clock=clock)
    progress = board.progress
    assert progress.date == "2026-03-10"
    assert progress.lessons_today == 0


def test_in_memory_board(store, clock):
    board = DailyChallengeBoard(store, clock=clock)
    board.increment(ChallengeType.LESSON)
    assert board.progress.lessons_today == 1


def test_summary(board):
    board.increment(ChallengeType.QUIZ)
    board.claim("pass_quiz")
    summary = board.summary()
    assert summary.completed == 1
    assert summary.total == 3
    assert summary.total_xp == 450
    assert summary.earned_xp == 150


def test_time_until_reset(store, kv_store):
    clock = lambda: datetime(2026, 3, 10, 23, 0, 0)  # noqa: E731
    board = DailyChallengeBoard(store, kv_store, clock=clock)
    assert board.time_until_reset() == timedelta(hours=1)
