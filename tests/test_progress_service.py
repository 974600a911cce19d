from datetime import datetime, timedelta

import pytest

from app.models import QuizAttempt, SubjectProgress, User
from app.services.progress_service import (
    ProgressService,
    recompute_average_accuracy,
    running_average,
)
from app.utils.locks import ProgressLockManager


NOW = datetime(2026, 10, 19, 15, 30)


@pytest.fixture
def service():
    return ProgressService()


@pytest.fixture
def subject(make_bank):
    subject, _, _ = make_bank(minimum_quizzes=3, minimum_accuracy=70.0)
    return subject


def completed_attempt(db, user, subject, accuracy, topics=None, completed_at=NOW, marks=5, time_spent=60):
    attempt = QuizAttempt(
        user_id=user.id,
        subject_id=subject.id,
        config={"mode": "non-timed", "difficulty": "mixed", "question_count": 10},
        questions=[],
        results={
            "total_questions": 10,
            "attempted_questions": 8,
            "correct_answers": 6,
            "incorrect_answers": 2,
            "skipped_questions": 2,
            "total_marks": 10,
            "marks_obtained": marks,
            "accuracy": accuracy,
            "total_time_spent": time_spent,
            "average_time_per_question": 8,
        },
        performance={"topic_wise_score": topics or [], "difficulty_wise_score": {}},
        status=QuizAttempt.STATUS_COMPLETED,
        started_at=completed_at - timedelta(minutes=5),
        completed_at=completed_at,
    )
    db.add(attempt)
    db.flush()
    return attempt


# Streaks

def test_first_activity_starts_streak(service, user):
    service.update_streak(user, NOW)

    assert user.current_streak == 1
    assert user.longest_streak == 1
    assert user.last_activity_date == NOW


def test_same_day_keeps_streak(service, user):
    user.current_streak, user.longest_streak = 3, 3
    user.last_activity_date = NOW.replace(hour=0, minute=5)

    service.update_streak(user, NOW)

    assert user.current_streak == 3


def test_next_day_extends_streak_even_across_midnight(service, user):
    user.current_streak, user.longest_streak = 3, 5
    user.last_activity_date = datetime(2026, 10, 18, 23, 59)

    service.update_streak(user, datetime(2026, 10, 19, 0, 1))

    assert user.current_streak == 4
    assert user.longest_streak == 5


def test_gap_resets_streak_and_keeps_longest(service, user):
    user.current_streak, user.longest_streak = 7, 7
    user.last_activity_date = NOW - timedelta(days=2)

    service.update_streak(user, NOW)

    assert user.current_streak == 1
    assert user.longest_streak == 7


def test_longest_streak_follows_current(service, user):
    user.current_streak, user.longest_streak = 4, 4
    user.last_activity_date = NOW - timedelta(days=1)

    service.update_streak(user, NOW)

    assert user.current_streak == 5
    assert user.longest_streak == 5


# Average accuracy

def test_full_recompute_matches_running_average():
    accuracies = [87.5, 40.0, 66.67, 100.0, 0.0, 73.33]

    running = 0.0
    for count, value in enumerate(accuracies):
        running = running_average(running, count, value)
        assert running == pytest.approx(recompute_average_accuracy(accuracies[:count + 1]), abs=0.005)


def test_recompute_of_empty_history_is_zero():
    assert recompute_average_accuracy([]) == 0.0


# Apply attempt

def test_first_completed_quiz_creates_progress(db, service, user, subject):
    topics = [
        {"topic": "t-strong", "total": 4, "correct": 3, "accuracy": 75.0},
        {"topic": "t-mid", "total": 2, "correct": 1, "accuracy": 50.0},
        {"topic": "t-weak", "total": 2, "correct": 0, "accuracy": 0.0},
    ]
    attempt = completed_attempt(db, user, subject, 75.0, topics)

    progress = service.apply_attempt(db, user, subject, attempt, NOW)
    db.commit()

    assert progress.quizzes_completed == 1
    assert progress.total_score == 5
    assert progress.time_spent == 60
    assert progress.average_accuracy == 75.0
    assert progress.last_attempt_date == NOW
    assert progress.strength_topics == ["t-strong"]
    assert progress.weak_topics == ["t-weak"]
    # consistency 2 + accuracy 30 + trend 0 + coverage 4
    assert progress.interview_readiness_score == 36
    assert progress.certificate_earned is False

    assert user.total_quizzes_taken == 1
    assert user.total_questions_attempted == 8
    assert user.total_correct_answers == 6
    assert user.current_streak == 1

    assert db.query(SubjectProgress).count() == 1


def test_average_recomputed_from_all_completed_attempts(db, service, user, subject):
    for index, accuracy in enumerate([90.0, 60.0]):
        attempt = completed_attempt(db, user, subject, accuracy, completed_at=NOW + timedelta(minutes=index))
        service.apply_attempt(db, user, subject, attempt, NOW + timedelta(minutes=index))

    # in-progress and abandoned attempts are not part of the history
    other = completed_attempt(db, user, subject, 0.0)
    other.status = QuizAttempt.STATUS_ABANDONED
    db.flush()

    attempt = completed_attempt(db, user, subject, 45.0, completed_at=NOW + timedelta(minutes=5))
    progress = service.apply_attempt(db, user, subject, attempt, NOW + timedelta(minutes=5))

    assert progress.quizzes_completed == 3
    assert progress.average_accuracy == 65.0
    assert progress.total_score == 15


def test_topics_overwritten_by_latest_attempt(db, service, user, subject):
    first = completed_attempt(
        db, user, subject, 80.0, [{"topic": "a", "total": 1, "correct": 1, "accuracy": 100.0}]
    )
    service.apply_attempt(db, user, subject, first, NOW)

    second = completed_attempt(
        db, user, subject, 80.0,
        [{"topic": "b", "total": 1, "correct": 1, "accuracy": 100.0}],
        completed_at=NOW + timedelta(hours=1),
    )
    progress = service.apply_attempt(db, user, subject, second, NOW + timedelta(hours=1))

    assert progress.strength_topics == ["b"]
    assert progress.weak_topics == []


def test_certificate_flips_once_and_never_resets(db, service, user, subject):
    progress = None
    for index in range(3):
        at = NOW + timedelta(minutes=index)
        attempt = completed_attempt(db, user, subject, 80.0, completed_at=at)
        progress = service.apply_attempt(db, user, subject, attempt, at)

    assert progress.certificate_earned is True
    certified_at = progress.certificate_date
    assert certified_at == NOW + timedelta(minutes=2)

    for index in range(3, 6):
        at = NOW + timedelta(minutes=index)
        attempt = completed_attempt(db, user, subject, 0.0, completed_at=at)
        progress = service.apply_attempt(db, user, subject, attempt, at)

    assert progress.average_accuracy == 40.0
    assert progress.certificate_earned is True
    assert progress.certificate_date == certified_at


def test_certificate_requires_both_thresholds(db, service, user, subject):
    progress = None
    for index in range(4):
        at = NOW + timedelta(minutes=index)
        attempt = completed_attempt(db, user, subject, 69.99, completed_at=at)
        progress = service.apply_attempt(db, user, subject, attempt, at)

    assert progress.quizzes_completed == 4
    assert progress.certificate_earned is False
    assert progress.certificate_date is None


def test_readiness_uses_newest_first_history(db, service, user, subject):
    accuracies = [70.0, 70.0, 70.0, 85.0, 85.0, 85.0]
    progress = None
    for index, accuracy in enumerate(accuracies):
        at = NOW + timedelta(minutes=index)
        attempt = completed_attempt(db, user, subject, accuracy, completed_at=at)
        progress = service.apply_attempt(db, user, subject, attempt, at)

    # consistency 12 + accuracy 31 + trend capped at 20 + coverage 0
    assert progress.average_accuracy == 77.5
    assert progress.interview_readiness_score == 63


def test_reconcile_pending_attempts(db, service, user, subject):
    attempt = completed_attempt(db, user, subject, 90.0)
    attempt.progress_pending = True
    db.commit()

    assert service.reconcile_pending(db) == 1

    db.expire_all()
    progress = db.query(SubjectProgress).one()
    assert progress.quizzes_completed == 1
    assert progress.average_accuracy == 90.0
    assert db.get(QuizAttempt, attempt.id).progress_pending is False
    assert service.reconcile_pending(db) == 0


def test_reconcile_uses_attempt_completion_time(db, service, user, subject):
    completed_at = datetime(2026, 10, 16, 9, 0)
    attempt = completed_attempt(db, user, subject, 90.0, completed_at=completed_at)
    attempt.progress_pending = True
    db.commit()

    assert service.reconcile_pending(db) == 1

    db.expire_all()
    progress = db.query(SubjectProgress).one()
    assert progress.last_attempt_date == completed_at
    stored = db.get(User, user.id)
    assert stored.last_activity_date == completed_at
    assert stored.current_streak == 1


def test_reconciling_older_attempt_keeps_newer_activity(db, service, user, subject):
    latest = completed_attempt(db, user, subject, 80.0, completed_at=NOW)
    service.apply_attempt(db, user, subject, latest, NOW)
    user.current_streak, user.longest_streak = 4, 4
    older = completed_attempt(db, user, subject, 60.0, completed_at=NOW - timedelta(days=3))
    older.progress_pending = True
    db.commit()

    assert service.reconcile_pending(db) == 1

    db.expire_all()
    stored = db.get(User, user.id)
    assert stored.last_activity_date == NOW
    assert stored.current_streak == 4
    progress = db.query(SubjectProgress).one()
    assert progress.last_attempt_date == NOW
    assert progress.quizzes_completed == 2
    assert progress.average_accuracy == 70.0


def test_reconcile_waits_for_the_progress_lock(db, service, user, subject, monkeypatch):
    locks = ProgressLockManager(redis_client=None, wait=0.05)
    monkeypatch.setattr("app.services.progress_service.progress_locks", locks)
    attempt = completed_attempt(db, user, subject, 90.0)
    attempt.progress_pending = True
    db.commit()

    with locks.hold(user.id, subject.id):
        assert service.reconcile_pending(db) == 0

    db.expire_all()
    assert db.get(QuizAttempt, attempt.id).progress_pending is True
    assert db.query(SubjectProgress).count() == 0

    assert service.reconcile_pending(db) == 1
