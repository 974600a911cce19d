import os

os.environ["DATABASE_URL"] = "sqlite://"
# nothing listens on port 1: cache disabled, local progress locks
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"

import pytest
from fastapi.testclient import TestClient

import app.models  # noqa: F401
from app.database import Base, SessionLocal, engine
from app.main import app as fastapi_app
from app.models import Question, Subject, Topic, User
from app.utils.rate_limiter import rate_limiter


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    rate_limiter.reset()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(fastapi_app)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name=None, role="user"):
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=f"user{counter['n']}@example.com",
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user("Ada")


@pytest.fixture
def admin(make_user):
    return make_user("Admin", role="admin")


def headers_for(user):
    return {"X-User-Id": str(user.id)}


@pytest.fixture
def auth():
    return headers_for


@pytest.fixture
def make_bank(db):
    """
    Subject with two topics; questions cycle easy/medium/hard, topics alternate.

    Correct answer of question i is "answer-i".
    """
    counter = {"n": 0}

    def _make(question_count=6, minimum_quizzes=5, minimum_accuracy=70.0, marks=1):
        counter["n"] += 1
        n = counter["n"]
        subject = Subject(
            name=f"Data Structures {n}",
            slug=f"dsa-{n}",
            category="Data Structures & Algorithms",
            minimum_quizzes=minimum_quizzes,
            minimum_accuracy=minimum_accuracy,
        )
        db.add(subject)
        db.flush()

        topics = [
            Topic(subject_id=subject.id, name="Arrays"),
            Topic(subject_id=subject.id, name="Graphs"),
        ]
        db.add_all(topics)
        db.flush()

        difficulties = ["easy", "medium", "hard"]
        questions = []
        for i in range(question_count):
            question = Question(
                subject_id=subject.id,
                topic_id=topics[i % 2].id,
                question_text=f"Question {i}?",
                options=[{"text": f"answer-{i}", "is_correct": True}, {"text": "other", "is_correct": False}],
                correct_answer=f"answer-{i}",
                difficulty=difficulties[i % 3],
                marks=marks,
                time_limit=30,
            )
            questions.append(question)
        db.add_all(questions)
        subject.total_questions = question_count
        db.commit()

        return subject, topics, questions

    return _make


@pytest.fixture
def take_quiz(client, db):
    """
    Generate a quiz over the whole bank and answer `correct` questions right,
    the rest wrong (or skipped when skip=True)
    """

    def _take(user, subject, correct, skip=False, time_spent=10):
        generated = client.post(
            "/api/quizzes/generate",
            json={"subject_id": str(subject.id), "question_count": subject.total_questions},
            headers=headers_for(user),
        )
        assert generated.status_code == 201, generated.text
        attempt = generated.json()

        answers = {str(q.id): q.correct_answer for q in db.query(Question).filter(Question.subject_id == subject.id)}
        submission = []
        for index, outcome in enumerate(attempt["outcomes"]):
            q_id = outcome["question_id"]
            right = answers[q_id]
            if index < correct:
                submission.append({"question_id": q_id, "user_answer": right, "time_spent": time_spent})
            elif not skip:
                submission.append({"question_id": q_id, "user_answer": "wrong", "time_spent": time_spent})

        submitted = client.put(
            f"/api/quizzes/{attempt['id']}/submit",
            json={"answers": submission},
            headers=headers_for(user),
        )
        assert submitted.status_code == 200, submitted.text
        return submitted.json()

    return _take
