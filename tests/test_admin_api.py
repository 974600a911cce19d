from datetime import timedelta

from conftest import headers_for
from app.utils.clock import utcnow


def test_platform_analytics(client, db, admin, user, make_user, make_bank, take_quiz):
    bob = make_user("Bob")
    idle = make_user("Cy")
    idle.last_activity_date = utcnow() - timedelta(days=40)
    db.commit()
    subject, _, _ = make_bank()
    take_quiz(user, subject, correct=6)
    take_quiz(bob, subject, correct=3)

    response = client.get("/api/admin/analytics", headers=headers_for(admin))

    assert response.status_code == 200
    data = response.json()
    assert data["overview"] == {
        "total_users": 3,
        "active_users": 2,
        "total_quizzes": 2,
        "avg_quizzes_per_user": 0.67,
        "total_questions": 6,
        "total_subjects": 1,
    }
    [usage] = data["subject_stats"]
    assert usage["total_attempts"] == 2
    assert usage["average_score"] == 75
    assert data["difficulty_stats"] == {"easy": 2, "medium": 2, "hard": 2}
    assert [(u["name"], u["accuracy"]) for u in data["top_users"]] == [("Ada", 100), ("Bob", 50)]
    assert [a["user"] for a in data["recent_activity"]] == ["Bob", "Ada"]
    assert data["recent_activity"][0]["subject"] == subject.name


def test_platform_analytics_when_empty(client, admin):
    data = client.get("/api/admin/analytics", headers=headers_for(admin)).json()

    assert data["overview"]["total_users"] == 0
    assert data["overview"]["avg_quizzes_per_user"] == 0
    assert data["top_users"] == []
    assert data["recent_activity"] == []


def test_platform_analytics_requires_admin(client, user):
    response = client.get("/api/admin/analytics", headers=headers_for(user))

    assert response.status_code == 403
