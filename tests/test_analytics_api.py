import uuid

from conftest import headers_for


def test_dashboard(client, user, make_bank, take_quiz):
    subject, _, _ = make_bank()
    take_quiz(user, subject, correct=6)
    take_quiz(user, subject, correct=3)

    response = client.get("/api/analytics/dashboard", headers=headers_for(user))

    assert response.status_code == 200
    data = response.json()
    assert data["overall_stats"]["total_quizzes"] == 2
    assert data["overall_stats"]["total_questions"] == 12
    assert data["overall_stats"]["overall_accuracy"] == 75
    assert data["overall_stats"]["current_streak"] == 1
    # oldest first
    assert [p["accuracy"] for p in data["performance_trend"]] == [100, 50]
    [performance] = data["subject_performance"]
    assert performance["quizzes_completed"] == 2
    assert performance["average_accuracy"] == 75
    assert data["time_analysis"] == {"total_time_spent": 120, "avg_time_per_quiz": 60}
    assert data["difficulty_performance"]["hard"]["total"] == 4


def test_dashboard_for_new_user(client, user):
    data = client.get("/api/analytics/dashboard", headers=headers_for(user)).json()

    assert data["overall_stats"]["overall_accuracy"] == 0
    assert data["performance_trend"] == []
    assert data["subject_performance"] == []


def test_subject_analytics(client, user, make_bank, take_quiz):
    subject, _, _ = make_bank()
    take_quiz(user, subject, correct=6)
    take_quiz(user, subject, correct=6)

    response = client.get(f"/api/analytics/subjects/{subject.id}", headers=headers_for(user))

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["quizzes_completed"] == 2
    assert {t["topic"] for t in data["topic_analysis"]} == {"Arrays", "Graphs"}
    assert all(t["status"] == "Strong" for t in data["topic_analysis"])
    assert [p["attempt"] for p in data["progress_timeline"]] == [1, 2]
    assert len(data["speed_data"]) == 2
    # consistency 4 + accuracy 40 + trend 0 + coverage 8
    assert data["readiness_breakdown"]["overall"] == 52
    assert data["readiness_breakdown"]["components"] == {
        "consistency": 4, "accuracy": 40, "trend": 0, "coverage": 8,
    }
    assert data["readiness_breakdown"]["recommendation"]["level"] == "Moderate"


def test_subject_analytics_without_progress(client, user, make_bank):
    subject, _, _ = make_bank()

    response = client.get(f"/api/analytics/subjects/{subject.id}", headers=headers_for(user))

    assert response.status_code == 404


def test_subject_analytics_unknown_subject(client, user):
    response = client.get(f"/api/analytics/subjects/{uuid.uuid4()}", headers=headers_for(user))

    assert response.status_code == 404
