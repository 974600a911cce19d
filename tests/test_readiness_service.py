import pytest

from app.services.readiness_service import ReadinessService


def test_worked_example():
    service = ReadinessService()
    history = [85, 85, 85, 70, 70, 70]

    breakdown = service.breakdown(10, 80, 2, history)

    assert breakdown["consistency"] == 20
    assert breakdown["accuracy"] == pytest.approx(32)
    # raw improvement is about 21.4, clamped
    assert breakdown["trend"] == 20
    assert breakdown["coverage"] == pytest.approx(8)
    assert service.calculate_readiness(10, 80, 2, history) == 80


def test_zero_history_scores_accuracy_component_only():
    service = ReadinessService()

    score = service.calculate_readiness(0, 80, 0, [])

    assert score == 32
    assert isinstance(score, int)


def test_trend_needs_six_attempts():
    service = ReadinessService()

    assert service.breakdown(5, 60, 0, [90, 90, 90, 10, 10])["trend"] == 0


def test_trend_with_zero_older_average_is_zero():
    service = ReadinessService()

    breakdown = service.breakdown(6, 40, 0, [80, 80, 80, 0, 0, 0])

    assert breakdown["trend"] == 0
    assert service.calculate_readiness(6, 40, 0, [80, 80, 80, 0, 0, 0]) == 28


def test_declining_trend_is_not_a_penalty():
    service = ReadinessService()

    assert service.breakdown(6, 50, 0, [40, 40, 40, 80, 80, 80])["trend"] == 0


def test_partial_improvement_and_older_attempts_ignored():
    service = ReadinessService()
    # recent avg 55, older avg 50 -> 10% improvement; 7th attempt is outside the window
    history = [55, 55, 55, 50, 50, 50, 0]

    assert service.breakdown(7, 50, 0, history)["trend"] == pytest.approx(10)


def test_components_are_clamped_and_score_bounded():
    service = ReadinessService()

    breakdown = service.breakdown(40, 100, 12, [100, 100, 100, 10, 10, 10])

    assert breakdown == {"consistency": 20, "accuracy": 40, "trend": 20, "coverage": 20}
    assert service.calculate_readiness(40, 100, 12, [100, 100, 100, 10, 10, 10]) == 100
    assert service.calculate_readiness(0, 0, 0, []) == 0


def test_score_is_rounded():
    service = ReadinessService()

    # 3/10*20 = 6, 77.77/100*40 = 31.108 -> 37.108
    assert service.calculate_readiness(3, 77.77, 0, [70, 80, 90]) == 37


def test_half_point_score_rounds_up():
    service = ReadinessService()

    # 1/10*20 = 2, 81.25/100*40 = 32.5 -> 34.5
    assert service.calculate_readiness(1, 81.25, 0, [81.25]) == 35


def test_recommendation_levels():
    service = ReadinessService()

    assert service.recommendation(80)["level"] == "Interview Ready"
    assert service.recommendation(60)["level"] == "Good Progress"
    assert service.recommendation(40)["level"] == "Moderate"
    assert service.recommendation(39)["level"] == "Needs Improvement"
