from app.services.performance_service import PerformanceService


def outcome(q_id, correct):
    return {"question_id": q_id, "is_correct": correct, "skipped": False}


def test_topics_in_first_encountered_order_with_accuracy():
    service = PerformanceService()
    outcomes = [outcome("a", True), outcome("b", False), outcome("c", True), outcome("d", True)]
    meta = {
        "a": {"topic": "graphs", "difficulty": "easy"},
        "b": {"topic": "arrays", "difficulty": "easy"},
        "c": {"topic": "graphs", "difficulty": "hard"},
        "d": {"topic": "arrays", "difficulty": "hard"},
    }

    performance = service.aggregate(outcomes, meta)

    assert performance["topic_wise_score"] == [
        {"topic": "graphs", "total": 2, "correct": 2, "accuracy": 100.0},
        {"topic": "arrays", "total": 2, "correct": 1, "accuracy": 50.0},
    ]


def test_all_difficulty_buckets_present_and_empty_ones_zero():
    service = PerformanceService()
    outcomes = [outcome("a", True), outcome("b", False), outcome("c", True)]
    meta = {
        "a": {"topic": "t", "difficulty": "easy"},
        "b": {"topic": "t", "difficulty": "easy"},
        "c": {"topic": "t", "difficulty": "easy"},
    }

    buckets = service.aggregate(outcomes, meta)["difficulty_wise_score"]

    assert set(buckets) == {"easy", "medium", "hard"}
    assert buckets["easy"] == {"total": 3, "correct": 2, "accuracy": 66.67}
    assert buckets["medium"] == {"total": 0, "correct": 0, "accuracy": 0}
    assert buckets["hard"] == {"total": 0, "correct": 0, "accuracy": 0}


def test_empty_attempt():
    performance = PerformanceService().aggregate([], {})

    assert performance["topic_wise_score"] == []
    assert all(b["total"] == 0 for b in performance["difficulty_wise_score"].values())


def test_classify_topics_thresholds():
    service = PerformanceService()
    scores = [
        {"topic": "strong", "accuracy": 75},
        {"topic": "middle", "accuracy": 50},
        {"topic": "weak", "accuracy": 49.99},
        {"topic": "zero", "accuracy": 0},
    ]

    classified = service.classify_topics(scores, 75, 50)

    assert classified["strength"] == ["strong"]
    assert classified["weak"] == ["weak", "zero"]


def test_topic_accuracy_halves_round_up():
    service = PerformanceService()
    outcomes = [outcome("q0", True)] + [outcome(f"q{i}", False) for i in range(1, 32)]
    meta = {f"q{i}": {"topic": "heaps", "difficulty": "medium"} for i in range(32)}

    performance = service.aggregate(outcomes, meta)

    assert performance["topic_wise_score"][0]["accuracy"] == 3.13
    assert performance["difficulty_wise_score"]["medium"]["accuracy"] == 3.13
