from app.services.grading_service import GradingService


def make_questions(count, marks=1):
    return [
        {"question_id": f"q{i}", "correct_answer": f"answer-{i}", "marks": marks}
        for i in range(count)
    ]


def test_ten_question_example():
    service = GradingService()
    questions = make_questions(10)

    answers = [{"question_id": f"q{i}", "user_answer": f"answer-{i}", "time_spent": 10} for i in range(7)]
    answers.append({"question_id": "q7", "user_answer": "nope", "time_spent": 10})
    # q8 missing entirely, q9 answered with an empty string
    answers.append({"question_id": "q9", "user_answer": "", "time_spent": 25})

    outcomes, results = service.grade_quiz(questions, answers)

    assert results["total_questions"] == 10
    assert results["attempted_questions"] == 8
    assert results["correct_answers"] == 7
    assert results["incorrect_answers"] == 1
    assert results["skipped_questions"] == 2
    assert results["accuracy"] == 87.5
    assert results["total_time_spent"] == 80
    assert results["average_time_per_question"] == 10

    assert results["attempted_questions"] + results["skipped_questions"] == results["total_questions"]
    assert (
        results["correct_answers"] + results["incorrect_answers"] + results["skipped_questions"]
        == results["total_questions"]
    )

    skipped = [o for o in outcomes if o["skipped"]]
    assert [o["question_id"] for o in skipped] == ["q8", "q9"]
    assert all(o["time_spent"] == 0 and o["marks_awarded"] == 0 and not o["is_correct"] for o in skipped)


def test_outcomes_follow_attempt_order_not_submission_order():
    service = GradingService()
    questions = make_questions(3)
    answers = [
        {"question_id": "q2", "user_answer": "answer-2", "time_spent": 1},
        {"question_id": "q0", "user_answer": "answer-0", "time_spent": 1},
    ]

    outcomes, _ = service.grade_quiz(questions, answers)

    assert [o["question_id"] for o in outcomes] == ["q0", "q1", "q2"]
    assert [o["is_correct"] for o in outcomes] == [True, False, True]


def test_matching_is_exact_and_case_sensitive():
    service = GradingService()
    questions = [{"question_id": "q0", "correct_answer": "Paris", "marks": 1}]

    outcomes, results = service.grade_quiz(questions, [{"question_id": "q0", "user_answer": "paris"}])
    assert outcomes[0]["is_correct"] is False
    assert outcomes[0]["skipped"] is False
    assert results["incorrect_answers"] == 1

    outcomes, _ = service.grade_quiz(questions, [{"question_id": "q0", "user_answer": "Paris "}])
    assert outcomes[0]["is_correct"] is False


def test_whitespace_answer_counts_as_attempted():
    service = GradingService()
    questions = make_questions(1)

    outcomes, results = service.grade_quiz(questions, [{"question_id": "q0", "user_answer": " "}])

    assert outcomes[0]["skipped"] is False
    assert results["attempted_questions"] == 1
    assert results["accuracy"] == 0


def test_marks_and_time_clamping():
    service = GradingService()
    questions = make_questions(3, marks=4)
    answers = [
        {"question_id": "q0", "user_answer": "answer-0", "time_spent": -15},
        {"question_id": "q1", "user_answer": "answer-1"},
        {"question_id": "q2", "user_answer": "x", "time_spent": None},
    ]

    outcomes, results = service.grade_quiz(questions, answers)

    assert [o["time_spent"] for o in outcomes] == [0, 0, 0]
    assert [o["marks_awarded"] for o in outcomes] == [4, 4, 0]
    assert results["total_marks"] == 12
    assert results["marks_obtained"] == 8
    assert results["accuracy"] == 66.67


def test_nothing_answered_has_zero_accuracy_and_time():
    service = GradingService()

    outcomes, results = service.grade_quiz(make_questions(4), [])

    assert all(o["skipped"] for o in outcomes)
    assert results["attempted_questions"] == 0
    assert results["accuracy"] == 0
    assert results["average_time_per_question"] == 0


def test_question_ids_compared_as_strings_and_first_duplicate_wins():
    service = GradingService()
    questions = [{"question_id": "42", "correct_answer": "yes", "marks": 1}]
    answers = [
        {"question_id": 42, "user_answer": "yes", "time_spent": 5},
        {"question_id": "42", "user_answer": "no", "time_spent": 9},
    ]

    outcomes, _ = service.grade_quiz(questions, answers)

    assert outcomes[0]["is_correct"] is True
    assert outcomes[0]["time_spent"] == 5


def test_average_time_uses_attempted_questions():
    service = GradingService()
    questions = make_questions(4)
    answers = [
        {"question_id": "q0", "user_answer": "answer-0", "time_spent": 10},
        {"question_id": "q1", "user_answer": "x", "time_spent": 11},
        {"question_id": "q2", "user_answer": "answer-2", "time_spent": 10},
    ]

    _, results = service.grade_quiz(questions, answers)

    assert results["total_time_spent"] == 31
    assert results["average_time_per_question"] == 10


def test_halves_round_up():
    service = GradingService()

    _, results = service.grade_quiz(
        make_questions(2),
        [
            {"question_id": "q0", "user_answer": "answer-0", "time_spent": 2},
            {"question_id": "q1", "user_answer": "answer-1", "time_spent": 3},
        ],
    )
    assert results["average_time_per_question"] == 3

    answers = [{"question_id": "q0", "user_answer": "answer-0"}]
    answers += [{"question_id": f"q{i}", "user_answer": "nope"} for i in range(1, 32)]
    _, results = service.grade_quiz(make_questions(32), answers)
    # 1/32 = 3.125%
    assert results["accuracy"] == 3.13
