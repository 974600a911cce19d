"""
Quiz grading service
Exact, case-sensitive answer matching against the question bank
"""
import logging
from typing import Dict, Any, List, Optional, Tuple

from app.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


class GradingService:
    """
    Service for grading quiz submissions

    Strategy:
    - Each attempt question is matched to a submission by question id (string equality)
    - Missing submission, None or "" answer => skipped, 0 marks, 0 time
    - Otherwise correct iff the answer equals the stored correct answer exactly
    """

    def grade_quiz(
        self,
        questions: List[Dict[str, Any]],
        answers: List[Dict[str, Any]],
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Grade a complete quiz submission

        Args:
            questions: Attempt questions in order, each with
                question_id, correct_answer and marks
            answers: Submissions [{question_id, user_answer, time_spent}],
                not necessarily covering every question

        Returns:
            Tuple of (graded outcomes, results summary)
        """

        submissions = self._index_submissions(answers)
        outcomes = []

        for question in questions:
            q_id = str(question["question_id"])
            submission = submissions.get(q_id)
            outcomes.append(self._grade_question(question, submission))

        results = self.summarize(questions, outcomes)

        logger.info(
            f"Quiz graded: {results['correct_answers']}/{results['total_questions']} correct, "
            f"{results['skipped_questions']} skipped, accuracy {results['accuracy']}%"
        )

        return outcomes, results

    def _index_submissions(self, answers: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Map question id -> submission, first one wins on duplicates"""
        indexed = {}
        for answer in answers:
            q_id = str(answer.get("question_id"))
            if q_id not in indexed:
                indexed[q_id] = answer
        return indexed

    def _grade_question(
        self,
        question: Dict[str, Any],
        submission: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Grade a single question against its (optional) submission"""

        q_id = str(question["question_id"])
        user_answer = submission.get("user_answer") if submission else None

        if self.is_skipped(user_answer):
            return {
                "question_id": q_id,
                "user_answer": None,
                "is_correct": False,
                "time_spent": 0,
                "marks_awarded": 0,
                "skipped": True,
            }

        is_correct = user_answer == question["correct_answer"]

        return {
            "question_id": q_id,
            "user_answer": user_answer,
            "is_correct": is_correct,
            "time_spent": self._clamp_time(submission.get("time_spent")),
            "marks_awarded": question.get("marks", 1) if is_correct else 0,
            "skipped": False,
        }

    @staticmethod
    def is_skipped(user_answer: Any) -> bool:
        """None and the empty string both count as no answer"""
        return user_answer is None or user_answer == ""

    @staticmethod
    def _clamp_time(time_spent: Any) -> int:
        try:
            value = int(time_spent or 0)
        except (TypeError, ValueError):
            return 0
        return max(value, 0)

    def summarize(
        self,
        questions: List[Dict[str, Any]],
        outcomes: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Build the results summary for graded outcomes

        accuracy and average time are over attempted questions only
        """
        total = len(outcomes)
        skipped = sum(1 for o in outcomes if o["skipped"])
        correct = sum(1 for o in outcomes if o["is_correct"])
        attempted = total - skipped
        total_time = sum(o["time_spent"] for o in outcomes)

        accuracy = round_half_up(correct / attempted * 100, 2) if attempted > 0 else 0
        avg_time = round_half_up(total_time / attempted) if attempted > 0 else 0

        return {
            "total_questions": total,
            "attempted_questions": attempted,
            "correct_answers": correct,
            "incorrect_answers": total - correct - skipped,
            "skipped_questions": skipped,
            "total_marks": sum(q.get("marks", 1) for q in questions),
            "marks_obtained": sum(o["marks_awarded"] for o in outcomes),
            "accuracy": accuracy,
            "total_time_spent": total_time,
            "average_time_per_question": avg_time,
        }


# Global instance
grading_service = GradingService()
