"""
Interview readiness scoring
Composite 0-100 score recomputed from scratch on every submission
"""
import logging
from typing import Dict, Any, List, Sequence

from app.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


class ReadinessService:
    """
    Service for computing the interview readiness score of a subject

    Algorithm: four independently clamped components
    - Consistency (0-20): quizzes completed, full marks at 10 quizzes
    - Accuracy (0-40): average accuracy scaled to 40
    - Improvement trend (0-20): recent 3 vs previous 3 attempts, needs 6 attempts
    - Topic coverage (0-20): strength topics, full marks at 5 topics
    """

    MAX_CONSISTENCY = 20
    MAX_ACCURACY = 40
    MAX_TREND = 20
    MAX_COVERAGE = 20

    QUIZZES_FOR_FULL_CONSISTENCY = 10
    TOPICS_FOR_FULL_COVERAGE = 5
    TREND_WINDOW = 3

    def calculate_readiness(
        self,
        quizzes_completed: int,
        average_accuracy: float,
        strength_topic_count: int,
        history: Sequence[float],
    ) -> int:
        """
        Calculate the readiness score

        Args:
            quizzes_completed: Completed quizzes for the subject (already incremented)
            average_accuracy: Recomputed average accuracy (0-100)
            strength_topic_count: Strength topics of the most recent attempt
            history: Accuracies of all completed attempts, newest first

        Returns:
            Integer score in [0, 100]
        """
        components = self.breakdown(
            quizzes_completed, average_accuracy, strength_topic_count, history
        )
        score = round_half_up(sum(components.values()))
        score = min(max(score, 0), 100)

        logger.info(
            f"Readiness calculation: consistency={components['consistency']:.2f}, "
            f"accuracy={components['accuracy']:.2f}, trend={components['trend']:.2f}, "
            f"coverage={components['coverage']:.2f}, score={score}"
        )

        return score

    def breakdown(
        self,
        quizzes_completed: int,
        average_accuracy: float,
        strength_topic_count: int,
        history: Sequence[float],
    ) -> Dict[str, float]:
        """Per-component contributions, each within its band"""
        return {
            "consistency": self._consistency_score(quizzes_completed),
            "accuracy": self._accuracy_score(average_accuracy),
            "trend": self._trend_score(history),
            "coverage": self._coverage_score(strength_topic_count),
        }

    def _consistency_score(self, quizzes_completed: int) -> float:
        score = quizzes_completed / self.QUIZZES_FOR_FULL_CONSISTENCY * self.MAX_CONSISTENCY
        return min(max(score, 0), self.MAX_CONSISTENCY)

    def _accuracy_score(self, average_accuracy: float) -> float:
        score = (average_accuracy or 0) / 100 * self.MAX_ACCURACY
        return min(max(score, 0), self.MAX_ACCURACY)

    def _trend_score(self, history: Sequence[float]) -> float:
        """
        Improvement of the 3 newest attempts over the 3 before them

        Negative trends contribute 0, as does an all-zero older window.
        """
        window = self.TREND_WINDOW
        if len(history) < window * 2:
            return 0

        recent = list(history[:window])
        older = list(history[window:window * 2])
        recent_avg = sum(recent) / len(recent)
        older_avg = sum(older) / len(older)

        if older_avg == 0:
            return 0

        improvement = (recent_avg - older_avg) / older_avg * 100
        return max(min(improvement, self.MAX_TREND), 0)

    def _coverage_score(self, strength_topic_count: int) -> float:
        score = strength_topic_count / self.TOPICS_FOR_FULL_COVERAGE * self.MAX_COVERAGE
        return min(max(score, 0), self.MAX_COVERAGE)

    def recommendation(self, score: int) -> Dict[str, Any]:
        """Readiness level with a message and next steps"""
        if score >= 80:
            return {
                "level": "Interview Ready",
                "message": "Excellent! You are well-prepared for interviews in this subject.",
                "suggestions": ["Practice mock interviews", "Focus on communication skills"],
            }
        if score >= 60:
            return {
                "level": "Good Progress",
                "message": "You're making good progress. A bit more practice will make you interview-ready.",
                "suggestions": ["Review weak topics", "Take more practice quizzes", "Focus on consistency"],
            }
        if score >= 40:
            return {
                "level": "Moderate",
                "message": "You have a foundation but need more practice.",
                "suggestions": ["Strengthen fundamentals", "Practice regularly", "Focus on weak areas"],
            }
        return {
            "level": "Needs Improvement",
            "message": "Keep practicing! Focus on building strong fundamentals.",
            "suggestions": ["Start with easy difficulty", "Study concepts thoroughly", "Practice daily"],
        }


# Global instance
readiness_service = ReadinessService()


def history_accuracies(attempts: List[Any]) -> List[float]:
    """Accuracy values of completed attempts, preserving the given order"""
    return [attempt.accuracy for attempt in attempts]
