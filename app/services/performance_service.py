"""
Performance aggregation: topic-wise and difficulty-wise accuracy buckets
"""
import logging
from typing import Dict, Any, List

from app.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")


class PerformanceService:
    """Rolls graded outcomes up into topic and difficulty buckets"""

    def aggregate(
        self,
        outcomes: List[Dict[str, Any]],
        question_meta: Dict[str, Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Build the performance breakdown of a graded attempt

        Args:
            outcomes: Graded question outcomes (attempt order)
            question_meta: {question_id: {"topic": ..., "difficulty": ...}}

        Returns:
            {"topic_wise_score": [...], "difficulty_wise_score": {...}}
        """
        # dicts keep insertion order => first-encountered topic order
        topics: Dict[str, Dict[str, int]] = {}
        difficulties = {d: {"total": 0, "correct": 0} for d in DIFFICULTIES}

        for outcome in outcomes:
            meta = question_meta.get(outcome["question_id"], {})
            topic = meta.get("topic")
            difficulty = meta.get("difficulty")

            if topic is not None:
                bucket = topics.setdefault(str(topic), {"total": 0, "correct": 0})
                bucket["total"] += 1
                bucket["correct"] += int(outcome["is_correct"])

            if difficulty in difficulties:
                difficulties[difficulty]["total"] += 1
                difficulties[difficulty]["correct"] += int(outcome["is_correct"])

        topic_wise_score = [
            {
                "topic": topic,
                "total": stats["total"],
                "correct": stats["correct"],
                "accuracy": self._accuracy(stats["correct"], stats["total"]),
            }
            for topic, stats in topics.items()
        ]

        difficulty_wise_score = {
            d: {
                "total": stats["total"],
                "correct": stats["correct"],
                "accuracy": self._accuracy(stats["correct"], stats["total"]),
            }
            for d, stats in difficulties.items()
        }

        return {
            "topic_wise_score": topic_wise_score,
            "difficulty_wise_score": difficulty_wise_score,
        }

    @staticmethod
    def _accuracy(correct: int, total: int) -> float:
        return round_half_up(correct / total * 100, 2) if total > 0 else 0

    def classify_topics(
        self,
        topic_wise_score: List[Dict[str, Any]],
        strength_threshold: float,
        weakness_threshold: float,
    ) -> Dict[str, List[str]]:
        """Split topics into strengths (>= strength) and weaknesses (< weakness)"""
        return {
            "strength": [t["topic"] for t in topic_wise_score if t["accuracy"] >= strength_threshold],
            "weak": [t["topic"] for t in topic_wise_score if t["accuracy"] < weakness_threshold],
        }


# Global instance
performance_service = PerformanceService()
