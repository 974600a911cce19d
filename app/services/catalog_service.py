"""
Subject catalog and question bank administration
"""
import logging
import math
from collections import Counter
from typing import Dict, Any, List, Optional

from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from app.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from app.models import Question, Subject, Topic, User
from app.schemas.subject import (
    SubjectCreate, SubjectUpdate, TopicCreate, TopicUpdate, QuestionCreate, QuestionUpdate
)
from app.services.performance_service import DIFFICULTIES
from app.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Admin writes to subjects, topics and questions.

    Deletes are soft (is_active=False) so completed attempts can still load
    their questions. Topic.question_count and Subject.total_questions track
    active questions and only move through atomic SQL updates.
    """

    def get_subject(self, db: Session, subject_id) -> Subject:
        subject = db.get(Subject, subject_id)
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    def get_topic(self, db: Session, subject: Subject, topic_id) -> Topic:
        topic = db.get(Topic, topic_id)
        if not topic or topic.subject_id != subject.id:
            raise NotFoundError("Topic not found")
        return topic

    def get_question(self, db: Session, subject: Subject, question_id) -> Question:
        question = db.get(Question, question_id)
        if not question or question.subject_id != subject.id:
            raise NotFoundError("Question not found")
        return question

    # Subjects

    def _check_subject_unique(self, db: Session, name, slug, exclude_id=None) -> None:
        clauses = []
        if name is not None:
            clauses.append(Subject.name == name)
        if slug is not None:
            clauses.append(Subject.slug == slug)
        if not clauses:
            return

        condition = clauses[0] if len(clauses) == 1 else clauses[0] | clauses[1]
        query = db.query(Subject).filter(condition)
        if exclude_id is not None:
            query = query.filter(Subject.id != exclude_id)
        if query.first():
            raise InvalidInputError("A subject with this name or slug already exists")

    def create_subject(self, db: Session, payload: SubjectCreate, admin: User) -> Subject:
        self._check_subject_unique(db, payload.name, payload.slug)

        subject = Subject(**payload.model_dump())
        db.add(subject)
        db.commit()
        db.refresh(subject)

        logger.info(f"Subject created: {subject.slug} by {admin.id}")
        return subject

    def update_subject(self, db: Session, subject_id, payload: SubjectUpdate, admin: User) -> Subject:
        subject = self.get_subject(db, subject_id)
        changes = payload.model_dump(exclude_unset=True)
        self._check_subject_unique(db, changes.get("name"), changes.get("slug"), exclude_id=subject.id)

        for field, value in changes.items():
            if value is None and field != "description":
                continue
            setattr(subject, field, value)

        db.commit()
        db.refresh(subject)

        logger.info(f"Subject updated: {subject.slug} by {admin.id} ({', '.join(changes) or 'no changes'})")
        return subject

    def deactivate_subject(self, db: Session, subject_id, admin: User) -> Subject:
        """Hide a subject from the catalog and from quiz generation"""
        subject = self.get_subject(db, subject_id)
        if not subject.is_active:
            raise InvalidStateError("Subject is already inactive")

        subject.is_active = False
        db.commit()
        db.refresh(subject)

        logger.info(f"Subject deactivated: {subject.slug} by {admin.id}")
        return subject

    # Topics

    def create_topic(self, db: Session, subject_id, payload: TopicCreate) -> Topic:
        subject = self.get_subject(db, subject_id)

        if db.query(Topic).filter(Topic.subject_id == subject.id, Topic.name == payload.name).first():
            raise InvalidInputError("Topic already exists in this subject")

        topic = Topic(subject_id=subject.id, **payload.model_dump())
        db.add(topic)
        db.commit()
        db.refresh(topic)

        logger.info(f"Topic created: {topic.name} in {subject.slug}")
        return topic

    def list_topics(self, db: Session, subject_id) -> List[Topic]:
        subject = self.get_subject(db, subject_id)
        return (
            db.query(Topic)
            .filter(Topic.subject_id == subject.id, Topic.is_active.is_(True))
            .order_by(Topic.name)
            .all()
        )

    def update_topic(self, db: Session, subject_id, topic_id, payload: TopicUpdate) -> Topic:
        subject = self.get_subject(db, subject_id)
        topic = self.get_topic(db, subject, topic_id)
        changes = payload.model_dump(exclude_unset=True)

        name = changes.get("name")
        if name is not None and name != topic.name:
            clash = db.query(Topic).filter(
                Topic.subject_id == subject.id, Topic.name == name, Topic.id != topic.id
            ).first()
            if clash:
                raise InvalidInputError("Topic already exists in this subject")

        for field, value in changes.items():
            if value is None and field == "name":
                continue
            setattr(topic, field, value)

        db.commit()
        db.refresh(topic)

        logger.info(f"Topic updated: {topic.id} in {subject.slug}")
        return topic

    def deactivate_topic(self, db: Session, subject_id, topic_id) -> Topic:
        """Deactivate a topic along with its active questions"""
        subject = self.get_subject(db, subject_id)
        topic = self.get_topic(db, subject, topic_id)
        if not topic.is_active:
            raise InvalidStateError("Topic is already inactive")

        active_questions = db.query(func.count(Question.id)).filter(
            Question.topic_id == topic.id, Question.is_active.is_(True)
        ).scalar() or 0

        db.execute(
            update(Question)
            .where(Question.topic_id == topic.id, Question.is_active.is_(True))
            .values(is_active=False)
        )
        db.execute(
            update(Subject)
            .where(Subject.id == subject.id)
            .values(total_questions=Subject.total_questions - active_questions)
        )
        db.execute(
            update(Topic).where(Topic.id == topic.id).values(is_active=False, question_count=0)
        )
        db.commit()
        db.refresh(topic)

        logger.info(
            f"Topic deactivated: {topic.id} in {subject.slug}, {active_questions} questions retired"
        )
        return topic

    # Questions

    def add_questions(
        self,
        db: Session,
        subject_id,
        payloads: List[QuestionCreate],
        admin: User,
    ) -> List[Question]:
        """
        Add one or more questions in a single transaction

        Every topic must be an active topic of the subject, otherwise nothing
        is written.

        Raises:
            NotFoundError: subject missing
            InvalidInputError: a topic is missing, inactive or in another subject
        """
        subject = self.get_subject(db, subject_id)

        topic_ids = {payload.topic_id for payload in payloads}
        topics = {
            t.id: t
            for t in db.query(Topic).filter(Topic.id.in_(list(topic_ids))).all()
        }
        for topic_id in topic_ids:
            topic = topics.get(topic_id)
            if not topic or topic.subject_id != subject.id or not topic.is_active:
                raise InvalidInputError(f"Topic {topic_id} does not belong to this subject")

        questions = [
            Question(subject_id=subject.id, created_by=admin.id, **payload.model_dump())
            for payload in payloads
        ]
        db.add_all(questions)

        per_topic = Counter(payload.topic_id for payload in payloads)
        for topic_id, count in per_topic.items():
            db.execute(
                update(Topic).where(Topic.id == topic_id).values(question_count=Topic.question_count + count)
            )
        db.execute(
            update(Subject)
            .where(Subject.id == subject.id)
            .values(total_questions=Subject.total_questions + len(questions))
        )
        db.commit()
        for question in questions:
            db.refresh(question)

        logger.info(f"{len(questions)} question(s) added to {subject.slug} by {admin.id}")
        return questions

    def list_questions(
        self,
        db: Session,
        subject_id,
        topic_id=None,
        difficulty: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Active questions of a subject, newest first"""
        subject = self.get_subject(db, subject_id)

        query = db.query(Question).filter(
            Question.subject_id == subject.id,
            Question.is_active.is_(True),
        )
        if topic_id is not None:
            query = query.filter(Question.topic_id == topic_id)
        if difficulty is not None:
            query = query.filter(Question.difficulty == difficulty)

        total = query.count()
        items = (
            query.order_by(Question.created_at.desc(), Question.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "items": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    def update_question(
        self,
        db: Session,
        subject_id,
        question_id,
        payload: QuestionUpdate,
    ) -> Question:
        """
        Edit a question; moving it to another topic shifts the topic counts

        Answers already graded are not re-graded.
        """
        subject = self.get_subject(db, subject_id)
        question = self.get_question(db, subject, question_id)
        changes = payload.model_dump(exclude_unset=True)

        new_topic_id = changes.get("topic_id")
        if new_topic_id is not None and new_topic_id != question.topic_id:
            new_topic = db.get(Topic, new_topic_id)
            if not new_topic or new_topic.subject_id != subject.id or not new_topic.is_active:
                raise InvalidInputError("Topic does not belong to this subject")
            if question.is_active:
                db.execute(
                    update(Topic)
                    .where(Topic.id == question.topic_id)
                    .values(question_count=Topic.question_count - 1)
                )
                db.execute(
                    update(Topic)
                    .where(Topic.id == new_topic.id)
                    .values(question_count=Topic.question_count + 1)
                )

        for field, value in changes.items():
            # explanation is the only nullable column
            if value is None and field != "explanation":
                continue
            setattr(question, field, value)

        db.commit()
        db.refresh(question)

        logger.info(f"Question updated: {question.id} in {subject.slug}")
        return question

    def deactivate_question(self, db: Session, subject_id, question_id) -> Question:
        subject = self.get_subject(db, subject_id)
        question = self.get_question(db, subject, question_id)
        if not question.is_active:
            raise InvalidStateError("Question is already inactive")

        question.is_active = False
        db.execute(
            update(Topic)
            .where(Topic.id == question.topic_id)
            .values(question_count=Topic.question_count - 1)
        )
        db.execute(
            update(Subject)
            .where(Subject.id == subject.id)
            .values(total_questions=Subject.total_questions - 1)
        )
        db.commit()
        db.refresh(question)

        logger.info(f"Question deactivated: {question.id} in {subject.slug}")
        return question

    def question_stats(self, db: Session, subject_id) -> Dict[str, Any]:
        """
        Question bank statistics for a subject

        Returns:
            Active question count, counts per difficulty and topic, mean
            attempts per question and mean correct rate (percent)
        """
        subject = self.get_subject(db, subject_id)
        active = (Question.subject_id == subject.id, Question.is_active.is_(True))

        correct_rate = case(
            (
                Question.total_attempts > 0,
                Question.correct_attempts * 100.0 / Question.total_attempts,
            ),
            else_=0.0,
        )
        total, avg_attempts, avg_correct_rate = db.query(
            func.count(Question.id),
            func.avg(Question.total_attempts),
            func.avg(correct_rate),
        ).filter(*active).one()

        by_difficulty = {d: 0 for d in DIFFICULTIES}
        for difficulty, count in (
            db.query(Question.difficulty, func.count(Question.id))
            .filter(*active)
            .group_by(Question.difficulty)
            .all()
        ):
            by_difficulty[difficulty] = count

        by_topic = [
            {"topic_id": topic_id, "topic": name, "count": count}
            for topic_id, name, count in (
                db.query(Topic.id, Topic.name, func.count(Question.id))
                .join(Question, Question.topic_id == Topic.id)
                .filter(*active)
                .group_by(Topic.id, Topic.name)
                .order_by(func.count(Question.id).desc(), Topic.name)
                .all()
            )
        ]

        return {
            "total": total or 0,
            "by_difficulty": by_difficulty,
            "avg_attempts": round_half_up(float(avg_attempts or 0), 2),
            "avg_correct_rate": round_half_up(float(avg_correct_rate or 0), 2),
            "by_topic": by_topic,
        }


# Global instance
catalog_service = CatalogService()
