"""
Attempt ledger
Records at most one completed attempt per (student, quiz) together with
its leaderboard score record
"""

import logging
from typing import Any, List, Optional, Sequence

from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from quizboard.core.exceptions import AlreadyAttemptedError, NotFoundError, ScorePersistenceError
from quizboard.models.quiz import Attempt, Quiz, ScoreRecord
from quizboard.services.scoring import score_answers

logger = logging.getLogger(__name__)

SUBMISSIONS = Counter(
    "quizboard_submissions_total",
    "Quiz submissions by outcome",
    ["outcome"],
)


class AttemptService:
    """Quiz submission and attempt history"""

    @staticmethod
    def get_attempt(db: Session, student_id: int, quiz_id: int) -> Optional[Attempt]:
        return (
            db.query(Attempt)
            .filter(Attempt.student_id == student_id, Attempt.quiz_id == quiz_id)
            .first()
        )

    @staticmethod
    def submit(db: Session, student_id: int, quiz_id: int, answers: Sequence[Any]) -> Attempt:
        """
        Score and persist a student's answers

        The attempt and its score record are committed in one transaction.
        The (student, quiz) unique constraint decides concurrent duplicates;
        the lookup below only short-circuits the common case.

        Raises:
            AlreadyAttemptedError: an attempt already exists (carries it)
            NotFoundError: quiz does not exist
            AnswerCountMismatchError: fewer answers than questions
            ScorePersistenceError: the write failed, nothing was stored
        """
        existing = AttemptService.get_attempt(db, student_id, quiz_id)
        if existing:
            SUBMISSIONS.labels(outcome="duplicate").inc()
            raise AlreadyAttemptedError(existing)

        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise NotFoundError("Quiz")

        result = score_answers(quiz.questions, answers)

        attempt = Attempt(
            student_id=student_id,
            quiz_id=quiz.id,
            score=result.raw_score,
            total_questions=result.total_questions,
            percentage=result.percentage,
            questions=result.breakdown,
        )
        score_record = ScoreRecord(
            quiz_id=quiz.id,
            student_id=student_id,
            score=result.raw_score,
            total_questions=result.total_questions,
            percentage=result.percentage,
        )

        try:
            db.add(attempt)
            db.add(score_record)
            db.commit()
        except IntegrityError:
            db.rollback()
            winner = AttemptService.get_attempt(db, student_id, quiz_id)
            if winner is None:
                logger.error(
                    "Score record conflict without an attempt",
                    extra={"student_id": student_id, "quiz_id": quiz_id},
                )
                SUBMISSIONS.labels(outcome="error").inc()
                raise ScorePersistenceError(details={"quiz_id": quiz_id})
            logger.info(
                "Concurrent duplicate submission resolved by unique constraint",
                extra={"student_id": student_id, "quiz_id": quiz_id},
            )
            SUBMISSIONS.labels(outcome="duplicate").inc()
            raise AlreadyAttemptedError(winner)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Failed to persist attempt: {e}",
                extra={"student_id": student_id, "quiz_id": quiz_id},
            )
            SUBMISSIONS.labels(outcome="error").inc()
            raise ScorePersistenceError(details={"quiz_id": quiz_id})

        db.refresh(attempt)
        SUBMISSIONS.labels(outcome="scored").inc()
        logger.info(
            "Quiz submitted",
            extra={
                "student_id": student_id,
                "quiz_id": quiz_id,
                "score": result.raw_score,
                "total_questions": result.total_questions,
            },
        )
        return attempt

    @staticmethod
    def list_completed(db: Session, student_id: int) -> List[Attempt]:
        """Attempts of a student whose quiz still exists, newest first"""
        attempts = (
            db.query(Attempt)
            .filter(Attempt.student_id == student_id)
            .order_by(Attempt.completed_at.desc(), Attempt.id.desc())
            .all()
        )
        return [attempt for attempt in attempts if attempt.quiz is not None]

    @staticmethod
    def rebuild_score_records(db: Session, quiz_id: Optional[int] = None) -> int:
        """
        Recreate score records missing for existing attempts

        Safe to run repeatedly. Returns the number of records created.
        """
        query = (
            db.query(Attempt)
            .outerjoin(
                ScoreRecord,
                (ScoreRecord.quiz_id == Attempt.quiz_id) & (ScoreRecord.student_id == Attempt.student_id),
            )
            .filter(ScoreRecord.id.is_(None), Attempt.quiz_id.isnot(None))
        )
        if quiz_id is not None:
            query = query.filter(Attempt.quiz_id == quiz_id)

        created = 0
        for attempt in query.all():
            db.add(
                ScoreRecord(
                    quiz_id=attempt.quiz_id,
                    student_id=attempt.student_id,
                    score=attempt.score,
                    total_questions=attempt.total_questions,
                    percentage=attempt.percentage,
                    created_at=attempt.completed_at,
                )
            )
            created += 1

        if created:
            try:
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Score record backfill failed: {e}")
                raise ScorePersistenceError(details={"quiz_id": quiz_id})
            logger.warning(f"Backfilled {created} missing score records", extra={"quiz_id": quiz_id})
        return created


attempt_service = AttemptService()
