"""Quiz authoring service"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quizboard.core.exceptions import NotFoundError, PersistenceError, ValidationError
from quizboard.models.quiz import Attempt, Question, QuestionKind, Quiz, ScoreRecord
from quizboard.services.importer import parse_questions
from quizboard.utils.validators import validate_quiz

logger = logging.getLogger(__name__)


def _build_questions(questions: List[Dict[str, Any]]) -> List[Question]:
    return [
        Question(
            text=q["question"],
            options=list(q["options"]),
            correct_answer=q["correctAnswer"],
            kind=QuestionKind(q["kind"]),
        )
        for q in questions
    ]


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise PersistenceError(f"Failed to {action}")


class QuizService:
    """Create, replace, delete and read quizzes"""

    @staticmethod
    def get_quiz(db: Session, quiz_id: int) -> Quiz:
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise NotFoundError("Quiz")
        return quiz

    @staticmethod
    def get_latest_quiz(db: Session) -> Quiz:
        quiz = db.query(Quiz).order_by(Quiz.created_at.desc(), Quiz.id.desc()).first()
        if not quiz:
            raise NotFoundError("Quiz")
        return quiz

    @staticmethod
    def create_quiz(
        db: Session,
        created_by: int,
        title: Any,
        questions: Any,
        duration: Any,
        description: Optional[str] = None,
    ) -> Quiz:
        """Validate and store a quiz"""
        data = validate_quiz(title, questions, duration, description)

        quiz = Quiz(
            title=data["title"],
            description=data["description"],
            duration=data["duration"],
            created_by=created_by,
        )
        quiz.questions = _build_questions(data["questions"])
        db.add(quiz)
        _commit(db, "create quiz")
        db.refresh(quiz)

        logger.info(
            "Quiz created",
            extra={"quiz_id": quiz.id, "created_by": created_by, "questions": len(quiz.questions)},
        )
        return quiz

    @staticmethod
    def create_quiz_from_file(
        db: Session,
        created_by: int,
        file_bytes: bytes,
        extension: str,
        title: Any,
        duration: Any,
        description: Optional[str] = None,
    ) -> Quiz:
        """Parse an uploaded question file; nothing is stored unless it all validates"""
        questions = parse_questions(file_bytes, extension)
        return QuizService.create_quiz(db, created_by, title, questions, duration, description)

    @staticmethod
    def update_quiz(
        db: Session,
        quiz_id: int,
        title: Any,
        questions: Any,
        duration: Any,
        description: Optional[str] = None,
    ) -> Quiz:
        """Replace a quiz's metadata and its whole question list"""
        data = validate_quiz(title, questions, duration, description)
        quiz = QuizService.get_quiz(db, quiz_id)

        quiz.title = data["title"]
        quiz.description = data["description"]
        quiz.duration = data["duration"]
        quiz.questions = _build_questions(data["questions"])
        _commit(db, "update quiz")
        db.refresh(quiz)

        logger.info("Quiz updated", extra={"quiz_id": quiz.id, "questions": len(quiz.questions)})
        return quiz

    @staticmethod
    def delete_quiz(db: Session, quiz_id: int) -> None:
        """Delete a quiz; attempts keep their snapshot but lose the link"""
        quiz = QuizService.get_quiz(db, quiz_id)
        db.query(Attempt).filter(Attempt.quiz_id == quiz_id).update(
            {Attempt.quiz_id: None}, synchronize_session="fetch"
        )
        db.query(ScoreRecord).filter(ScoreRecord.quiz_id == quiz_id).delete(synchronize_session="fetch")
        db.delete(quiz)
        _commit(db, "delete quiz")
        logger.info("Quiz deleted", extra={"quiz_id": quiz_id})

    @staticmethod
    def delete_question(db: Session, quiz_id: int, question_id: int) -> Quiz:
        """Remove one question; the others keep their relative order"""
        quiz = QuizService.get_quiz(db, quiz_id)
        question = next((q for q in quiz.questions if q.id == question_id), None)
        if question is None:
            raise NotFoundError("Question")
        if len(quiz.questions) == 1:
            raise ValidationError("A quiz must keep at least one question", error_code="LAST_QUESTION")

        quiz.questions.remove(question)
        _commit(db, "delete question")
        db.refresh(quiz)

        logger.info("Question deleted", extra={"quiz_id": quiz_id, "question_id": question_id})
        return quiz

    @staticmethod
    def list_all(db: Session) -> List[Quiz]:
        return db.query(Quiz).order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()

    @staticmethod
    def list_for_student(db: Session, student_id: int) -> List[Quiz]:
        """The latest quiz followed by the quizzes the student completed"""
        latest = db.query(Quiz).order_by(Quiz.created_at.desc(), Quiz.id.desc()).first()
        completed = (
            db.query(Quiz)
            .join(Attempt, Attempt.quiz_id == Quiz.id)
            .filter(Attempt.student_id == student_id)
            .order_by(Attempt.completed_at.desc(), Attempt.id.desc())
            .all()
        )

        quizzes = []
        seen = set()
        for quiz in [latest, *completed]:
            if quiz is not None and quiz.id not in seen:
                seen.add(quiz.id)
                quizzes.append(quiz)
        return quizzes


quiz_service = QuizService()
