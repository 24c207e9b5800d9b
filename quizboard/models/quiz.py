"""
Quiz, attempt and score models for QuizBoard
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from quizboard.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuestionKind(enum.Enum):
    """Supported question types"""
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_IN_BLANK = "fill-in-blank"

    @classmethod
    def for_options(cls, options) -> "QuestionKind":
        return cls.FILL_IN_BLANK if len(options) == 1 else cls.MULTIPLE_CHOICE


class Quiz(Base):
    """Quiz model"""
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=False, default="")
    duration = Column(Integer, nullable=False)  # minutes

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.order_number",
        collection_class=ordering_list("order_number"),
        cascade="all, delete-orphan",
    )
    creator = relationship("User")


class Question(Base):
    """Question embedded in a quiz; order_number is the answer alignment index"""
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    order_number = Column(Integer, nullable=False, default=0)

    text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    correct_answer = Column(String, nullable=False)
    kind = Column(
        Enum(QuestionKind, values_callable=lambda kinds: [k.value for k in kinds]),
        nullable=False,
        default=QuestionKind.MULTIPLE_CHOICE,
    )

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")


class Attempt(Base):
    """Completed quiz; one per (student, quiz), never mutated"""
    __tablename__ = "attempts"
    __table_args__ = (UniqueConstraint("student_id", "quiz_id", name="uq_attempt_student_quiz"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="SET NULL"), nullable=True, index=True)

    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)

    # Frozen snapshot: [{question, options, correctAnswer, selectedOption}]
    questions = Column(JSON, nullable=False, default=list)

    completed_at = Column(DateTime(timezone=True), default=_utcnow)

    # Relationships
    quiz = relationship("Quiz")
    student = relationship("User")


class ScoreRecord(Base):
    """Leaderboard projection of an Attempt"""
    __tablename__ = "scores"
    __table_args__ = (UniqueConstraint("quiz_id", "student_id", name="uq_score_quiz_student"),)

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    score = Column(Integer, nullable=False, index=True)
    total_questions = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)

    # Relationships
    student = relationship("User")
