"""
QuizBoard Models Package
"""

from quizboard.models.user import User, UserRole
from quizboard.models.quiz import Quiz, Question, QuestionKind, Attempt, ScoreRecord

__all__ = [
    "User", "UserRole",
    "Quiz", "Question", "QuestionKind", "Attempt", "ScoreRecord",
]
