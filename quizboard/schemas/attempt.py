"""
Submission and attempt schemas for QuizBoard
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnswerSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selected_option: Optional[str] = Field(default=None, alias="selectedOption")


class QuizSubmission(BaseModel):
    """Answers aligned by position with the quiz's questions"""
    answers: List[AnswerSubmission]


class AttemptQuestion(BaseModel):
    """Frozen copy of a question as it was scored"""
    model_config = ConfigDict(populate_by_name=True)

    question: str
    options: List[str]
    correct_answer: str = Field(alias="correctAnswer")
    selected_option: str = Field(alias="selectedOption")


class AttemptResponse(BaseModel):
    """Completed quiz schema"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    quiz_id: Optional[int]
    score: int
    total_questions: int
    percentage: float
    questions: List[AttemptQuestion]
    completed_at: datetime


class SubmissionEnvelope(BaseModel):
    success: bool = True
    message: str
    result: AttemptResponse


class CompletedQuizScore(BaseModel):
    score: int
    total_questions: int
    percentage: float
    completed_at: datetime


class CompletedQuizEntry(BaseModel):
    score: CompletedQuizScore
    quiz_id: int
    quiz_title: str


class CompletedQuizzesEnvelope(BaseModel):
    success: bool = True
    completed_quizzes: List[CompletedQuizEntry]
