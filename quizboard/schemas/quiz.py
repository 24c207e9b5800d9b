"""
Quiz schemas for QuizBoard
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from quizboard.models.quiz import QuestionKind


class QuizPayload(BaseModel):
    """
    Quiz create/replace body

    Field rules live in quizboard.utils.validators so manual and file
    authoring reject the same input with the same message.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    questions: Any = None
    duration: Any = None


class QuestionResponse(BaseModel):
    """Question response schema"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    question: str = Field(validation_alias=AliasChoices("text", "question"))
    options: List[str]
    correct_answer: str = Field(
        validation_alias=AliasChoices("correct_answer", "correctAnswer"),
        serialization_alias="correctAnswer",
    )
    kind: QuestionKind


class QuizResponse(BaseModel):
    """Quiz response schema"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    duration: int
    created_by: int
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    questions: List[QuestionResponse] = []


class QuizEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    quiz: QuizResponse


class QuizListEnvelope(BaseModel):
    success: bool = True
    quizzes: List[QuizResponse]


class LatestQuizEnvelope(BaseModel):
    success: bool = True
    latest_quiz: QuizResponse = Field(serialization_alias="latestQuiz")


class MessageResponse(BaseModel):
    success: bool = True
    message: str
