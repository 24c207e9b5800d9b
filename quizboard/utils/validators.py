"""Validation utilities shared by manual authoring and file import"""

from typing import Any, Dict, List, Mapping, Optional

from quizboard.core.exceptions import InvalidQuestionError, ValidationError
from quizboard.models.quiz import QuestionKind

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def _question_text(question: Mapping[str, Any]) -> Any:
    # JSON uploads may use either key for the question body
    text = question.get("question")
    if text is None:
        text = question.get("text")
    return text


def validate_question(question: Any) -> Dict[str, Any]:
    """
    Validate one question candidate and return its canonical form

    Raises:
        InvalidQuestionError: carrying the offending question text
    """
    if not isinstance(question, Mapping):
        raise InvalidQuestionError(str(question), "Each question must be an object")

    text = _question_text(question)
    options = question.get("options")
    correct_answer = question.get("correctAnswer")
    label = text if isinstance(text, str) else ""

    if not isinstance(text, str) or not text.strip():
        raise InvalidQuestionError(label, "Question text is required")
    if not isinstance(options, list) or len(options) == 0:
        raise InvalidQuestionError(text, "Options must be a non-empty array")
    if any(not isinstance(option, str) or not option.strip() for option in options):
        raise InvalidQuestionError(text, "Options must be non-empty strings")
    if not isinstance(correct_answer, str) or not correct_answer.strip():
        raise InvalidQuestionError(text, "Correct answer is required")
    if correct_answer not in options:
        raise InvalidQuestionError(text, f'Correct answer "{correct_answer}" not found in options')

    return {
        "question": text,
        "options": list(options),
        "correctAnswer": correct_answer,
        "kind": QuestionKind.for_options(options).value,
    }


def validate_questions(questions: Any) -> List[Dict[str, Any]]:
    """Validate a question list; must be a non-empty array"""
    if not isinstance(questions, list) or len(questions) == 0:
        raise ValidationError("Questions must be a non-empty array!")
    return [validate_question(question) for question in questions]


def validate_duration(duration: Any) -> int:
    """Duration in whole minutes, at least one"""
    if duration is None or duration == "" or isinstance(duration, bool):
        raise ValidationError("Title, questions, and duration are required!")
    try:
        minutes = int(duration)
    except (TypeError, ValueError):
        raise ValidationError("Duration must be a whole number of minutes")
    if isinstance(duration, float) and not duration.is_integer():
        raise ValidationError("Duration must be a whole number of minutes")
    if minutes < 1:
        raise ValidationError("Duration must be at least 1 minute")
    return minutes


def validate_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title, questions, and duration are required!")
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Quiz title cannot exceed {TITLE_MAX_LENGTH} characters")
    return title


def validate_description(description: Optional[str]) -> str:
    description = (description or "").strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters")
    return description


def validate_quiz(title: Any, questions: Any, duration: Any, description: Optional[str] = None) -> Dict[str, Any]:
    """
    Single source of truth for a well-formed quiz

    Returns:
        Normalized quiz fields with canonical questions
    """
    if not title or not questions or duration in (None, ""):
        raise ValidationError("Title, questions, and duration are required!")

    return {
        "title": validate_title(title),
        "description": validate_description(description),
        "duration": validate_duration(duration),
        "questions": validate_questions(questions),
    }
