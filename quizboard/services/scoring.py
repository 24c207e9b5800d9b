"""
Scoring engine
Positional, exact-match scoring of an answer sheet against a quiz
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from quizboard.core.exceptions import AnswerCountMismatchError, ValidationError


@dataclass(frozen=True)
class ScoreResult:
    raw_score: int
    total_questions: int
    percentage: float
    breakdown: List[Dict[str, Any]] = field(default_factory=list)


def _field(item: Any, *names: str) -> Any:
    for name in names:
        if isinstance(item, dict):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return None


def selected_option(answer: Any) -> Optional[str]:
    """Read the selection from a request mapping or a schema object"""
    return _field(answer, "selectedOption", "selected_option")


def score_answers(questions: Sequence[Any], answers: Sequence[Any]) -> ScoreResult:
    """
    Score answers[i] against questions[i]

    A question is correct only when its correct answer equals the selected
    option exactly (case-sensitive, untrimmed). Answers beyond the last
    question are ignored. The percentage is left unrounded.

    Raises:
        AnswerCountMismatchError: fewer answers than questions
        ValidationError: the quiz has no questions
    """
    total = len(questions)
    if total == 0:
        raise ValidationError("Quiz has no questions", error_code="EMPTY_QUIZ")
    if len(answers) < total:
        raise AnswerCountMismatchError(expected=total, received=len(answers))

    raw_score = 0
    breakdown = []
    for question, answer in zip(questions, answers):
        correct_answer = _field(question, "correct_answer", "correctAnswer")
        chosen = selected_option(answer)
        if chosen is not None and chosen == correct_answer:
            raw_score += 1

        breakdown.append(
            {
                "question": _field(question, "text", "question"),
                "options": list(_field(question, "options") or []),
                "correctAnswer": correct_answer,
                "selectedOption": "" if chosen is None else chosen,
            }
        )

    percentage = raw_score / total * 100
    return ScoreResult(raw_score=raw_score, total_questions=total, percentage=percentage, breakdown=breakdown)
