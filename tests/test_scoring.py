"""Tests for the scoring engine."""

import pytest

from quizboard.core.exceptions import AnswerCountMismatchError, ValidationError
from quizboard.schemas.attempt import AnswerSubmission
from quizboard.services.scoring import score_answers

QUESTIONS = [
    {"question": "Q1", "options": ["A", "B"], "correctAnswer": "A"},
    {"question": "Q2", "options": ["A", "B"], "correctAnswer": "B"},
    {"question": "Q3", "options": ["Yes"], "correctAnswer": "Yes"},
]


def _answers(*selected):
    return [{"selectedOption": option} for option in selected]


@pytest.mark.parametrize(
    "selected, expected",
    [
        (("A", "B", "Yes"), 3),
        (("A", "A", "Yes"), 2),
        (("B", "A", "No"), 0),
        (("A", "B", "yes"), 2),
        (("A ", "B", "Yes"), 2),
    ],
)
def test_raw_score_and_percentage(selected, expected):
    result = score_answers(QUESTIONS, _answers(*selected))

    assert result.raw_score == expected
    assert result.total_questions == 3
    assert result.percentage == expected / 3 * 100


def test_breakdown_is_a_frozen_copy():
    questions = [dict(q, options=list(q["options"])) for q in QUESTIONS]

    result = score_answers(questions, _answers("A", "A", "Yes"))
    questions[0]["options"].append("C")

    assert result.breakdown[0] == {
        "question": "Q1",
        "options": ["A", "B"],
        "correctAnswer": "A",
        "selectedOption": "A",
    }
    assert result.breakdown[1]["selectedOption"] == "A"


def test_too_few_answers_is_rejected():
    with pytest.raises(AnswerCountMismatchError) as exc_info:
        score_answers(QUESTIONS, _answers("A", "B"))

    assert exc_info.value.details == {"expected": 3, "received": 2}


def test_extra_answers_are_ignored():
    result = score_answers(QUESTIONS, _answers("A", "B", "Yes", "spare"))

    assert result.raw_score == 3
    assert len(result.breakdown) == 3


def test_missing_selection_counts_as_wrong():
    result = score_answers(QUESTIONS, [{"selectedOption": None}, {}, {"selectedOption": "Yes"}])

    assert result.raw_score == 1
    assert result.breakdown[0]["selectedOption"] == ""


def test_schema_answers_are_accepted():
    answers = [AnswerSubmission(selectedOption=o) for o in ("A", "B", "No")]

    assert score_answers(QUESTIONS, answers).raw_score == 2


def test_quiz_without_questions_is_rejected():
    with pytest.raises(ValidationError):
        score_answers([], [])
