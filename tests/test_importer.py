"""Tests for the CSV/JSON question import parser."""

import json

import pytest

from quizboard.core.exceptions import (
    InvalidQuestionError,
    MalformedInputError,
    NoQuestionsFoundError,
    UnsupportedFormatError,
    ValidationError,
)
from quizboard.services.exporter import export_template_csv, export_template_json
from quizboard.services.importer import file_extension, parse_csv, parse_questions, split_csv_line

HEADER = "Question,Options,CorrectAnswer\n"


def _csv(*rows: str) -> bytes:
    return (HEADER + "\n".join(rows)).encode("utf-8")


def test_three_column_row_becomes_multiple_choice():
    questions = parse_questions(_csv('"Capital?","Paris,London","Paris"'), "csv")

    assert questions == [
        {
            "question": "Capital?",
            "options": ["Paris", "London"],
            "correctAnswer": "Paris",
            "kind": "multiple-choice",
        }
    ]


def test_two_column_row_becomes_fill_in_blank():
    questions = parse_questions(_csv('"Fill the blank ___","Answer"'), "csv")

    assert questions == [
        {
            "question": "Fill the blank ___",
            "options": ["Answer"],
            "correctAnswer": "Answer",
            "kind": "fill-in-blank",
        }
    ]


def test_empty_options_fall_back_to_answer():
    questions = parse_questions(_csv('"CPU stands for ______","","Central Processing Unit"'), "csv")

    assert questions[0]["options"] == ["Central Processing Unit"]
    assert questions[0]["kind"] == "fill-in-blank"


def test_unquoted_row_and_whitespace_are_trimmed():
    questions = parse_csv(_csv("What is 2+2? , 4 , 4"))

    # Unquoted commas split the options cell into separate columns
    assert questions[0]["question"] == "What is 2+2?"
    assert questions[0]["options"] == ["4"]
    assert questions[0]["correctAnswer"] == "4"


def test_header_blank_and_short_lines_are_skipped():
    content = _csv(
        "",
        '"Only one column"',
        '"Capital?","Paris,London","Paris"',
        "   ",
        '"","Answer"',
        '"Question without answer",""',
    )

    questions = parse_questions(content, "csv")

    assert [q["question"] for q in questions] == ["Capital?"]


def test_crlf_line_endings():
    content = b'Question,Options,CorrectAnswer\r\n"Capital?","Paris,London","Paris"\r\n'

    assert parse_questions(content, "csv")[0]["correctAnswer"] == "Paris"


def test_wrapped_line_is_unwrapped():
    assert split_csv_line('"Sky colour?,Blue"') == ["Sky colour?", "Blue"]


def test_commas_inside_quotes_do_not_split():
    assert split_csv_line('"a,b",c,"d"') == ["a,b", "c", "d"]


def test_csv_correct_answer_missing_from_options_fails():
    with pytest.raises(InvalidQuestionError) as exc_info:
        parse_questions(_csv('"Capital?","London,Berlin","Paris"'), "csv")

    assert exc_info.value.question_text == "Capital?"
    assert exc_info.value.status_code == 400


def test_header_only_csv_has_no_questions():
    with pytest.raises(NoQuestionsFoundError):
        parse_questions(HEADER.encode(), "csv")


def test_json_bare_array():
    payload = [{"question": "2 + 2 = ?", "options": ["3", "4"], "correctAnswer": "4"}]

    questions = parse_questions(json.dumps(payload).encode(), "json")

    assert questions[0]["kind"] == "multiple-choice"
    assert questions[0]["options"] == ["3", "4"]


def test_json_object_with_questions_field():
    payload = {"title": "ignored", "questions": [{"question": "Q", "options": ["A"], "correctAnswer": "A"}]}

    questions = parse_questions(json.dumps(payload).encode(), "json")

    assert questions == [{"question": "Q", "options": ["A"], "correctAnswer": "A", "kind": "fill-in-blank"}]


def test_malformed_json_reports_invalid_json():
    with pytest.raises(MalformedInputError) as exc_info:
        parse_questions(b"{not json", "json")

    assert "Invalid JSON" in exc_info.value.message
    assert isinstance(exc_info.value, ValidationError)


def test_json_object_without_questions_is_malformed():
    with pytest.raises(MalformedInputError):
        parse_questions(b'{"items": []}', "json")


def test_json_empty_array_has_no_questions():
    with pytest.raises(NoQuestionsFoundError):
        parse_questions(b"[]", "json")


def test_json_correct_answer_missing_from_options_fails():
    payload = [{"question": "Pick one", "options": ["A", "B"], "correctAnswer": "C"}]

    with pytest.raises(InvalidQuestionError) as exc_info:
        parse_questions(json.dumps(payload).encode(), "json")

    assert exc_info.value.question_text == "Pick one"


@pytest.mark.parametrize("extension", ["xlsx", "txt", ""])
def test_unsupported_extension(extension):
    with pytest.raises(UnsupportedFormatError):
        parse_questions(b"anything", extension)


def test_extension_is_case_insensitive():
    assert file_extension("Quiz.Final.JSON") == "json"
    assert file_extension("noextension") == ""
    assert parse_questions(_csv('"Q","A"'), "CSV")[0]["correctAnswer"] == "A"


def _canonical(questions):
    return {(q["question"], frozenset(q["options"]), q["correctAnswer"]) for q in questions}


def test_csv_template_reimports():
    questions = parse_questions(export_template_csv(), "csv")

    assert _canonical(questions) == {
        ("What is the capital of France?", frozenset({"Paris", "London", "Berlin", "Madrid"}), "Paris"),
        ("What is 2+2?", frozenset({"3", "4", "5", "6"}), "4"),
        ("CPU stands for ______", frozenset({"Central Processing Unit"}), "Central Processing Unit"),
        (
            "Which of the following is not an operating system?",
            frozenset({"Windows", "Linux", "Oracle", "Mac OS"}),
            "Oracle",
        ),
    }


def test_json_template_reimports():
    template = json.loads(export_template_json())

    questions = parse_questions(export_template_json(), "json")

    assert _canonical(questions) == _canonical(template["questions"])
