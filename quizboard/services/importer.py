"""
Question import parser
Turns an uploaded CSV or JSON buffer into canonical question records
"""

import json
import logging
from typing import Any, Dict, List

from quizboard.core.exceptions import MalformedInputError, NoQuestionsFoundError, UnsupportedFormatError
from quizboard.models.quiz import QuestionKind
from quizboard.utils.validators import validate_question

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("csv", "json")


def file_extension(filename: str) -> str:
    """Lower-cased text after the last dot, or '' when there is none"""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def _strip_quotes(value: str) -> str:
    """Drop one leading and one trailing double quote"""
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def _unwrap_line(line: str) -> str:
    """Unwrap a line that is one quoted run, e.g. ``"Question,Answer"``"""
    if len(line) >= 2 and line[0] == '"' and line[-1] == '"' and '"' not in line[1:-1]:
        return line[1:-1]
    return line


def split_csv_line(line: str) -> List[str]:
    """
    Split one line on commas, honouring double-quoted sections

    Quotes only toggle the in-quotes state and are never kept. There is no
    escaped-quote syntax and a field cannot span lines.
    """
    columns = []
    current = []
    in_quotes = False

    for char in _unwrap_line(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            columns.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    columns.append("".join(current).strip())

    return columns


def _record(text: str, options: List[str], correct_answer: str) -> Dict[str, Any]:
    return {
        "question": text,
        "options": options,
        "correctAnswer": correct_answer,
        "kind": QuestionKind.for_options(options).value,
    }


def parse_csv(buffer: bytes) -> List[Dict[str, Any]]:
    """
    Parse a Question,Options,CorrectAnswer sheet

    Rows with two columns are read as Question,CorrectAnswer fill-in-blank
    items. Rows that cannot form a question are skipped.
    """
    content = buffer.decode("utf-8-sig", errors="replace")
    lines = content.split("\n")
    questions = []

    # Line 1 is the header
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if line_number == 1 or not line:
            continue

        columns = split_csv_line(line)

        if len(columns) >= 3:
            text = _strip_quotes(columns[0])
            correct_answer = _strip_quotes(columns[2])
            options = [_strip_quotes(option.strip()) for option in columns[1].split(",")]
            options = [option for option in options if option]
            if not options:
                options = [correct_answer]
        elif len(columns) == 2:
            text = _strip_quotes(columns[0])
            correct_answer = _strip_quotes(columns[1])
            options = [correct_answer]
        else:
            logger.debug(f"Skipping CSV line {line_number}: not enough columns")
            continue

        if not text or not correct_answer:
            logger.debug(f"Skipping CSV line {line_number}: empty question or answer")
            continue

        questions.append(_record(text, options, correct_answer))

    logger.info(f"Parsed {len(questions)} questions from CSV ({len(lines)} lines)")
    return questions


def parse_json(buffer: bytes) -> List[Any]:
    """Accept a bare question array or an object with a 'questions' array"""
    try:
        data = json.loads(buffer.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedInputError(f"Invalid JSON: {e}")

    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("questions"), list):
        return data["questions"]

    raise MalformedInputError("Invalid JSON: expected an array or an object with a 'questions' array")


def parse_questions(buffer: bytes, extension: str) -> List[Dict[str, Any]]:
    """
    Parse and validate an uploaded question file

    Args:
        buffer: Raw upload bytes
        extension: File extension without the dot (csv or json)

    Returns:
        Canonical question records in file order

    Raises:
        UnsupportedFormatError: extension is not csv/json
        MalformedInputError: JSON could not be decoded
        NoQuestionsFoundError: nothing usable in the file
        InvalidQuestionError: a record failed validation
    """
    extension = (extension or "").lower().lstrip(".")
    if extension == "csv":
        candidates = parse_csv(buffer)
    elif extension == "json":
        candidates = parse_json(buffer)
    else:
        raise UnsupportedFormatError(extension)

    if not candidates:
        raise NoQuestionsFoundError()

    return [validate_question(candidate) for candidate in candidates]
