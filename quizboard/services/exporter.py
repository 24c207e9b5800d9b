"""
Result exporter
Renders leaderboard rows as a CSV download and serves import templates
"""

import io
import json
import re
import time
from datetime import datetime
from typing import Any, Dict, Iterable

import pandas as pd

RESULT_COLUMNS = [
    "Rank",
    "Student Name",
    "Email",
    "Score",
    "Total Questions",
    "Percentage",
    "Completed At",
]

MISSING = "N/A"

CSV_TEMPLATE = """Question,Options,CorrectAnswer
"What is the capital of France?","Paris,London,Berlin,Madrid","Paris"
"What is 2+2?","3,4,5,6","4"
"CPU stands for ______","Central Processing Unit","Central Processing Unit"
"Which of the following is not an operating system?","Windows,Linux,Oracle,Mac OS","Oracle"
"""

JSON_TEMPLATE = {
    "title": "Sample Quiz",
    "description": "This is a sample quiz created from template",
    "duration": 30,
    "questions": [
        {
            "question": "What is the capital of France?",
            "options": ["Paris", "London", "Berlin", "Madrid"],
            "correctAnswer": "Paris",
        },
        {
            "question": "What is 2+2?",
            "options": ["3", "4", "5", "6"],
            "correctAnswer": "4",
        },
        {
            "question": "What is the largest planet in our solar system?",
            "options": ["Earth", "Mars", "Jupiter", "Saturn"],
            "correctAnswer": "Jupiter",
        },
    ],
}


def _format_completed_at(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return MISSING


def export_results_csv(rows: Iterable[Dict[str, Any]]) -> bytes:
    """
    Render leaderboard rows in their given order

    Rank is the 1-based position in ``rows``.
    """
    records = []
    for position, row in enumerate(rows, start=1):
        records.append(
            [
                position,
                row.get("student_name") or MISSING,
                row.get("student_email") or MISSING,
                row["score"],
                row["total_questions"],
                f"{row['percentage']:.2f}%",
                _format_completed_at(row.get("created_at")),
            ]
        )

    frame = pd.DataFrame(records, columns=RESULT_COLUMNS)
    buffer = io.StringIO()
    frame.to_csv(buffer, index=False, lineterminator="\n")
    return buffer.getvalue().encode("utf-8")


def results_filename(quiz_title: str) -> str:
    slug = re.sub(r"\s+", "-", quiz_title.strip())
    return f"quiz-results-{slug}-{int(time.time() * 1000)}.csv"


def export_template_csv() -> bytes:
    return CSV_TEMPLATE.encode("utf-8")


def export_template_json() -> bytes:
    return json.dumps(JSON_TEMPLATE, indent=2).encode("utf-8")
