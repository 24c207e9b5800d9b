"""
Quiz endpoints
Authoring, import, submission, leaderboard and downloads
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session

from quizboard.core.config import settings
from quizboard.core.database import get_db
from quizboard.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from quizboard.core.security import Capability, get_current_user, has_capability, require_capability
from quizboard.db.redis import cache
from quizboard.models.user import User
from quizboard.schemas.attempt import (
    CompletedQuizEntry,
    CompletedQuizScore,
    CompletedQuizzesEnvelope,
    QuizSubmission,
    SubmissionEnvelope,
)
from quizboard.schemas.leaderboard import LeaderboardEnvelope
from quizboard.schemas.quiz import (
    LatestQuizEnvelope,
    MessageResponse,
    QuizEnvelope,
    QuizListEnvelope,
    QuizPayload,
)
from quizboard.services import exporter
from quizboard.services.attempts import attempt_service
from quizboard.services.importer import file_extension
from quizboard.services.leaderboard import leaderboard_service
from quizboard.services.quizzes import quiz_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/add", response_model=QuizEnvelope, status_code=status.HTTP_201_CREATED)
async def add_quiz(
    payload: QuizPayload,
    current_user: User = Depends(require_capability(Capability.MANAGE_QUIZZES)),
    db: Session = Depends(get_db),
):
    """Create a quiz from a JSON body"""
    quiz = quiz_service.create_quiz(
        db,
        created_by=current_user.id,
        title=payload.title,
        questions=payload.questions,
        duration=payload.duration,
        description=payload.description,
    )
    return {"success": True, "message": "Quiz added successfully!", "quiz": quiz}


@router.post("/upload", response_model=QuizEnvelope, status_code=status.HTTP_201_CREATED)
async def upload_quiz(
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    current_user: User = Depends(require_capability(Capability.MANAGE_QUIZZES)),
    db: Session = Depends(get_db),
):
    """Create a quiz from an uploaded CSV or JSON question file"""
    if file is None:
        raise ValidationError("Please upload a file")
    if not title or not duration:
        raise ValidationError("Title and duration are required!")

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(
            f"File size must be less than {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
            error_code="FILE_TOO_LARGE",
        )

    logger.info(
        "Processing quiz upload",
        extra={"upload_name": file.filename, "size": len(content), "user_id": current_user.id},
    )
    quiz = quiz_service.create_quiz_from_file(
        db,
        created_by=current_user.id,
        file_bytes=content,
        extension=file_extension(file.filename or ""),
        title=title,
        duration=duration,
        description=description,
    )
    return {
        "success": True,
        "message": f"Quiz added successfully from file! Processed {len(quiz.questions)} questions.",
        "quiz": quiz,
    }


@router.put("/update/{quiz_id}", response_model=QuizEnvelope)
async def update_quiz(
    quiz_id: int,
    payload: QuizPayload,
    current_user: User = Depends(require_capability(Capability.MANAGE_QUIZZES)),
    db: Session = Depends(get_db),
):
    """Replace a quiz's metadata and questions"""
    quiz = quiz_service.update_quiz(
        db,
        quiz_id,
        title=payload.title,
        questions=payload.questions,
        duration=payload.duration,
        description=payload.description,
    )
    await cache.invalidate_leaderboard(quiz_id)
    return {"success": True, "message": "Quiz updated successfully!", "quiz": quiz}


@router.delete("/delete/{quiz_id}", response_model=MessageResponse)
async def delete_quiz(
    quiz_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_QUIZZES)),
    db: Session = Depends(get_db),
):
    quiz_service.delete_quiz(db, quiz_id)
    await cache.invalidate_leaderboard(quiz_id)
    return {"success": True, "message": "Quiz deleted successfully!"}


@router.delete("/delete/{quiz_id}/question/{question_id}", response_model=MessageResponse)
async def delete_question(
    quiz_id: int,
    question_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_QUIZZES)),
    db: Session = Depends(get_db),
):
    quiz_service.delete_question(db, quiz_id, question_id)
    return {"success": True, "message": "Question deleted successfully!"}


@router.get("/latest", response_model=LatestQuizEnvelope)
async def get_latest_quiz(db: Session = Depends(get_db)):
    """Most recently created quiz"""
    return {"success": True, "latest_quiz": quiz_service.get_latest_quiz(db)}


@router.get("/getall", response_model=QuizListEnvelope)
async def get_all_quizzes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Every quiz for privileged roles; otherwise latest plus completed"""
    if has_capability(current_user, Capability.VIEW_ALL_QUIZZES):
        quizzes = quiz_service.list_all(db)
    else:
        quizzes = quiz_service.list_for_student(db, current_user.id)
    return {"success": True, "quizzes": quizzes}


@router.post("/submit/{quiz_id}", response_model=SubmissionEnvelope)
async def submit_quiz(
    quiz_id: int,
    submission: QuizSubmission,
    current_user: User = Depends(require_capability(Capability.TAKE_QUIZ)),
    db: Session = Depends(get_db),
):
    """Score and record the caller's answers; one attempt per quiz"""
    attempt = attempt_service.submit(db, current_user.id, quiz_id, submission.answers)
    await cache.invalidate_leaderboard(quiz_id)
    return {"success": True, "message": "Quiz submitted", "result": attempt}


@router.get("/leaderboard/{quiz_id}", response_model=LeaderboardEnvelope)
async def get_quiz_leaderboard(
    quiz_id: int,
    current_user: User = Depends(require_capability(Capability.VIEW_LEADERBOARD)),
    db: Session = Depends(get_db),
):
    """Score records ranked by score"""
    cached = await cache.get_leaderboard(quiz_id)
    if cached:
        return cached

    envelope = LeaderboardEnvelope(
        quiz_id=quiz_id,
        leaderboard=leaderboard_service.get_quiz_leaderboard(db, quiz_id),
    )
    data = envelope.model_dump(mode="json")
    await cache.set_leaderboard(quiz_id, data)
    return data


@router.get("/completed-quizzes/{student_id}", response_model=CompletedQuizzesEnvelope)
async def get_completed_quizzes(
    student_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A student's completed quizzes, newest first"""
    if student_id != current_user.id and not has_capability(current_user, Capability.VIEW_ALL_RESULTS):
        raise AuthorizationError()

    attempts = attempt_service.list_completed(db, student_id)
    if not attempts:
        raise NotFoundError("Completed quizzes")

    return {
        "success": True,
        "completed_quizzes": [
            CompletedQuizEntry(
                score=CompletedQuizScore(
                    score=attempt.score,
                    total_questions=attempt.total_questions,
                    percentage=attempt.percentage,
                    completed_at=attempt.completed_at,
                ),
                quiz_id=attempt.quiz.id,
                quiz_title=attempt.quiz.title,
            )
            for attempt in attempts
        ],
    }


@router.get("/results/{quiz_id}/{export_format}")
async def download_quiz_results(
    quiz_id: int,
    export_format: str,
    current_user: User = Depends(require_capability(Capability.EXPORT_RESULTS)),
    db: Session = Depends(get_db),
):
    """Leaderboard as a CSV download"""
    quiz = quiz_service.get_quiz(db, quiz_id)
    if export_format != "csv":
        raise ValidationError("CSV format is currently supported", error_code="UNSUPPORTED_FORMAT")

    rows = leaderboard_service.get_quiz_leaderboard(db, quiz_id)
    filename = exporter.results_filename(quiz.title)
    return Response(
        content=exporter.export_results_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/template/{export_format}")
async def download_quiz_template(
    export_format: str,
    current_user: User = Depends(get_current_user),
):
    """Example import file"""
    if export_format == "csv":
        content, media_type = exporter.export_template_csv(), "text/csv"
    elif export_format == "json":
        content, media_type = exporter.export_template_json(), "application/json"
    else:
        raise ValidationError("Unsupported format", error_code="UNSUPPORTED_FORMAT")

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename=quiz-template.{export_format}"},
    )


@router.get("/{quiz_id}", response_model=QuizEnvelope)
async def get_single_quiz(quiz_id: int, db: Session = Depends(get_db)):
    return {"success": True, "quiz": quiz_service.get_quiz(db, quiz_id)}
