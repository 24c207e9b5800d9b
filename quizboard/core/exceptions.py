"""
Custom exceptions and error handlers for QuizBoard Backend
Every domain error is translated to a response here and nowhere else
"""

import logging
from typing import Any, Dict, Optional

import sentry_sdk
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quizboard.core.config import settings

logger = logging.getLogger(__name__)


class QuizBoardException(Exception):
    """Base exception for QuizBoard application"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(QuizBoardException):
    """Malformed, user-correctable input"""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            details=details,
        )


class UnsupportedFormatError(ValidationError):
    """Upload extension is neither csv nor json"""

    def __init__(self, extension: str):
        super().__init__(
            message="Unsupported file format. Use CSV or JSON",
            error_code="UNSUPPORTED_FORMAT",
            details={"extension": extension},
        )


class MalformedInputError(ValidationError):
    """Upload could not be decoded into a question list"""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="MALFORMED_INPUT")


class NoQuestionsFoundError(ValidationError):
    """Upload parsed cleanly but produced nothing"""

    def __init__(self):
        super().__init__(
            message="No valid questions found in the file. Please check the file format.",
            error_code="NO_QUESTIONS_FOUND",
        )


class InvalidQuestionError(ValidationError):
    """A single question violates the question schema"""

    def __init__(self, question_text: str, reason: str):
        self.question_text = question_text
        super().__init__(
            message=f"{reason} (question: {question_text or '<empty>'})",
            error_code="INVALID_QUESTION",
            details={"question": question_text, "reason": reason},
        )


class AnswerCountMismatchError(ValidationError):
    """Fewer answers than questions were submitted"""

    def __init__(self, expected: int, received: int):
        super().__init__(
            message=f"Expected {expected} answers but received {received}",
            error_code="ANSWER_COUNT_MISMATCH",
            details={"expected": expected, "received": received},
        )


class NotFoundError(QuizBoardException):
    """Resource not found exception"""

    def __init__(self, resource: str = "Resource", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{resource} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details=details,
        )


class AuthenticationError(QuizBoardException):
    """Missing or invalid credentials"""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTHENTICATION_ERROR",
        )


class AuthorizationError(QuizBoardException):
    """Authenticated but lacking the capability"""

    def __init__(self, message: str = "Insufficient permissions", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTHORIZATION_ERROR",
            details=details,
        )


class AlreadyAttemptedError(QuizBoardException):
    """Student already has a completed attempt; carries that attempt"""

    def __init__(self, attempt: Any):
        self.attempt = attempt
        super().__init__(
            message="You have already taken this quiz.",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="ALREADY_ATTEMPTED",
        )


class PersistenceError(QuizBoardException):
    """Store write failed after validation passed"""

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="PERSISTENCE_ERROR",
            details=details,
        )


class ScorePersistenceError(PersistenceError):
    """Attempt and score record could not be written together"""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(message="Failed to save score", details=details)


def create_error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """
    Create standardized error response

    Args:
        request: FastAPI request object
        status_code: HTTP status code
        error_code: Application error code
        message: Error message
        details: Additional error details

    Returns:
        JSON response with error information
    """
    error_response = {
        "success": False,
        "message": message,
        "error": {
            "code": error_code,
            "details": details or {},
            "path": str(request.url.path),
            "method": request.method,
        },
    }

    if hasattr(request.state, "request_id"):
        error_response["error"]["request_id"] = request.state.request_id

    return JSONResponse(status_code=status_code, content=error_response)


async def quizboard_exception_handler(request: Request, exc: QuizBoardException) -> JSONResponse:
    """Handle QuizBoard domain exceptions"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"QuizBoard exception: {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": str(request.url.path),
        },
    )

    if settings.SENTRY_DSN and exc.status_code >= 500:
        sentry_sdk.capture_exception(exc)

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
    )


async def already_attempted_handler(request: Request, exc: AlreadyAttemptedError) -> JSONResponse:
    """Informational response carrying the prior attempt"""
    from quizboard.schemas.attempt import AttemptResponse

    logger.info(
        "Duplicate submission rejected",
        extra={"path": str(request.url.path), "attempt_id": getattr(exc.attempt, "id", None)},
    )
    result = AttemptResponse.model_validate(exc.attempt).model_dump(mode="json", by_alias=True)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "result": result},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions"""
    logger.warning(
        f"HTTP exception: {exc.detail}",
        extra={"status_code": exc.status_code, "path": str(request.url.path)},
    )

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        error_code="HTTP_ERROR",
        message=str(exc.detail),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors"""
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.warning("Validation error", extra={"errors": errors, "path": str(request.url.path)})

    return create_error_response(
        request=request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        error_code="VALIDATION_ERROR",
        message="Request validation failed",
        details={"errors": errors},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    logger.error(
        f"Unexpected error: {str(exc)}",
        extra={"exception_type": type(exc).__name__, "path": str(request.url.path)},
        exc_info=True,
    )

    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    # Don't expose internal errors in production
    if settings.is_production():
        message = "An unexpected error occurred"
    else:
        message = str(exc)

    return create_error_response(
        request=request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code="INTERNAL_ERROR",
        message=message,
    )


def register_exception_handlers(app) -> None:
    """
    Register all exception handlers with the FastAPI app

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AlreadyAttemptedError, already_attempted_handler)
    app.add_exception_handler(QuizBoardException, quizboard_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Catch-all handler for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
