"""
Logging middleware for QuizBoard Backend
Logs requests and responses with timing information
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("quizboard.request")

SKIP_PATHS = {"/health", "/metrics"}


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests and responses
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.rstrip("/").endswith(tuple(SKIP_PATHS)):
            return await call_next(request)

        start_time = time.time()
        request_id = getattr(request.state, "request_id", "unknown")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "process_time": round(time.time() - start_time, 3),
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time": round(process_time, 3),
            },
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response
