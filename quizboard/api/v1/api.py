"""
API v1 main router
"""

from fastapi import APIRouter

from quizboard.api.v1.endpoints import health, quizzes

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(quizzes.router, prefix="/quiz", tags=["Quizzes"])
