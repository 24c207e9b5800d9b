"""
Health check endpoints
"""

import psutil
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quizboard.core.config import settings
from quizboard.core.database import check_connection, get_db
from quizboard.db.redis import cache

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
    }


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Detailed health check"""
    health_status = {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
        "checks": {},
    }

    if check_connection(db):
        health_status["checks"]["database"] = "healthy"
    else:
        health_status["checks"]["database"] = "unhealthy"
        health_status["status"] = "degraded"

    health_status["checks"]["redis"] = "healthy" if cache.is_connected else "disconnected"

    memory = psutil.virtual_memory()
    health_status["checks"]["resources"] = {
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory_percent": memory.percent,
        "memory_available_mb": memory.available / (1024 * 1024),
    }

    return health_status
