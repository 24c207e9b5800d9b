"""
QuizBoard Backend
Quiz authoring, scoring and leaderboard API
"""

import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from quizboard.api.v1.api import api_router
from quizboard.core.config import settings
from quizboard.core.database import init_db
from quizboard.core.exceptions import register_exception_handlers
from quizboard.core.logging import setup_logging
from quizboard.db.redis import cache
from quizboard.middleware import LoggingMiddleware, RequestIDMiddleware, add_rate_limiting

setup_logging()
logger = logging.getLogger(__name__)

# Initialize Sentry if DSN is provided
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=1.0 if settings.DEBUG else 0.1,
        environment=settings.ENVIRONMENT,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    init_db()
    await cache.connect()

    yield

    logger.info("Shutting down application")
    await cache.disconnect()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.RATE_LIMIT_ENABLED:
    add_rate_limiting(app)

register_exception_handlers(app)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": f"{settings.API_V1_STR}/health",
    }


app.include_router(api_router, prefix=settings.API_V1_STR)

# Prometheus metrics endpoint (debug only)
if settings.DEBUG:
    from prometheus_client import make_asgi_app

    app.mount("/metrics", make_asgi_app())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "quizboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
