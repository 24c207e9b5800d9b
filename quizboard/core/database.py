"""
Database configuration and session management
"""

import logging
from typing import Generator

import sentry_sdk
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from quizboard.core.config import settings

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


def build_engine(url: str, **kwargs):
    """Create an engine, adding SQLite-specific connect args when needed"""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, pool_pre_ping=settings.DB_POOL_PRE_PING, echo=settings.DB_ECHO, **kwargs)


engine = build_engine(settings.get_database_url())

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db() -> None:
    """Initialize database, create tables if they don't exist"""
    try:
        # Import all models here to ensure they're registered
        import quizboard.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

        with engine.connect() as conn:
            if conn.execute(text("SELECT 1")).scalar() == 1:
                logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session
    Ensures proper cleanup after request
    """
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Database error occurred: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def check_connection(db: Session) -> bool:
    """Ping the database through an existing session"""
    try:
        return db.execute(text("SELECT 1")).scalar() == 1
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False
