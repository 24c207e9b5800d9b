"""
Core configuration for QuizBoard Backend
Quiz authoring, submission and leaderboard service
"""

import secrets
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application Settings
    APP_NAME: str = "QuizBoard"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Quiz authoring, scoring and leaderboard backend"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "QuizBoard Backend"

    # Security
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Database
    DATABASE_URL: Optional[str] = Field(default=None)
    DB_POOL_PRE_PING: bool = Field(default=True)
    DB_ECHO: bool = Field(default=False)

    # Redis Cache
    REDIS_URL: Optional[str] = Field(default=None)
    CACHE_TTL: int = Field(default=60)  # seconds

    # CORS
    BACKEND_CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost:5173")

    # Sentry
    SENTRY_DSN: Optional[str] = Field(default=None)

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_REQUESTS: int = Field(default=100)
    RATE_LIMIT_PERIOD: int = Field(default=60)  # seconds

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = Field(default=None)
    LOG_MAX_BYTES: int = Field(default=10 * 1024 * 1024)
    LOG_BACKUP_COUNT: int = Field(default=5)

    # Uploads
    MAX_UPLOAD_SIZE: int = Field(default=5 * 1024 * 1024)  # 5MB

    def get_database_url(self) -> str:
        """Get database URL with proper formatting"""
        if self.DATABASE_URL:
            db_url = self.DATABASE_URL
            if db_url.startswith("postgres://"):
                db_url = db_url.replace("postgres://", "postgresql://", 1)
            return db_url

        # Default for development
        return "sqlite:///./quizboard.db"

    def get_cors_origins(self) -> list[str]:
        """Get CORS origins as list"""
        if self.BACKEND_CORS_ORIGINS:
            return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",")]
        return ["http://localhost:3000"]

    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
