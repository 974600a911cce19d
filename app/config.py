"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Redis (leaderboard cache + progress locks)
    REDIS_URL: str = "redis://redis:6379/0"

    # Application
    APP_NAME: str = "Exam Prep Platform"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    CLIENT_URL: str = "http://localhost:5173"

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Quiz Settings
    MAX_QUIZ_QUESTIONS: int = 50
    ALLOW_PARTIAL_QUIZ: bool = True  # serve a smaller quiz when the pool is short

    # Progress scoring
    STRENGTH_THRESHOLD: float = 75.0
    WEAKNESS_THRESHOLD: float = 50.0
    PROGRESS_LOCK_TIMEOUT: int = 30  # seconds a held lock survives
    PROGRESS_LOCK_WAIT: int = 10  # seconds to wait for a held lock

    # Caching
    LEADERBOARD_CACHE_TTL: int = 300  # 5 minutes

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
