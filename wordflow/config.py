"""
Application configuration settings
"""
from pydantic_settings import BaseSettings
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "WordFlow"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # Local vocabulary store (any SQLAlchemy URL)
    DATABASE_URL: str = "sqlite:///./wordflow.db"

    # Remote vocabulary store (Supabase-compatible REST endpoint)
    SYNC_REMOTE_URL: Optional[str] = None
    SYNC_API_KEY: Optional[str] = None
    SYNC_TIMEOUT_SECONDS: float = 30.0

    @property
    def SYNC_CONFIGURED(self) -> bool:
        """True when both remote credentials are present"""
        return bool(self.SYNC_REMOTE_URL and self.SYNC_API_KEY)

    # Review
    DEFAULT_DUE_LIMIT: int = 20
    REVIEW_SESSION_HISTORY_LIMIT: int = 50

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
