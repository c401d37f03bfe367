from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = "sqlite:///./judging.db"

    # API settings
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Judging API"
    DEBUG: bool = True
    CORS_ORIGINS: list = ["*"]

    # Rate limiting (disabled when REDIS_URL is unset)
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_PER_MINUTE: int = 100

    # Review workflow timings, in seconds
    FEEDBACK_DEBOUNCE_SECONDS: float = 1.5
    SAVED_DISPLAY_SECONDS: float = 2.0

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

@lru_cache()
def get_settings() -> Settings:
    """
    Get settings instance with caching
    Returns:
        Settings instance
    """
    return Settings()
