"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Data store
    STORE_BACKEND: str = "memory"  # "memory" or "redis"
    REDIS_URL: str = "redis://localhost:6379/0"
    STORE_KEY_PREFIX: str = "progress_guard:"

    # Server
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    # Validation policy thresholds
    SCORE_REGRESSION_THRESHOLD: float = 20.0
    HELP_PENALTY_PER_REQUEST: float = 2.0
    HELP_PENALTY_CAP: float = 20.0
    SCORE_HELP_TOLERANCE: float = 5.0
    QUICK_SCORE_MAX_SECONDS: int = 30
    QUICK_SCORE_MIN_SCORE: float = 95.0
    TIME_TOLERANCE_RATIO: float = 0.1
    TIME_TOLERANCE_MIN_SECONDS: float = 5.0
    MIN_TIME_RATIO: float = 0.1
    MAX_TIME_RATIO: float = 5.0
    HELP_COUNT_TOLERANCE: int = 1

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
