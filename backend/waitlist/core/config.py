"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Event Waitlist Lottery API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Redis (the persistent store for events, waitlists and profiles)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "waitlist"
    REDIS_SOCKET_TIMEOUT: int = 5

    # Registration window timestamps are stored as local ISO strings
    REGISTRATION_TIME_FORMAT: str = "%Y-%m-%dT%H:%M:%S"

    # Lottery
    DEFAULT_REPLACEMENT_POOL_SIZE: int = 3
    DRAW_LOCK_STRATEGY: str = "redis"  # redis, none
    DRAW_LOCK_TIMEOUT: int = 30  # seconds
    DRAW_RANDOM_SEED: Optional[int] = None

    # Reject accept/decline from participants no longer in the winners set
    ENFORCE_WINNER_ON_RESPONSE: bool = True

    # WATCH/MULTI conflicts retried inside a single atomic move
    STORE_MAX_RETRY_ATTEMPTS: int = 3

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
