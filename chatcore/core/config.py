"""
Application configuration using Pydantic Settings.

Values are read from environment variables (and an optional .env file).
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Auth (token verification only)
    # ===========================================
    # - mock: the bearer token is the user id (development)
    # - local: HS256 JWT carrying sub / email / name claims
    # - none: no token required, every request runs as the developer user
    AUTH_PROVIDER: Literal["mock", "local", "none"] = "mock"
    LOCAL_JWT_SECRET: str = ""
    LOCAL_JWT_ISSUER: str = "chatcore-local"
    LOCAL_JWT_EXPIRE_MINUTES: int = 60 * 24 * 7

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # ===========================================
    # Chats & messages
    # ===========================================
    # Once a chat holds more than MESSAGE_HISTORY_LIMIT messages it is
    # compacted to the newest MESSAGE_HISTORY_RETAIN.
    MESSAGE_HISTORY_LIMIT: int = 1000
    MESSAGE_HISTORY_RETAIN: int = 100
    MESSAGE_PAGE_SIZE: int = 100
    MAX_MESSAGE_LENGTH: int = 4000

    # ===========================================
    # Users
    # ===========================================
    USER_SEARCH_MIN_LENGTH: int = 2
    USER_SEARCH_LIMIT: int = 20

    # ===========================================
    # Calls
    # ===========================================
    # Unanswered calls are ended after this many seconds (0 disables).
    CALL_RING_TIMEOUT_SECONDS: int = 60
    CALL_SWEEP_INTERVAL_SECONDS: int = 10


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
