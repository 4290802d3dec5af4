"""
Forum Sync Configuration.

Environment-based configuration using Pydantic Settings.
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Forum Sync"
    app_version: str = "1.0.0"
    debug: bool = False

    # Remote forum service
    forum_api_url: str = "http://localhost:3000/api/forum"
    forum_api_timeout: int | None = None  # None keeps aiohttp's default

    # Normalization
    forum_unknown_author: str = "Unknown user"

    @field_validator("forum_api_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: Any) -> Any:
        """Endpoints are appended with a leading slash."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
