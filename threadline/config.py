"""
Runtime configuration helpers for the FastAPI application.

Loads DATABASE_URL and the identity provider secrets from the .env file
located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Required, read from .env or the environment
    database_url: str = Field(..., alias="DATABASE_URL")

    app_name: str = Field(default="Threadline", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    default_page_size: int = Field(default=20, alias="DEFAULT_PAGE_SIZE")
    suggested_users_limit: int = Field(default=4, alias="SUGGESTED_USERS_LIMIT")

    # Identity provider
    identity_jwt_algorithm: str = Field(default="HS256", alias="IDENTITY_JWT_ALGORITHM")
    identity_jwt_audience: str | None = Field(default=None, alias="IDENTITY_JWT_AUDIENCE")
    # Deliveries signed further than this from the current time are refused
    identity_webhook_tolerance_seconds: int = Field(default=300, alias="IDENTITY_WEBHOOK_TOLERANCE_SECONDS")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
