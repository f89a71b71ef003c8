"""
Unified Configuration Module for the Realtime Database admin tools.

This module provides a single source of truth for all configuration settings using
pydantic-settings for validation and environment variable loading.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "https://sungjintrb-default-rtdb.firebaseio.com"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field has a working default so the scripts can run from a bare
    checkout with a service account key at the project root.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Firebase Realtime Database
    FIREBASE_DATABASE_URL: str = Field(
        default=DEFAULT_DATABASE_URL,
        description="Realtime Database URL (https://<project>-default-rtdb.firebaseio.com)",
        min_length=1,
    )

    # Credentials (GOOGLE_APPLICATION_CREDENTIALS wins over SERVICE_ACCOUNT_PATH)
    GOOGLE_APPLICATION_CREDENTIALS: str | None = Field(
        default=None,
        description="Path to Google Cloud service account JSON file",
    )
    SERVICE_ACCOUNT_PATH: str = Field(
        default="serviceAccountKey.json",
        description="Fallback service account key path, relative to the working directory",
    )

    # Database layout
    USERS_PATH: str = Field(
        default="users",
        description="Root path holding one profile per auth uid",
    )
    USERNAME_INDEX_PATH: str = Field(
        default="usernameIndex",
        description="Root path holding the username -> uid index",
    )

    # Reconciler tuning
    LIST_USERS_PAGE_SIZE: int = Field(
        default=1000,
        description="Auth users fetched per page (Firebase caps this at 1000)",
        ge=1,
        le=1000,
    )
    USERNAME_MAX_ATTEMPTS: int = Field(
        default=1000,
        description="Maximum username candidates tried before giving up on a record",
        ge=1,
    )

    LOG_LEVEL: str = Field(default="INFO", description="loguru log level")

    @field_validator("FIREBASE_DATABASE_URL", mode="after")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate Realtime Database URL format."""
        v = v.strip().rstrip("/")
        if not v.startswith("https://"):
            raise ValueError("FIREBASE_DATABASE_URL must be an https:// URL")
        return v

    @field_validator("USERS_PATH", "USERNAME_INDEX_PATH", mode="before")
    @classmethod
    def strip_slashes(cls, v: str, info) -> str:
        """Store database roots without leading or trailing slashes."""
        if isinstance(v, str):
            v = v.strip().strip("/")
        if not v:
            raise ValueError(f"{info.field_name} cannot be empty")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper() if isinstance(v, str) else v

    @property
    def credentials_path(self) -> Path:
        """Resolve the service account key file to use."""
        return Path(self.GOOGLE_APPLICATION_CREDENTIALS or self.SERVICE_ACCOUNT_PATH)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    Also bridges Pydantic settings to os.environ for Google SDKs.

    Returns:
        Settings: Validated application settings

    Raises:
        pydantic.ValidationError: If an environment variable holds an invalid value
    """
    settings = Settings()

    # Google libraries read credentials from os.environ, not from Pydantic
    if settings.GOOGLE_APPLICATION_CREDENTIALS:
        os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = (
            settings.GOOGLE_APPLICATION_CREDENTIALS
        )

    return settings
