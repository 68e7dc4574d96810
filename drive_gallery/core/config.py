"""Configuration management for the Drive gallery application."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()

DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Application configuration loaded from environment variables."""

    app_env: str = "dev"
    log_level: str = "INFO"
    version: str = "0.1.0"
    host: str = "127.0.0.1"
    port: int = 8000
    credentials_path: Path = Path("credentials.json")
    token_path: Path = Path("token.json")
    google_scopes: list[str] = Field(default_factory=lambda: [DRIVE_READONLY_SCOPE])
    consent_host: str = "localhost"
    consent_port: int = 0
    consent_open_browser: bool = True
    consent_timeout: float | None = None
    request_timeout: float = 10.0
    folder_page_size: int = Field(default=10, ge=1, le=1000)

    @field_validator("google_scopes", mode="before")
    @classmethod
    def assemble_google_scopes(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            scopes = [scope for scope in value.replace(",", " ").split() if scope]
            return scopes or [DRIVE_READONLY_SCOPE]
        if isinstance(value, list):
            return value
        return [DRIVE_READONLY_SCOPE]

    @field_validator("consent_open_browser", mode="before")
    @classmethod
    def parse_flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_VALUES
        return bool(value)

    @field_validator("consent_timeout", mode="before")
    @classmethod
    def empty_timeout_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def _build_settings() -> Settings:
    raw_values: dict[str, Any] = {
        "app_env": os.getenv("APP_ENV"),
        "log_level": os.getenv("LOG_LEVEL"),
        "version": os.getenv("APP_VERSION"),
        "host": os.getenv("HOST"),
        "port": os.getenv("PORT"),
        "credentials_path": os.getenv("GOOGLE_CREDENTIALS_PATH"),
        "token_path": os.getenv("GOOGLE_TOKEN_PATH"),
        "google_scopes": os.getenv("GOOGLE_SCOPES"),
        "consent_host": os.getenv("GOOGLE_CONSENT_HOST"),
        "consent_port": os.getenv("GOOGLE_CONSENT_PORT"),
        "consent_open_browser": os.getenv("GOOGLE_CONSENT_OPEN_BROWSER"),
        "consent_timeout": os.getenv("GOOGLE_CONSENT_TIMEOUT"),
        "request_timeout": os.getenv("DRIVE_REQUEST_TIMEOUT"),
        "folder_page_size": os.getenv("DRIVE_FOLDER_PAGE_SIZE"),
    }
    filtered_values = {key: value for key, value in raw_values.items() if value is not None}
    return Settings(**filtered_values)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return _build_settings()
