# core/settings.py
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Remote collection service. Env: CONSOLE_API_BASE_URL, CONSOLE_API_TIMEOUT."""

    base_url: str = "http://localhost:8080/api"
    timeout: float = Field(15.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="CONSOLE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    app_title: str = "Classroom Console"
    log_level: str = "INFO"
    api: ApiSettings = Field(default_factory=ApiSettings)

    model_config = SettingsConfigDict(
        env_prefix="CONSOLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()
