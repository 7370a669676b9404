"""Configuration for the task suggestion service."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TASK_SUGGESTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: Literal["development", "production", "test"] = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    log_level: str = "INFO"
    failure_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    max_attempts: int = Field(default=3, ge=1)
    backoff_base_ms: int = Field(default=100, ge=0)
    trace_log_path: Optional[Path] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
