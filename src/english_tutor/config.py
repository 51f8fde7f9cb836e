"""Application settings loaded from environment variables."""
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ENGLISH_TUTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    db_path: str = Field(
        default=str(Path.home() / ".english_tutor" / "tutor.db"),
        description="SQLite file backing the per-user key/value store",
    )
    user_id: str = Field(default="guest", description="Namespace for all stored keys")
    history_limit: int = Field(default=10, ge=1, description="Exam results kept, newest first")
    exam_duration_seconds: int = Field(default=90 * 60, gt=0)
    tick_interval_seconds: float = Field(default=1.0, gt=0)
    log_level: str = Field(default="WARNING")
    log_file: str | None = Field(default=None, description="Optional rotating log file")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
