"""Runtime settings for the schedule board, read from the environment / .env."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None  # rotating file log is off unless set

    # --- Recurrence ---
    MAX_RECURRENCE_DATES: int = 365
    RECURRENCE_MATCH_HORIZON: int = 1000

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULEBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )


settings = Settings()
