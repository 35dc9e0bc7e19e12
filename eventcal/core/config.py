"""Application configuration via environment variables."""

from __future__ import annotations

from datetime import date

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``EVENTCAL_*`` environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="EVENTCAL_", env_file=".env", env_file_encoding="utf-8"
    )

    app_name: str = "Event Calendar"
    debug: bool = False
    log_level: str = "INFO"

    # Last date a recurring series may reach when neither an end date nor an
    # occurrence count is given.
    default_repeat_end_date: date = date(2025, 9, 30)
    default_notification_minutes: int = 10
    # Upper bound on instances one series expansion may produce via a count.
    max_series_occurrences: int = 1000


settings = Settings()
