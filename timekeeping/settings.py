from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Timekeeping"
    default_timezone: str = "UTC"
    default_jurisdiction: str | None = None
    default_required_days_per_week: int = 3
    default_minimum_minutes_per_day: int = 0
    week_starts_on: int = 0
    log_level: str = "INFO"
    cors_allow_origins: str = "http://127.0.0.1:3000,http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    raw = get_settings().cors_allow_origins
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_default_timezone() -> ZoneInfo:
    raw_name = (get_settings().default_timezone or "").strip() or "UTC"
    try:
        return ZoneInfo(raw_name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def get_week_starts_on() -> int:
    value = get_settings().week_starts_on
    if 0 <= value <= 6:
        return value
    return 0
