from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.triggers.cron import CronTrigger
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aocbot.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AOC_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    session: str
    leaderboard: str
    webhook: str
    year: str = "2023"
    base_url: str = "https://adventofcode.com"
    db_path: Path = Path("data/aocbot.sqlite3")
    min_fetch_interval_minutes: int = Field(default=14, ge=0)
    schedule_minute: str = "*/15"
    timezone: str = "America/Chicago"
    request_timeout_seconds: float = Field(default=30, gt=0)
    user_agent: str = "aocbot private leaderboard notifier"
    log_level: str = "INFO"
    log_file: Path | None = None

    @field_validator("session", "leaderboard", mode="before")
    @classmethod
    def _require_text(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("year", mode="before")
    @classmethod
    def _parse_year(cls, value: object) -> str:
        text = str(value).strip()
        if len(text) != 4 or not text.isdigit():
            raise ValueError("AOC_YEAR must be a four digit year")
        return text

    @field_validator("webhook", "base_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        parsed = urlparse(value.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"{value!r} is not an http(s) URL")
        return value.strip()

    @field_validator("schedule_minute")
    @classmethod
    def _valid_cron_minute(cls, value: str) -> str:
        try:
            CronTrigger(minute=value)
        except ValueError as exc:
            raise ValueError(f"invalid cron minute expression {value!r}: {exc}") from exc
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown time zone {value!r}") from exc
        return value


def load_settings(env_file: Path | str | None = ".env", **overrides: Any) -> Settings:
    """Build settings; explicit overrides beat the environment and ``.env``.

    Overrides that are ``None`` are ignored so unset command-line flags fall
    through to the environment.
    """
    explicit = {k: v for k, v in overrides.items() if v is not None}
    try:
        return Settings(_env_file=env_file, **explicit)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"invalid configuration ({problems})") from exc
