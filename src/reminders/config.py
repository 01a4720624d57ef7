"""Configuration for the reminder job using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE


class ReminderConfig(BaseSettings):
    """Tuning for reminder runs.

    All settings are loaded from environment variables with the REMINDER_ prefix.

    :param max_workers: Users dispatched concurrently within one run.
    :param lookup_timeout_seconds: Bound on a single profile lookup.
    :param send_timeout_seconds: Bound on a single notifier send.
    :param commit_attempts: Attempts at saving reminder timestamps after sending.
    :param commit_retry_delay_seconds: Delay between commit attempts.
    """

    model_config = SettingsConfigDict(
        env_prefix="REMINDER_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_workers: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Users dispatched concurrently within one run",
    )
    lookup_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for a single profile lookup",
    )
    send_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for a single notifier send",
    )
    commit_attempts: int = Field(
        default=3,
        ge=1,
        le=5,
        description="Attempts at saving reminder timestamps",
    )
    commit_retry_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        le=60,
        description="Delay between commit attempts",
    )


@lru_cache
def get_reminder_settings() -> ReminderConfig:
    """Get cached reminder settings.

    :returns: Configured ReminderConfig instance.
    """
    return ReminderConfig()
