"""Configuration for the Resend email integration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE

DEFAULT_FROM_ADDRESS = "TaskFlow <onboarding@resend.dev>"
DEFAULT_API_URL = "https://api.resend.com/emails"


class EmailConfig(BaseSettings):
    """Configuration for sending email through Resend.

    All settings are loaded from environment variables with the RESEND_ prefix.

    :param api_key: Resend API key. Reminders cannot be sent without it.
    :param from_address: Sender shown on reminder emails.
    :param api_url: Resend send-email endpoint.
    :param request_timeout: Timeout in seconds for a single API request.
    """

    model_config = SettingsConfigDict(
        env_prefix="RESEND_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str | None = Field(default=None, description="Resend API key")
    from_address: str = Field(
        default=DEFAULT_FROM_ADDRESS,
        description="Sender address for outgoing email",
    )
    api_url: str = Field(default=DEFAULT_API_URL, description="Resend send-email endpoint")
    request_timeout: int = Field(
        default=20,
        ge=1,
        le=120,
        description="Timeout in seconds for a single API request",
    )


@lru_cache
def get_email_settings() -> EmailConfig:
    """Get cached email settings.

    :returns: Configured EmailConfig instance.
    """
    return EmailConfig()
