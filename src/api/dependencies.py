"""Settings and authentication for the reminders API."""

import logging
import secrets

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()


class ApiConfig(BaseSettings):
    """Configuration for the HTTP trigger.

    Loaded from environment variables with the API_ prefix.

    :param auth_token: Bearer token required by ``POST /reminders/run``.
    :param cors_origins: Comma-separated origins allowed to call the API.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    auth_token: str | None = Field(default=None, description="Bearer token for triggers")
    cors_origins: str = Field(default="", description="Comma-separated CORS origins")

    @property
    def cors_origin_list(self) -> list[str]:
        """CORS origins as a list, ignoring blanks."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_api_settings() -> ApiConfig:
    """Load API settings.

    Not cached, so a rotated token takes effect without a restart.
    """
    return ApiConfig()


def get_api_token() -> str:
    """Get the token callers must present to trigger a run.

    :returns: The configured API token.
    :raises ValueError: If API_AUTH_TOKEN is not set.
    """
    token = get_api_settings().auth_token
    if not token:
        raise ValueError(
            "API authentication token not configured. Set API_AUTH_TOKEN environment variable."
        )
    return token


def verify_token(
    credentials: HTTPAuthorizationCredentials = Security(bearer_scheme),
) -> str:
    """Reject trigger requests without the configured bearer token.

    :param credentials: The HTTP Authorisation credentials.
    :returns: The validated token.
    :raises HTTPException: 401 for a wrong token, 500 if no token is configured.
    """
    try:
        expected_token = get_api_token()
    except ValueError as e:
        logger.error(f"Reminder trigger rejected, API token not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API authentication not configured",
        ) from e

    if not secrets.compare_digest(credentials.credentials, expected_token):
        logger.warning("Reminder trigger rejected: invalid API token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return credentials.credentials
