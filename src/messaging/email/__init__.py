"""Email delivery through the Resend API."""

from src.messaging.email.client import EmailClientError, ResendClient
from src.messaging.email.config import EmailConfig, get_email_settings
from src.messaging.email.models import SendEmailRequest, SendEmailResult
from src.messaging.email.notifier import EmailConfigError, EmailNotifier

__all__ = [
    "EmailClientError",
    "EmailConfig",
    "EmailConfigError",
    "EmailNotifier",
    "ResendClient",
    "SendEmailRequest",
    "SendEmailResult",
    "get_email_settings",
]
