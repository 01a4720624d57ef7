"""Email notifier for task reminders."""

from __future__ import annotations

import logging

from src.messaging.email.client import EmailClientError, ResendClient
from src.messaging.email.config import EmailConfig, get_email_settings

logger = logging.getLogger(__name__)


class EmailConfigError(ValueError):
    """Raised when email delivery is not configured."""


class EmailNotifier:
    """Send reminder messages as email.

    Delivery failures are reported as ``False`` so one recipient's failure
    can be handled without aborting a batch of sends.
    """

    def __init__(self, client: ResendClient) -> None:
        """Initialise the notifier.

        :param client: Resend client used for delivery.
        """
        self._client = client

    @classmethod
    def from_settings(cls, settings: EmailConfig | None = None) -> EmailNotifier:
        """Build a notifier from email settings.

        :param settings: Email settings. Loaded from the environment if omitted.
        :returns: A ready notifier.
        :raises EmailConfigError: If no API key is configured.
        """
        settings = settings or get_email_settings()
        if not settings.api_key:
            raise EmailConfigError(
                "Resend API key not configured. Set RESEND_API_KEY environment variable."
            )

        client = ResendClient(
            api_key=settings.api_key,
            from_address=settings.from_address,
            api_url=settings.api_url,
            timeout=settings.request_timeout,
        )
        return cls(client)

    def send(self, address: str, subject: str, body: str) -> bool:
        """Send one email.

        :param address: Recipient address.
        :param subject: Subject line.
        :param body: HTML body.
        :returns: True if the email was accepted.
        """
        try:
            self._client.send_email(address, subject, body)
        except EmailClientError as e:
            logger.warning(f"Failed to send email to {address}: {e}")
            return False
        return True
