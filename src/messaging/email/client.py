"""Resend API client for sending email."""

import logging

import requests

from src.messaging.email.models import SendEmailRequest, SendEmailResult

logger = logging.getLogger(__name__)

# Default API timeout in seconds
DEFAULT_REQUEST_TIMEOUT = 20


class EmailClientError(Exception):
    """Raised when the email API request fails."""

    pass


class ResendClient:
    """Client for sending email through the Resend API."""

    def __init__(
        self,
        *,
        api_key: str,
        from_address: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialise the Resend client.

        :param api_key: Resend API key.
        :param from_address: Sender address, e.g. "TaskFlow <hello@example.com>".
        :param api_url: Send-email endpoint.
        :param timeout: Timeout in seconds for each request.
        """
        if not api_key:
            raise ValueError("A Resend API key is required")

        self._api_key = api_key
        self._from_address = from_address
        self._api_url = api_url
        self._timeout = timeout

    def send_email(self, to: str, subject: str, html: str) -> SendEmailResult:
        """Send an HTML email to a single recipient.

        :param to: Recipient address.
        :param subject: Subject line.
        :param html: HTML body.
        :returns: Result containing the Resend message ID.
        :raises EmailClientError: If the API request fails.
        """
        payload = SendEmailRequest(
            from_address=self._from_address,
            to=[to],
            subject=subject,
            html=html,
        ).model_dump(by_alias=True)
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        logger.info(f"Sending email to {to} with subject: {subject}")

        try:
            response = requests.post(
                self._api_url,
                json=payload,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as e:
            raise EmailClientError(f"Email API request timed out after {self._timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise EmailClientError(f"Email API request failed: {e}") from e

        if not response.ok:
            raise EmailClientError(
                f"Email API returned {response.status_code}: {response.text[:500]}"
            )

        try:
            result = SendEmailResult.model_validate(response.json())
        except ValueError:
            result = SendEmailResult()

        logger.info(f"Email sent successfully: id={result.id}, to={to}")
        return result
