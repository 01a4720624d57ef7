"""Outbound messaging channels for task reminders."""

from src.messaging.email import EmailConfigError, EmailNotifier

__all__ = [
    "EmailConfigError",
    "EmailNotifier",
]
