"""Build a reminder job wired to the database and email delivery."""

import logging

from pydantic import ValidationError

from src.messaging.email import EmailConfig, EmailConfigError, EmailNotifier
from src.reminders.config import ReminderConfig, get_reminder_settings
from src.reminders.exceptions import ReminderConfigError
from src.reminders.job import ReminderJob
from src.reminders.stores import SqlProfileLookup, SqlTaskStore

logger = logging.getLogger(__name__)


def _load_settings(settings: ReminderConfig | None, max_workers: int | None) -> ReminderConfig:
    try:
        settings = settings or get_reminder_settings()
        if max_workers is not None:
            settings = ReminderConfig(**{**settings.model_dump(), "max_workers": max_workers})
    except ValidationError as e:
        logger.error(f"Invalid REMINDER_ settings: {e}")
        raise ReminderConfigError(f"Invalid reminder settings: {e}") from e
    return settings


def _build_notifier(email_settings: EmailConfig | None) -> EmailNotifier:
    try:
        return EmailNotifier.from_settings(email_settings)
    except (EmailConfigError, ValidationError) as e:
        logger.error(f"Reminder job is not configured: {e}")
        raise ReminderConfigError(str(e)) from e


def create_reminder_job(
    *,
    settings: ReminderConfig | None = None,
    email_settings: EmailConfig | None = None,
    max_workers: int | None = None,
) -> ReminderJob:
    """Create the production reminder job.

    All settings are validated here, before any store access, so a bad
    environment fails the run as a configuration error.

    :param settings: Job settings. Loaded from the environment if omitted.
    :param email_settings: Email settings. Loaded from the environment if omitted.
    :param max_workers: Overrides the configured worker count.
    :returns: A job ready to run.
    :raises ReminderConfigError: If any setting is invalid or email is not configured.
    """
    settings = _load_settings(settings, max_workers)
    notifier = _build_notifier(email_settings)

    return ReminderJob(
        task_store=SqlTaskStore(),
        profile_lookup=SqlProfileLookup(),
        notifier=notifier,
        settings=settings,
    )
