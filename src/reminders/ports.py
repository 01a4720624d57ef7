"""Protocols for the collaborators the reminder job depends on."""

from collections.abc import Collection
from datetime import datetime
from typing import Protocol

from src.reminders.models import Identifier, ReminderCandidate, UserProfile


class TaskStore(Protocol):
    """Source of reminder candidates and sink for reminder timestamps."""

    def fetch_reminder_candidates(self) -> list[ReminderCandidate]:
        """Fetch incomplete, reminder-enabled tasks with a positive interval.

        :returns: Candidate tasks.
        :raises TaskStoreError: If the store cannot be read.
        """
        ...

    def mark_reminded(self, task_ids: Collection[Identifier], at: datetime) -> None:
        """Set the last-reminder time of the given tasks.

        :param task_ids: Tasks that were notified.
        :param at: The run's timestamp.
        :raises TaskStoreError: If the store cannot be written.
        """
        ...


class ProfileLookup(Protocol):
    """Resolves a user to their delivery details."""

    def resolve(self, user_id: Identifier) -> UserProfile | None:
        """Look up a user's profile.

        :param user_id: The user to resolve.
        :returns: The profile, or None if the user has none.
        """
        ...


class Notifier(Protocol):
    """Delivers one message to one address."""

    def send(self, address: str, subject: str, body: str) -> bool:
        """Send a message.

        :param address: Recipient address.
        :param subject: Message subject.
        :param body: Message body.
        :returns: True if the message was accepted for delivery.
        """
        ...
