"""Custom exceptions for the reminder job."""

from __future__ import annotations

from collections.abc import Collection
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.reminders.models import DispatchResult, Identifier


class ReminderJobError(Exception):
    """Base exception for job-level reminder failures."""


class ReminderConfigError(ReminderJobError):
    """Raised when the job cannot run because a collaborator is misconfigured.

    Raised before any store access, so nothing is sent or committed.
    """


class TaskStoreError(ReminderJobError):
    """Raised when the task store cannot be read or written."""


class ReminderCommitError(ReminderJobError):
    """Raised when reminders were delivered but their timestamps were not saved.

    The affected tasks will be reminded again on the next run unless an
    operator reconciles them.
    """

    def __init__(
        self,
        result: DispatchResult,
        uncommitted_task_ids: Collection[Identifier],
        cause: Exception,
    ) -> None:
        """Initialise ReminderCommitError.

        :param result: The dispatch result of the run.
        :param uncommitted_task_ids: Task IDs that were notified but not marked.
        :param cause: The final store error.
        """
        self.result = result
        self.uncommitted_task_ids = frozenset(uncommitted_task_ids)
        self.cause = cause
        super().__init__(
            f"Sent {result.sent_count} reminders but failed to record "
            f"{len(self.uncommitted_task_ids)} task timestamps: {cause}"
        )
