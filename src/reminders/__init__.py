"""Task reminder job: decide which reminders are due, send them, record them."""

from src.reminders.dispatcher import BatchDispatcher, dispatch, group_by_owner
from src.reminders.due import compute_due, is_due
from src.reminders.exceptions import (
    ReminderCommitError,
    ReminderConfigError,
    ReminderJobError,
    TaskStoreError,
)
from src.reminders.job import ReminderJob
from src.reminders.models import (
    DispatchResult,
    FailureReason,
    Priority,
    ReminderCandidate,
    RenderedMessage,
    UserProfile,
)
from src.reminders.ports import Notifier, ProfileLookup, TaskStore

__all__ = [
    "BatchDispatcher",
    "DispatchResult",
    "FailureReason",
    "Notifier",
    "Priority",
    "ProfileLookup",
    "ReminderCandidate",
    "ReminderCommitError",
    "ReminderConfigError",
    "ReminderJob",
    "ReminderJobError",
    "RenderedMessage",
    "TaskStore",
    "TaskStoreError",
    "UserProfile",
    "compute_due",
    "dispatch",
    "group_by_owner",
    "is_due",
]
