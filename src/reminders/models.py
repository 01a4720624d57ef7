"""Pydantic models shared by the reminder job components."""

from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# Task and user identifiers are opaque to the reminder job
Identifier = UUID | int | str


class Priority(StrEnum):
    """Priority of a task as shown in reminders."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FailureReason(StrEnum):
    """Why a user's batch was not notified."""

    PROFILE_UNRESOLVED = "profile-unresolved"
    DELIVERY_FAILED = "delivery-failed"


class ReminderCandidate(BaseModel):
    """Read-only projection of a task that may need a reminder."""

    model_config = ConfigDict(frozen=True)

    id: Identifier = Field(..., description="Task identifier")
    title: str = Field(..., description="Task title")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")
    due_date: date | None = Field(default=None, description="The task's own due date")
    owner_id: Identifier = Field(..., description="Owning user identifier")
    reminder_interval_minutes: int | None = Field(
        default=None,
        description="Minutes between reminders; only positive values are eligible",
    )
    last_reminder_sent_at: datetime | None = Field(
        default=None,
        description="When the last reminder was sent; None if never",
    )


class UserProfile(BaseModel):
    """Delivery details for a task owner."""

    model_config = ConfigDict(frozen=True)

    user_id: Identifier = Field(..., description="User identifier")
    address: str | None = Field(default=None, description="Email address")
    display_name: str | None = Field(default=None, description="Name used in the greeting")


class RenderedMessage(BaseModel):
    """A rendered reminder ready to hand to a notifier."""

    model_config = ConfigDict(frozen=True)

    subject: str
    body: str


class DispatchResult(BaseModel):
    """Outcome of one reminder run.

    Only ``notified_task_ids`` is persisted, as the tasks' last-reminder time.
    """

    notified_task_ids: set[Identifier] = Field(
        default_factory=set,
        description="Tasks whose owner was successfully notified",
    )
    failed_users: dict[Identifier, FailureReason] = Field(
        default_factory=dict,
        description="Users whose batch was not notified, with the reason",
    )
    cancelled_user_ids: set[Identifier] = Field(
        default_factory=set,
        description="Users skipped because the run was cancelled",
    )
    sent_count: int = Field(default=0, description="Number of messages delivered")

    @property
    def failed_user_ids(self) -> set[Identifier]:
        """IDs of users whose batch failed."""
        return set(self.failed_users)

    def summary(self) -> str:
        """One-line summary for logs."""
        return (
            f"sent={self.sent_count}, notified_tasks={len(self.notified_task_ids)}, "
            f"failed_users={len(self.failed_users)}, "
            f"cancelled_users={len(self.cancelled_user_ids)}"
        )
