"""Pydantic models for the reminder API endpoints."""

from pydantic import BaseModel, Field

from src.reminders.models import DispatchResult


class ReminderRunResponse(BaseModel):
    """Response after triggering a reminder run."""

    message: str = Field(..., description="Human-readable outcome")
    sent: int = Field(..., description="Number of reminder emails delivered")
    notified_task_ids: list[str] = Field(
        default_factory=list,
        description="Tasks whose reminder time was recorded",
    )
    failed_users: dict[str, str] = Field(
        default_factory=dict,
        description="Users not notified, mapped to the failure reason",
    )

    @classmethod
    def from_result(cls, result: DispatchResult) -> "ReminderRunResponse":
        """Build a response from a dispatch result.

        :param result: The run's dispatch result.
        :returns: The response model.
        """
        if result.sent_count:
            message = "Reminders sent"
        elif result.failed_users:
            message = "No reminders delivered"
        else:
            message = "No tasks due for reminders"

        return cls(
            message=message,
            sent=result.sent_count,
            notified_task_ids=sorted(str(task_id) for task_id in result.notified_task_ids),
            failed_users={
                str(user_id): reason.value for user_id, reason in result.failed_users.items()
            },
        )
