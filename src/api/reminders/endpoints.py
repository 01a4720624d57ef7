"""API endpoint for triggering a task reminder run."""

import logging

from fastapi import APIRouter, HTTPException, status

from src.api.models import ErrorResponse
from src.api.reminders.models import ReminderRunResponse
from src.reminders.exceptions import ReminderCommitError, ReminderConfigError, TaskStoreError
from src.reminders.factory import create_reminder_job

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["Reminders"])


@router.post(
    "/run",
    response_model=ReminderRunResponse,
    responses={503: {"model": ErrorResponse, "description": "Task store unavailable"}},
    summary="Run the reminder job",
    description="Send reminder emails for every task whose interval has elapsed.",
)
def run_reminders() -> ReminderRunResponse:
    """Run the reminder job once.

    :returns: Summary of the run.
    :raises HTTPException: 500 if misconfigured or the commit failed,
        503 if the task store is unavailable.
    """
    try:
        job = create_reminder_job()
        result = job.run()
    except ReminderConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e
    except ReminderCommitError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=(
                f"Sent {e.result.sent_count} reminders but failed to record them for tasks: "
                f"{', '.join(sorted(str(task_id) for task_id in e.uncommitted_task_ids))}"
            ),
        ) from e
    except TaskStoreError as e:
        logger.exception("Reminder run failed: task store unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Task store unavailable",
        ) from e

    return ReminderRunResponse.from_result(result)
