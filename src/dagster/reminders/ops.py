"""Dagster ops for sending task reminder emails."""

from dagster import Backoff, Failure, Jitter, MetadataValue, OpExecutionContext, RetryPolicy, op
from src.reminders.exceptions import ReminderCommitError, ReminderConfigError
from src.reminders.factory import create_reminder_job
from src.reminders.models import DispatchResult

# Retry policy for the reminder op. Only store read failures are retried;
# a retry re-reads the task store so nothing already recorded is resent.
REMINDER_RETRY_POLICY = RetryPolicy(
    max_retries=1,
    delay=30,
    backoff=Backoff.EXPONENTIAL,
    jitter=Jitter.FULL,
)


@op(
    name="process_task_reminders",
    retry_policy=REMINDER_RETRY_POLICY,
    description="Send reminder emails for due tasks and record when they were sent.",
)
def process_task_reminders_op(context: OpExecutionContext) -> DispatchResult:
    """Run the reminder job once.

    Per-user delivery failures are logged and left for the next run. A
    configuration error or a failed commit after sending fails the op
    without retrying; a store read failure is retried.

    :param context: Dagster execution context.
    :returns: The run's dispatch result.
    :raises Failure: If the job is misconfigured or its commit failed.
    """
    context.log.info("Starting task reminder run")

    try:
        job = create_reminder_job()
        result = job.run()
    except ReminderConfigError as e:
        raise Failure(
            description=f"Reminder job is not configured: {e}",
            allow_retries=False,
        ) from e
    except ReminderCommitError as e:
        raise Failure(
            description=str(e),
            metadata={
                "uncommitted_task_ids": MetadataValue.json(
                    sorted(str(task_id) for task_id in e.uncommitted_task_ids)
                ),
                "sent_count": e.result.sent_count,
            },
            allow_retries=False,
        ) from e

    for user_id, reason in result.failed_users.items():
        context.log.warning(f"Reminder not delivered to user {user_id}: {reason.value}")

    context.log.info(f"Task reminder run complete: {result.summary()}")
    return result
