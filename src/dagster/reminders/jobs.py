"""Dagster jobs for task reminders."""

from dagster import job
from src.dagster.reminders.ops import process_task_reminders_op


@job(
    name="process_task_reminders_job",
    description="Send due task reminder emails (runs hourly).",
)
def process_task_reminders_job() -> None:
    """Task reminders job.

    Finds tasks whose reminder interval has elapsed, emails each owner one
    summary, and records the send time on the notified tasks.
    """
    process_task_reminders_op()
