"""Dagster schedules for task reminders."""

from dagster import DefaultScheduleStatus, ScheduleDefinition
from src.dagster.reminders.jobs import process_task_reminders_job

# Check for due reminders at the top of every hour
process_task_reminders_schedule = ScheduleDefinition(
    job=process_task_reminders_job,
    cron_schedule="0 * * * *",
    execution_timezone="UTC",
    default_status=DefaultScheduleStatus.RUNNING,
)
