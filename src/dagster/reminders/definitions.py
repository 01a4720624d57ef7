"""Dagster definitions for task reminder jobs and schedules."""

from dagster import Definitions
from src.dagster.reminders.jobs import process_task_reminders_job
from src.dagster.reminders.schedules import process_task_reminders_schedule

defs = Definitions(
    jobs=[process_task_reminders_job],
    schedules=[process_task_reminders_schedule],
)
