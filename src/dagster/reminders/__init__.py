"""Dagster jobs and schedules for task reminders."""

from src.dagster.reminders.definitions import defs
from src.dagster.reminders.jobs import process_task_reminders_job
from src.dagster.reminders.ops import process_task_reminders_op
from src.dagster.reminders.schedules import process_task_reminders_schedule

__all__ = [
    "defs",
    "process_task_reminders_job",
    "process_task_reminders_op",
    "process_task_reminders_schedule",
]
