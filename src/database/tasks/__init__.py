"""Database models and operations for tasks."""

from src.database.tasks.models import Task, TaskPriority
from src.database.tasks.operations import (
    clear_completed_tasks,
    configure_task_reminder,
    create_task,
    delete_task,
    get_reminder_candidates,
    get_task_by_id,
    list_tasks_for_user,
    mark_tasks_reminded,
    set_task_completed,
)

__all__ = [
    # Models
    "Task",
    "TaskPriority",
    # Operations
    "clear_completed_tasks",
    "configure_task_reminder",
    "create_task",
    "delete_task",
    "get_reminder_candidates",
    "get_task_by_id",
    "list_tasks_for_user",
    "mark_tasks_reminded",
    "set_task_completed",
]
