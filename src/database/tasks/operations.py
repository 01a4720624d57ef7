"""Database operations for tasks."""

from __future__ import annotations

import logging
import uuid as uuid_module
from collections.abc import Collection
from datetime import UTC, date, datetime

from sqlalchemy.orm import Session

from src.database.tasks.models import Task, TaskPriority

logger = logging.getLogger(__name__)


def create_task(  # noqa: PLR0913
    session: Session,
    user_id: uuid_module.UUID,
    title: str,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due_date: date | None = None,
    description: str | None = None,
) -> Task:
    """Create a new task for a user.

    Reminders start disabled; use ``configure_task_reminder`` to opt in.

    :param session: Database session.
    :param user_id: Owning user ID.
    :param title: Task title.
    :param priority: Task priority.
    :param due_date: Optional due date.
    :param description: Optional free-text description.
    :returns: The created task.
    """
    task = Task(
        user_id=user_id,
        title=title,
        priority=priority.value,
        due_date=due_date,
        description=description,
        completed=False,
        reminder_enabled=False,
    )
    session.add(task)
    session.flush()
    logger.info(f"Created task: id={task.id}, user_id={user_id}")
    return task


def get_task_by_id(
    session: Session,
    task_id: uuid_module.UUID,
) -> Task | None:
    """Get a task by ID.

    :param session: Database session.
    :param task_id: Task ID.
    :returns: The task or None if not found.
    """
    return session.query(Task).filter(Task.id == task_id).first()


def list_tasks_for_user(
    session: Session,
    user_id: uuid_module.UUID,
    include_completed: bool = True,
) -> list[Task]:
    """List a user's tasks, newest first.

    :param session: Database session.
    :param user_id: Owning user ID.
    :param include_completed: Whether to include completed tasks.
    :returns: List of tasks.
    """
    query = session.query(Task).filter(Task.user_id == user_id)

    if not include_completed:
        query = query.filter(Task.completed.is_(False))

    return query.order_by(Task.created_at.desc()).all()


def set_task_completed(
    session: Session,
    task_id: uuid_module.UUID,
    completed: bool,
    now: datetime | None = None,
) -> Task | None:
    """Mark a task complete or incomplete.

    Completing a task removes it from reminder candidacy.

    :param session: Database session.
    :param task_id: Task ID.
    :param completed: New completion state.
    :param now: Current time (defaults to now).
    :returns: The updated task or None if not found.
    """
    task = get_task_by_id(session, task_id)
    if task is None:
        return None

    task.completed = completed
    task.completed_at = (now or datetime.now(UTC)) if completed else None
    session.flush()
    logger.info(f"Set task completed: id={task_id}, completed={completed}")
    return task


def configure_task_reminder(
    session: Session,
    task_id: uuid_module.UUID,
    enabled: bool,
    interval_minutes: int | None = None,
) -> Task | None:
    """Enable or disable reminders for a task.

    Disabling leaves the stored interval and last-sent timestamp untouched,
    so re-enabling resumes the previous cadence.

    :param session: Database session.
    :param task_id: Task ID.
    :param enabled: Whether reminders should be sent.
    :param interval_minutes: Minutes between reminders. Required when enabling
        unless the task already has one.
    :returns: The updated task or None if not found.
    :raises ValueError: If enabling without a positive interval.
    """
    task = get_task_by_id(session, task_id)
    if task is None:
        return None

    if interval_minutes is not None:
        if interval_minutes <= 0:
            raise ValueError(f"Reminder interval must be positive, got {interval_minutes}")
        task.reminder_interval = interval_minutes

    if enabled and not task.reminder_interval:
        raise ValueError("A positive reminder interval is required to enable reminders")

    task.reminder_enabled = enabled
    session.flush()
    logger.info(
        f"Configured task reminder: id={task_id}, enabled={enabled}, "
        f"interval={task.reminder_interval}"
    )
    return task


def delete_task(
    session: Session,
    task_id: uuid_module.UUID,
) -> bool:
    """Delete a task.

    :param session: Database session.
    :param task_id: Task ID.
    :returns: True if a task was deleted.
    """
    deleted = session.query(Task).filter(Task.id == task_id).delete()
    session.flush()
    logger.info(f"Deleted task: id={task_id}, deleted={deleted}")
    return deleted > 0


def clear_completed_tasks(
    session: Session,
    user_id: uuid_module.UUID,
) -> int:
    """Delete all of a user's completed tasks.

    :param session: Database session.
    :param user_id: Owning user ID.
    :returns: Number of tasks deleted.
    """
    deleted = (
        session.query(Task)
        .filter(Task.user_id == user_id, Task.completed.is_(True))
        .delete(synchronize_session=False)
    )
    session.flush()
    logger.info(f"Cleared {deleted} completed tasks for user_id={user_id}")
    return deleted


def get_reminder_candidates(session: Session) -> list[Task]:
    """Get tasks that may need a reminder.

    Returns tasks that are:
    - not completed
    - reminder enabled
    - configured with a positive interval

    Whether each one is due right now is decided by the reminder job.

    :param session: Database session.
    :returns: Candidate tasks in creation order.
    """
    return (
        session.query(Task)
        .filter(
            Task.completed.is_(False),
            Task.reminder_enabled.is_(True),
            Task.reminder_interval.is_not(None),
            Task.reminder_interval > 0,
        )
        .order_by(Task.created_at, Task.id)
        .all()
    )


def mark_tasks_reminded(
    session: Session,
    task_ids: Collection[uuid_module.UUID],
    sent_at: datetime,
) -> int:
    """Record that a reminder was sent for the given tasks.

    Issues a single bulk UPDATE so every task notified in a run shares the
    same timestamp.

    :param session: Database session.
    :param task_ids: IDs of the tasks that were notified.
    :param sent_at: The run's timestamp.
    :returns: Number of rows updated.
    """
    if not task_ids:
        return 0

    updated = (
        session.query(Task)
        .filter(Task.id.in_(list(task_ids)))
        .update({"last_reminder_sent": sent_at}, synchronize_session=False)
    )
    session.flush()
    logger.info(f"Marked {updated} tasks reminded at {sent_at.isoformat()}")
    return updated
