"""Database-backed task store and profile lookup for the reminder job."""

import logging
import uuid as uuid_module
from collections.abc import Callable, Collection
from contextlib import AbstractContextManager
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.database.connection import get_session
from src.database.profiles import get_profile_by_user_id
from src.database.tasks import Task, get_reminder_candidates, mark_tasks_reminded
from src.reminders.exceptions import TaskStoreError
from src.reminders.models import Identifier, ReminderCandidate, UserProfile

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[Session]]


def task_to_candidate(task: Task) -> ReminderCandidate:
    """Project a task row onto the fields the reminder job needs.

    :param task: The ORM task.
    :returns: The reminder candidate.
    """
    return ReminderCandidate(
        id=task.id,
        title=task.title,
        priority=task.priority,
        due_date=task.due_date,
        owner_id=task.user_id,
        reminder_interval_minutes=task.reminder_interval,
        last_reminder_sent_at=task.last_reminder_sent,
    )


def _as_uuid(value: Identifier) -> uuid_module.UUID:
    return value if isinstance(value, uuid_module.UUID) else uuid_module.UUID(str(value))


class SqlTaskStore:
    """Task store backed by the ``tasks`` table."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        """Initialise the store.

        :param session_factory: Context manager yielding a committed session.
        """
        self._session_factory = session_factory

    def fetch_reminder_candidates(self) -> list[ReminderCandidate]:
        """Fetch incomplete, reminder-enabled tasks with a positive interval.

        :returns: Candidate tasks.
        :raises TaskStoreError: If the query fails.
        """
        candidates: list[ReminderCandidate] = []
        try:
            with self._session_factory() as session:
                for task in get_reminder_candidates(session):
                    try:
                        candidates.append(task_to_candidate(task))
                    except ValidationError as e:
                        logger.warning(f"Skipping malformed task {task.id}: {e}")
        except SQLAlchemyError as e:
            raise TaskStoreError(f"Failed to query reminder candidates: {e}") from e

        return candidates

    def mark_reminded(self, task_ids: Collection[Identifier], at: datetime) -> None:
        """Set ``last_reminder_sent`` on the given tasks in one statement.

        :param task_ids: Tasks that were notified.
        :param at: The run's timestamp.
        :raises TaskStoreError: If the update fails.
        """
        try:
            with self._session_factory() as session:
                updated = mark_tasks_reminded(session, [_as_uuid(i) for i in task_ids], at)
        except SQLAlchemyError as e:
            raise TaskStoreError(f"Failed to record reminder time: {e}") from e

        if updated != len(task_ids):
            # Tasks deleted mid-run simply have nothing to update
            logger.warning(f"Expected to mark {len(task_ids)} tasks reminded, updated {updated}")


class SqlProfileLookup:
    """Profile lookup backed by the ``profiles`` table."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        """Initialise the lookup.

        :param session_factory: Context manager yielding a committed session.
        """
        self._session_factory = session_factory

    def resolve(self, user_id: Identifier) -> UserProfile | None:
        """Look up a user's email and display name.

        :param user_id: The user to resolve.
        :returns: The profile, or None if the user has none.
        """
        with self._session_factory() as session:
            profile = get_profile_by_user_id(session, _as_uuid(user_id))
            if profile is None:
                return None
            return UserProfile(user_id=user_id, address=profile.email, display_name=profile.name)
