"""Orchestrate one reminder run: read candidates, dispatch, commit."""

import logging
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import ValidationError

from src.reminders.config import ReminderConfig, get_reminder_settings
from src.reminders.dispatcher import BatchDispatcher, Renderer
from src.reminders.due import compute_due
from src.reminders.exceptions import (
    ReminderCommitError,
    ReminderConfigError,
    ReminderJobError,
    TaskStoreError,
)
from src.reminders.formatting import render_reminder
from src.reminders.models import DispatchResult, ReminderCandidate
from src.reminders.ports import Notifier, ProfileLookup, TaskStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Get the current time in UTC."""
    return datetime.now(UTC)


class ReminderJob:
    """Send due task reminders and record that they fired.

    The job keeps no state between runs; the task store's last-reminder
    timestamps are the only record of what has been sent.
    """

    def __init__(  # noqa: PLR0913
        self,
        task_store: TaskStore,
        profile_lookup: ProfileLookup,
        notifier: Notifier,
        *,
        settings: ReminderConfig | None = None,
        clock: Clock = utc_now,
        render: Renderer = render_reminder,
    ) -> None:
        """Initialise the job.

        :param task_store: Source of candidates and sink for timestamps.
        :param profile_lookup: Resolves owners to delivery details.
        :param notifier: Delivers reminder messages.
        :param settings: Job settings. Loaded from the environment if omitted.
        :param clock: Returns the current time; called once per run.
        :param render: Builds the message for a user's batch.
        :raises ReminderConfigError: If settings are loaded and invalid.
        """
        self._store = task_store
        try:
            self._settings = settings or get_reminder_settings()
        except ValidationError as e:
            raise ReminderConfigError(f"Invalid reminder settings: {e}") from e
        self._clock = clock
        self._dispatcher = BatchDispatcher(
            profile_lookup,
            notifier,
            settings=self._settings,
            render=render,
        )

    def run(self, cancel_event: threading.Event | None = None) -> DispatchResult:
        """Run the reminder job once.

        This performs the following:
        1. Capture the run's timestamp
        2. Fetch reminder candidates from the task store
        3. Select the candidates that are due
        4. Send one reminder per owner
        5. Record the run's timestamp on every notified task

        Per-user failures are reported in the result. Tasks whose owner was
        not notified keep their old timestamp and are retried next run.

        :param cancel_event: When set, no further users are started. Sends
            already made are still committed.
        :returns: The run's dispatch result.
        :raises TaskStoreError: If candidates cannot be read.
        :raises ReminderCommitError: If reminders were sent but could not be recorded.
        """
        now = self._clock()
        logger.info(f"Starting reminder run at {now.isoformat()}")

        candidates = self._fetch_candidates()
        logger.info(f"Found {len(candidates)} tasks with reminders enabled")

        due = compute_due(candidates, now)
        logger.info(f"{len(due)} tasks need reminders now")
        if not due:
            return DispatchResult()

        result = self._dispatcher.dispatch(due, cancel_event=cancel_event)

        if result.notified_task_ids:
            self._commit(result, now)

        if result.failed_users:
            failures = ", ".join(
                f"{user_id}={reason.value}" for user_id, reason in result.failed_users.items()
            )
            logger.warning(
                f"Reminders not delivered for {len(result.failed_users)} users: {failures}"
            )

        logger.info(f"Reminder run complete: {result.summary()}")
        return result

    def _fetch_candidates(self) -> list[ReminderCandidate]:
        try:
            return self._store.fetch_reminder_candidates()
        except ReminderJobError:
            raise
        except Exception as e:
            raise TaskStoreError(f"Failed to fetch reminder candidates: {e}") from e

    def _commit(self, result: DispatchResult, now: datetime) -> None:
        """Record the run's timestamp on every notified task.

        Retries a bounded number of times. If every attempt fails the
        messages have gone out without being recorded, which is reported
        rather than hidden.

        :param result: The run's dispatch result.
        :param now: The run's timestamp.
        :raises ReminderCommitError: If every attempt fails.
        """
        task_ids = frozenset(result.notified_task_ids)
        attempts = self._settings.commit_attempts
        last_error: Exception = TaskStoreError("No commit attempt was made")

        for attempt in range(1, attempts + 1):
            try:
                self._store.mark_reminded(task_ids, now)
                logger.info(f"Recorded reminder time for {len(task_ids)} tasks")
                return
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Failed to record reminder time (attempt {attempt}/{attempts}): {e}"
                )
                if attempt < attempts:
                    time.sleep(self._settings.commit_retry_delay_seconds)

        logger.error(
            f"Reminders sent but not recorded for {len(task_ids)} tasks; "
            f"they will be sent again next run: {sorted(map(str, task_ids))}"
        )
        raise ReminderCommitError(result, task_ids, last_error)
