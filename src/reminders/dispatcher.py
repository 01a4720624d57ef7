"""Send one reminder per user for a run's due tasks.

Each user's batch is processed on a worker thread and produces an immutable
``UserOutcome``. The calling thread is the only writer of the run's
``DispatchResult`` and folds the outcomes in once every worker has finished,
so workers never share mutable state.

Profile lookups and sends each run on a short-lived daemon thread with a
bounded wait, so a hung collaborator costs one user a timeout and never
holds up other users or process exit.
"""

import concurrent.futures
import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from src.reminders.config import ReminderConfig
from src.reminders.formatting import render_reminder
from src.reminders.models import (
    DispatchResult,
    FailureReason,
    Identifier,
    ReminderCandidate,
    RenderedMessage,
    UserProfile,
)
from src.reminders.ports import Notifier, ProfileLookup

logger = logging.getLogger(__name__)

T = TypeVar("T")

Renderer = Callable[[UserProfile, Sequence[ReminderCandidate]], RenderedMessage]


@dataclass(frozen=True)
class UserBatch:
    """One user's due tasks, in input order."""

    owner_id: Identifier
    tasks: tuple[ReminderCandidate, ...]

    @property
    def task_ids(self) -> tuple[Identifier, ...]:
        """IDs of the tasks in the batch."""
        return tuple(task.id for task in self.tasks)


@dataclass(frozen=True)
class UserOutcome:
    """Result of processing one user's batch."""

    owner_id: Identifier
    task_ids: tuple[Identifier, ...]
    failure: FailureReason | None = None
    cancelled: bool = False

    @property
    def delivered(self) -> bool:
        """Whether the user's message was delivered."""
        return self.failure is None and not self.cancelled


class CallTimeoutError(Exception):
    """Raised when a collaborator call exceeds its timeout."""

    def __init__(self, operation: str, timeout: float) -> None:
        """Initialise CallTimeoutError.

        :param operation: Description of the call.
        :param timeout: The timeout in seconds.
        """
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout}s")


def group_by_owner(due: Sequence[ReminderCandidate]) -> list[UserBatch]:
    """Group due tasks by owner.

    Owners appear in order of their first task; tasks keep their input order.

    :param due: Due candidates.
    :returns: One batch per owner.
    """
    groups: dict[Identifier, list[ReminderCandidate]] = {}
    for task in due:
        groups.setdefault(task.owner_id, []).append(task)
    return [UserBatch(owner_id=owner, tasks=tuple(tasks)) for owner, tasks in groups.items()]


class BatchDispatcher:
    """Deliver reminder batches through a profile lookup and a notifier."""

    def __init__(
        self,
        profile_lookup: ProfileLookup,
        notifier: Notifier,
        settings: ReminderConfig,
        render: Renderer = render_reminder,
    ) -> None:
        """Initialise the dispatcher.

        :param profile_lookup: Resolves owners to delivery details.
        :param notifier: Delivers rendered messages.
        :param settings: Concurrency and timeout settings.
        :param render: Builds the message for a batch.
        """
        self._profiles = profile_lookup
        self._notifier = notifier
        self._settings = settings
        self._render = render

    def dispatch(
        self,
        due: Sequence[ReminderCandidate],
        cancel_event: threading.Event | None = None,
    ) -> DispatchResult:
        """Send one reminder per owner of the due tasks.

        :param due: Due candidates.
        :param cancel_event: When set, no further users are started.
        :returns: The aggregated result of the run.
        """
        result = DispatchResult()
        batches = group_by_owner(due)
        if not batches:
            return result

        logger.info(f"Dispatching reminders for {len(due)} tasks across {len(batches)} users")

        workers = min(self._settings.max_workers, len(batches))
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix="reminder-user",
        ) as user_executor:
            futures: list[tuple[UserBatch, concurrent.futures.Future[UserOutcome]]] = []
            for batch in batches:
                if _is_cancelled(cancel_event):
                    futures.append((batch, _completed(_cancelled_outcome(batch))))
                    continue
                futures.append(
                    (batch, user_executor.submit(self._process_batch, batch, cancel_event))
                )

            outcomes = [self._collect(batch, future) for batch, future in futures]

        for outcome in outcomes:
            _apply_outcome(result, outcome)

        return result

    def _collect(
        self,
        batch: UserBatch,
        future: concurrent.futures.Future[UserOutcome],
    ) -> UserOutcome:
        """Wait for a user's outcome.

        ``_process_batch`` handles its own errors; anything escaping it is a
        bug, and the batch is treated as undelivered so it is retried.
        """
        try:
            return future.result()
        except Exception:
            logger.exception(f"Unexpected error dispatching reminders for user {batch.owner_id}")
            return UserOutcome(
                owner_id=batch.owner_id,
                task_ids=batch.task_ids,
                failure=FailureReason.DELIVERY_FAILED,
            )

    def _process_batch(
        self,
        batch: UserBatch,
        cancel_event: threading.Event | None,
    ) -> UserOutcome:
        """Resolve, render and send one user's reminder.

        :param batch: The user's due tasks.
        :param cancel_event: Checked once before any work starts.
        :returns: The user's outcome.
        """
        if _is_cancelled(cancel_event):
            return _cancelled_outcome(batch)

        try:
            profile = _call_with_timeout(
                f"Profile lookup for user {batch.owner_id}",
                self._settings.lookup_timeout_seconds,
                self._profiles.resolve,
                batch.owner_id,
            )
        except Exception as e:
            logger.warning(f"Could not resolve profile for user {batch.owner_id}: {e}")
            return _failed_outcome(batch, FailureReason.PROFILE_UNRESOLVED)

        if profile is None or not profile.address:
            logger.warning(f"No email address for user {batch.owner_id}")
            return _failed_outcome(batch, FailureReason.PROFILE_UNRESOLVED)

        message = self._render(profile, batch.tasks)

        try:
            delivered = _call_with_timeout(
                f"Reminder send to user {batch.owner_id}",
                self._settings.send_timeout_seconds,
                self._notifier.send,
                profile.address,
                message.subject,
                message.body,
            )
        except Exception as e:
            logger.warning(f"Failed to send reminder to user {batch.owner_id}: {e}")
            return _failed_outcome(batch, FailureReason.DELIVERY_FAILED)

        if not delivered:
            logger.warning(f"Notifier rejected reminder for user {batch.owner_id}")
            return _failed_outcome(batch, FailureReason.DELIVERY_FAILED)

        logger.info(f"Sent reminder to user {batch.owner_id} covering {len(batch.tasks)} tasks")
        return UserOutcome(owner_id=batch.owner_id, task_ids=batch.task_ids)


def dispatch(  # noqa: PLR0913
    due: Sequence[ReminderCandidate],
    profile_lookup: ProfileLookup,
    notifier: Notifier,
    *,
    settings: ReminderConfig | None = None,
    render: Renderer = render_reminder,
    cancel_event: threading.Event | None = None,
) -> DispatchResult:
    """Send one reminder per owner of the due tasks.

    :param due: Due candidates.
    :param profile_lookup: Resolves owners to delivery details.
    :param notifier: Delivers rendered messages.
    :param settings: Concurrency and timeout settings; defaults apply if omitted.
    :param render: Builds the message for a batch.
    :param cancel_event: When set, no further users are started.
    :returns: The aggregated result.
    """
    dispatcher = BatchDispatcher(
        profile_lookup,
        notifier,
        settings=settings or ReminderConfig(),
        render=render,
    )
    return dispatcher.dispatch(due, cancel_event=cancel_event)


def _is_cancelled(cancel_event: threading.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _failed_outcome(batch: UserBatch, reason: FailureReason) -> UserOutcome:
    return UserOutcome(owner_id=batch.owner_id, task_ids=batch.task_ids, failure=reason)


def _cancelled_outcome(batch: UserBatch) -> UserOutcome:
    return UserOutcome(owner_id=batch.owner_id, task_ids=batch.task_ids, cancelled=True)


def _completed(outcome: UserOutcome) -> concurrent.futures.Future[UserOutcome]:
    future: concurrent.futures.Future[UserOutcome] = concurrent.futures.Future()
    future.set_result(outcome)
    return future


def _apply_outcome(result: DispatchResult, outcome: UserOutcome) -> None:
    """Fold one user's outcome into the run result."""
    if outcome.cancelled:
        result.cancelled_user_ids.add(outcome.owner_id)
    elif outcome.failure is not None:
        result.failed_users[outcome.owner_id] = outcome.failure
    else:
        result.notified_task_ids.update(outcome.task_ids)
        result.sent_count += 1


def _call_with_timeout(
    operation: str,
    timeout: float,
    func: Callable[..., T],
    *args: object,
) -> T:
    """Run a collaborator call with a bounded wait.

    The call runs on its own daemon thread, so the timeout starts when the
    call does and a hung call never blocks interpreter exit. A timed-out
    call is abandoned; its thread ends whenever the call returns.

    :param operation: Description used in the timeout error.
    :param timeout: Seconds to wait.
    :param func: The call to make.
    :returns: The call's return value.
    :raises CallTimeoutError: If the call does not finish in time.
    """
    future: concurrent.futures.Future[T] = concurrent.futures.Future()

    def _run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(func(*args))
        except BaseException as e:
            future.set_exception(e)

    threading.Thread(target=_run, name="reminder-io", daemon=True).start()
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        logger.warning(f"{operation} still running after {timeout}s, abandoning it")
        raise CallTimeoutError(operation, timeout) from None
