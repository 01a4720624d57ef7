"""Decide which reminder candidates are due."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from src.reminders.models import ReminderCandidate

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def reminder_interval(candidate: ReminderCandidate) -> timedelta | None:
    """Get a candidate's reminder interval.

    :param candidate: The candidate.
    :returns: The interval, or None if it is missing or not a positive integer.
    """
    minutes = candidate.reminder_interval_minutes
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        return None
    return timedelta(minutes=minutes)


def is_due(candidate: ReminderCandidate, now: datetime) -> bool:
    """Check whether a candidate needs a reminder at ``now``.

    A candidate that was never reminded is due immediately. Otherwise it is
    due once the full interval has elapsed; the boundary itself counts.

    :param candidate: The candidate.
    :param now: The run's timestamp.
    :returns: True if a reminder should be sent.
    """
    interval = reminder_interval(candidate)
    if interval is None:
        return False

    if candidate.last_reminder_sent_at is None:
        return True

    return _as_utc(now) - _as_utc(candidate.last_reminder_sent_at) >= interval


def compute_due(
    candidates: Iterable[ReminderCandidate],
    now: datetime,
) -> list[ReminderCandidate]:
    """Select the candidates that are due for a reminder.

    Candidates without a positive integer interval are skipped. The result
    keeps the input order.

    :param candidates: Candidate tasks.
    :param now: The run's timestamp, fixed by the caller.
    :returns: The due candidates.
    """
    due: list[ReminderCandidate] = []
    for candidate in candidates:
        if reminder_interval(candidate) is None:
            logger.debug(
                f"Skipping task {candidate.id}: invalid reminder interval "
                f"{candidate.reminder_interval_minutes!r}"
            )
            continue
        if is_due(candidate, now):
            due.append(candidate)
    return due
