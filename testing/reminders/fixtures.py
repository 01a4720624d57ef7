"""Shared fakes and builders for reminder tests."""

import threading
from collections.abc import Collection
from datetime import UTC, datetime, timedelta

from src.reminders.config import ReminderConfig
from src.reminders.models import Identifier, Priority, ReminderCandidate, UserProfile

NOW = datetime(2025, 1, 6, 12, 0, 0, tzinfo=UTC)


def make_settings(**overrides: object) -> ReminderConfig:
    """Build reminder settings without reading the environment."""
    values: dict[str, object] = {
        "max_workers": 4,
        "lookup_timeout_seconds": 5.0,
        "send_timeout_seconds": 5.0,
        "commit_attempts": 3,
        "commit_retry_delay_seconds": 0.0,
    }
    values.update(overrides)
    return ReminderConfig.model_construct(**values)


def make_candidate(  # noqa: PLR0913
    task_id: Identifier,
    owner_id: Identifier = "user-1",
    interval: int | None = 60,
    last_sent_minutes_ago: int | None = None,
    title: str | None = None,
    priority: Priority = Priority.MEDIUM,
    now: datetime = NOW,
) -> ReminderCandidate:
    """Build a candidate whose last reminder was sent some minutes before ``now``."""
    last_sent = None
    if last_sent_minutes_ago is not None:
        last_sent = now - timedelta(minutes=last_sent_minutes_ago)
    return ReminderCandidate(
        id=task_id,
        title=title or f"Task {task_id}",
        priority=priority,
        owner_id=owner_id,
        reminder_interval_minutes=interval,
        last_reminder_sent_at=last_sent,
    )


class FakeProfileLookup:
    """Profile lookup returning fixed profiles and recording calls."""

    def __init__(self, profiles: dict[Identifier, UserProfile | None] | None = None) -> None:
        self.profiles = profiles or {}
        self.calls: list[Identifier] = []
        self._lock = threading.Lock()

    def resolve(self, user_id: Identifier) -> UserProfile | None:
        with self._lock:
            self.calls.append(user_id)
        return self.profiles.get(user_id)


class FakeNotifier:
    """Notifier that succeeds unless the address is listed as failing."""

    def __init__(self, failing_addresses: Collection[str] = ()) -> None:
        self.failing_addresses = set(failing_addresses)
        self.sent: list[tuple[str, str, str]] = []
        self._lock = threading.Lock()

    def send(self, address: str, subject: str, body: str) -> bool:
        with self._lock:
            self.sent.append((address, subject, body))
        return address not in self.failing_addresses

    @property
    def addresses(self) -> list[str]:
        return [address for address, _, _ in self.sent]


class FakeTaskStore:
    """In-memory task store that applies ``mark_reminded`` to its candidates."""

    def __init__(self, candidates: list[ReminderCandidate]) -> None:
        self.candidates = list(candidates)
        self.fetch_calls = 0
        self.mark_calls: list[tuple[frozenset[Identifier], datetime]] = []

    def fetch_reminder_candidates(self) -> list[ReminderCandidate]:
        self.fetch_calls += 1
        return list(self.candidates)

    def mark_reminded(self, task_ids: Collection[Identifier], at: datetime) -> None:
        self.mark_calls.append((frozenset(task_ids), at))
        self.candidates = [
            c.model_copy(update={"last_reminder_sent_at": at}) if c.id in task_ids else c
            for c in self.candidates
        ]


def profile(user_id: Identifier, address: str | None = None, name: str | None = None) -> UserProfile:
    """Build a profile with a default address derived from the user ID."""
    return UserProfile(
        user_id=user_id,
        address=address if address is not None else f"{user_id}@example.com",
        display_name=name,
    )
