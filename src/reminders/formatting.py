"""Render reminder emails."""

import html
from collections.abc import Sequence
from datetime import date

from src.reminders.models import Priority, ReminderCandidate, RenderedMessage, UserProfile

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

PRIORITY_MARKERS = {
    Priority.HIGH: "\U0001f534",
    Priority.MEDIUM: "\U0001f7e1",
    Priority.LOW: "\U0001f7e2",
}

DEFAULT_GREETING_NAME = "there"

_STYLE = (
    "body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; } "
    ".container { max-width: 600px; margin: 0 auto; padding: 20px; } "
    ".header { background: #7c3aed; padding: 24px; border-radius: 12px; text-align: center; } "
    ".header h1 { color: white; margin: 0; font-size: 24px; } "
    ".header p { color: rgba(255,255,255,0.9); margin: 8px 0 0; } "
    ".task-item { padding: 12px; background: #f8fafc; border-radius: 8px; margin-bottom: 8px; "
    "border-left: 4px solid #7c3aed; } "
    ".footer { text-align: center; margin-top: 20px; color: #64748b; font-size: 14px; }"
)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def format_interval(minutes: int) -> str:
    """Describe a reminder interval in words.

    :param minutes: Interval in minutes.
    :returns: Text such as "15 minutes", "1 hour", "1 hour 30 minutes" or "2 days".
    """
    if minutes < MINUTES_PER_HOUR:
        return _plural(minutes, "minute")

    if minutes % MINUTES_PER_DAY == 0:
        return _plural(minutes // MINUTES_PER_DAY, "day")

    hours, remainder = divmod(minutes, MINUTES_PER_HOUR)
    text = _plural(hours, "hour")
    if remainder:
        text += f" {_plural(remainder, 'minute')}"
    return text


def format_due_date(value: date) -> str:
    """Format a due date for display, e.g. "Jan 6, 2025"."""
    return f"{value:%b} {value.day}, {value.year}"


def build_subject(task_count: int) -> str:
    """Build the subject line of a reminder email.

    :param task_count: Number of tasks in the batch.
    :returns: The subject.
    """
    return f"⏰ Task Reminder: {_plural(task_count, 'pending task')}"


def format_task_line(task: ReminderCandidate) -> str:
    """Format one task as an HTML list item.

    :param task: The task to describe.
    :returns: HTML fragment.
    """
    marker = PRIORITY_MARKERS.get(task.priority, PRIORITY_MARKERS[Priority.MEDIUM])
    parts = [f"{marker} <strong>{html.escape(task.title)}</strong>"]
    if task.due_date is not None:
        parts.append(f" (Due: {format_due_date(task.due_date)})")
    if task.reminder_interval_minutes:
        parts.append(f" - Reminding every {format_interval(task.reminder_interval_minutes)}")
    return f'<div class="task-item">{"".join(parts)}</div>'


def build_body(profile: UserProfile, tasks: Sequence[ReminderCandidate]) -> str:
    """Build the HTML body of a reminder email.

    :param profile: The recipient.
    :param tasks: The recipient's due tasks, in display order.
    :returns: HTML document.
    """
    name = html.escape(profile.display_name or DEFAULT_GREETING_NAME)
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        '<head><meta charset="utf-8"><style>' + _STYLE + "</style></head>",
        "<body>",
        '<div class="container">',
        '<div class="header">',
        "<h1>⏰ Task Reminder</h1>",
        f"<p>You have {_plural(len(tasks), 'pending task')}</p>",
        "</div>",
        f"<p>Hi {name}!</p>",
        "<p>Here are your pending tasks with reminders enabled:</p>",
        *(format_task_line(task) for task in tasks),
        '<div class="footer">',
        "<p>Complete your tasks to stop receiving reminders.</p>",
        "<p>TaskFlow</p>",
        "</div>",
        "</div>",
        "</body>",
        "</html>",
    ]
    return "\n".join(lines)


def render_reminder(profile: UserProfile, tasks: Sequence[ReminderCandidate]) -> RenderedMessage:
    """Render the single reminder email for one user's batch.

    :param profile: The recipient.
    :param tasks: The recipient's due tasks.
    :returns: Subject and body.
    """
    return RenderedMessage(subject=build_subject(len(tasks)), body=build_body(profile, tasks))
