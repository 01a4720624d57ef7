"""SQLAlchemy ORM models for tasks."""

import uuid as uuid_module
from datetime import UTC, date, datetime
from enum import StrEnum

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.database.core import Base

# Maximum length of title to show in repr
REPR_TITLE_MAX_LENGTH = 50


class TaskPriority(StrEnum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(Base):
    """ORM model for a user's task.

    Reminders are opt-in per task: when ``reminder_enabled`` is set and
    ``reminder_interval`` holds a positive number of minutes, the reminder
    job emails the owner every interval until the task is completed.
    """

    __tablename__ = "tasks"

    id: Mapped[uuid_module.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid_module.uuid4,
    )
    user_id: Mapped[uuid_module.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=TaskPriority.MEDIUM.value,
    )
    due_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    reminder_enabled: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    reminder_interval: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    last_reminder_sent: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("priority IN ('low', 'medium', 'high')", name="ck_tasks_priority"),
        Index("idx_tasks_reminder_candidates", "completed", "reminder_enabled"),
        Index("idx_tasks_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        """Return string representation of the task."""
        if len(self.title) > REPR_TITLE_MAX_LENGTH:
            title_preview = self.title[:REPR_TITLE_MAX_LENGTH] + "..."
        else:
            title_preview = self.title
        reminder = (
            f"every {self.reminder_interval}m" if self.reminder_enabled else "no reminder"
        )
        return f"<Task(id={self.id}, title={title_preview!r}, {reminder})>"
