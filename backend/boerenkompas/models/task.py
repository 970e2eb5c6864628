import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from boerenkompas.db.base import Base, CreatedAtMixin, TenantScopedMixin, UUIDMixin


class TaskStatus(str, enum.Enum):
    open = "open"
    snoozed = "snoozed"
    done = "done"


class TaskSource(str, enum.Enum):
    manual = "manual"
    missing_item = "missing_item"


class Task(Base, UUIDMixin, TenantScopedMixin, CreatedAtMixin):
    """A to-do item; missing_item tasks are generated from dossier gaps."""

    __tablename__ = "tasks"

    source: Mapped[str] = mapped_column(String(20), nullable=False, default=TaskSource.manual.value)
    requirement_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.open.value, index=True
    )
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="normal")  # low, normal, urgent
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
