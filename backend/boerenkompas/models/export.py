import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from boerenkompas.db.base import Base, CreatedAtMixin, TenantScopedMixin, UUIDMixin


class Export(Base, UUIDMixin, TenantScopedMixin, CreatedAtMixin):
    """A generated dossier export (PDF/HTML bundle), optionally shareable by token."""

    __tablename__ = "exports"

    template_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    share_token: Mapped[str | None] = mapped_column(String(128), nullable=True, unique=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
