import enum
from datetime import date

from sqlalchemy import Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from boerenkompas.db.base import Base, CreatedAtMixin, TenantScopedMixin, UUIDMixin


class DocumentStatus(str, enum.Enum):
    ok = "ok"
    needs_review = "needs_review"
    expired = "expired"
    missing = "missing"


class Document(Base, UUIDMixin, TenantScopedMixin, CreatedAtMixin):
    __tablename__ = "documents"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    storage_key: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="overig")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DocumentStatus.needs_review.value, index=True
    )  # ok, needs_review, expired, missing
    doc_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expires_at: Mapped[date | None] = mapped_column(Date, nullable=True)  # date only, no time
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
