"""SQLAlchemy declarative base with time-ordered UUID primary key mixin."""

from __future__ import annotations

from datetime import datetime, timezone
from sqlalchemy import String, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from ulid import ULID


def new_id() -> str:
    """ULID rendered in UUID form: sorts by creation time, validates as a UUID."""
    return str(ULID().to_uuid())


class Base(DeclarativeBase):
    pass


class IdMixin:
    """Mixin that provides a ULID-backed UUID primary key and created_at timestamp."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
