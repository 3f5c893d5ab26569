"""
logieventos.db.base

SQLAlchemy declarative base.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    # Naive UTC; SQLite has no tz-aware storage.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class RecordMixin:
    """
    Columns shared by every stored record.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)


# --- Module Notes -----------------------------------------------------------
# All ORM models inherit from `Base` so Alembic and metadata discovery work.
