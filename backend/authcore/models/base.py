"""Reusable SQLAlchemy mixins shared by domain models (typed 2.0)."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    """Return the current timezone-aware UTC instant."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values (SQLite drops the offset on read)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def new_identifier() -> str:
    """Return a fresh opaque identifier (32 lowercase hex characters)."""
    return uuid4().hex


class TimestampMixin:
    """Provide ``created_at`` and ``updated_at`` timestamp columns.

    Attributes
    ----------
    created_at:
        Timezone-aware timestamp set on insert.
    updated_at:
        Timezone-aware timestamp refreshed on every ORM update.

    Notes
    -----
    Values are produced application-side so every backend stores the same UTC
    clock; the server defaults only cover rows written outside the ORM.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


class OpaqueIdMixin:
    """Expose an opaque string primary key column named ``id``.

    Attributes
    ----------
    id:
        Random hex identifier generated application-side. It carries no
        ordering or count information, so it is safe to embed in tokens.
    """

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_identifier)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"
