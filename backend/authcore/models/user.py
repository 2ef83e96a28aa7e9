"""User account model backing the authentication store."""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Integer, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, validates

from authcore.core.extensions import db

from .base import OpaqueIdMixin, ReprMixin, TimestampMixin

NAME_MAX_LENGTH = 100


def normalize_email(value: str) -> str:
    """
    Normalize an email address for storage and lookup.

    :param value: Raw email address.
    :returns: Lowercased, trimmed email.
    :raises ValueError: If the value is empty or obviously malformed.
    """
    if not value or not isinstance(value, str):
        raise ValueError("Email is required.")
    v = value.strip().lower()
    # Minimal sanity check; full validation happens at API layer.
    if "@" not in v or "." not in v.split("@")[-1]:
        raise ValueError("Email format looks invalid.")
    return v


class User(OpaqueIdMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity and the state the session engine depends on.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed); unique.
    password_hash : str
        Credential digest produced by the password hasher. Never the raw secret.
    name : str | None
        Optional display name.
    email_verified : bool
        Whether the owner proved control of ``email``.
    token_version : int
        Revocation counter. Refresh tokens embed the value seen at issuance and
        stop working once it advances. Only ever incremented.
    created_at / updated_at : datetime
        Timestamps (from mixin).
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(NAME_MAX_LENGTH), nullable=True)
    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    token_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("token_version >= 0", name="token_version_non_negative"),
    )

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """Normalize and validate email (see :func:`normalize_email`)."""
        return normalize_email(value)

    @validates("name")
    def _normalize_name(self, key: str, value: str | None) -> str | None:
        """
        Trim the display name; blank names are stored as ``NULL``.

        :raises ValueError: If the trimmed name exceeds the column size.
        """
        if value is None:
            return None
        v = value.strip()
        if not v:
            return None
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"Name must be at most {NAME_MAX_LENGTH} characters.")
        return v
