"""User repository for persistence and account-state utilities."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from authcore.models.base import utcnow
from authcore.models.user import User, normalize_email
from authcore.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    This repository focuses on lookup, credential/verification setters, the
    revocation counter and aggregate counts. It never creates or checks tokens.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        """Expose sortable fields for safe public sorting."""
        return {
            "id": User.id,
            "email": User.email,
            "created_at": User.created_at,
            "updated_at": User.updated_at,
        }

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not the credential or counter)."""
        return {"email", "name"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str, *, exclude_id: str | None = None) -> bool:
        """Return ``True`` when another user already claims ``email``.

        :param email: Email address to normalise and search.
        :param exclude_id: Optional user id ignored by the check (self-updates).
        """
        stmt = select(User.id).where(User.email == normalize_email(email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    # ---------------------------- Account state ----------------------------

    def update_password_hash(self, user: User, digest: str) -> User:
        """Replace the stored credential digest and flush."""
        user.password_hash = digest
        self.flush()
        return user

    def set_verified(self, user: User, verified: bool = True) -> User:
        """Set the email-verified flag and flush."""
        user.email_verified = bool(verified)
        self.flush()
        return user

    def get_token_version(self, user_id: str) -> int | None:
        """Return the stored revocation counter, or ``None`` for unknown users."""
        stmt = select(User.token_version).where(User.id == user_id)
        value = self.session.execute(stmt).scalar_one_or_none()
        return None if value is None else int(value)

    def bump_token_version(self, user_id: str) -> int | None:
        """Atomically increment ``token_version`` and return the new value.

        The increment runs as one ``UPDATE ... SET token_version = token_version + 1``
        so concurrent bumps never lose a write; the value is re-read in the same
        transaction. Returns ``None`` when no row matched.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(token_version=User.token_version + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if not result.rowcount:
            return None

        # Loaded instances must not keep the pre-increment value
        instance = self.session.get(User, user_id)
        if instance is not None:
            self.session.expire(instance, ["token_version", "updated_at"])
        return self.get_token_version(user_id)

    # ---------------------------- Aggregates ----------------------------

    def count_verified(self, verified: bool = True) -> int:
        """Count accounts by verification state."""
        return self.count(User.email_verified.is_(verified))

    def count_created_since(self, since: datetime) -> int:
        """Count accounts created at or after ``since``."""
        return self.count(User.created_at >= since)

    def count_updated_since(self, since: datetime) -> int:
        """Count accounts touched at or after ``since``."""
        return self.count(User.updated_at >= since)

    def created_at_since(self, since: datetime) -> list[datetime]:
        """Return creation timestamps of accounts created at or after ``since``."""
        stmt = select(User.created_at).where(User.created_at >= since).order_by(User.created_at)
        return list(self.session.execute(stmt).scalars().all())

    def recent(self, *, limit: int, offset: int = 0) -> list[User]:
        """Newest accounts first."""
        return self.list(sort=["-created_at"], limit=limit, offset=offset)
