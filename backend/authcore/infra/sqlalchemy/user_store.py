"""
SQLAlchemy-backed :class:`UserStore`.

Each call runs in its own unit of work: lookups in a read-only one, writes in a
read-write one that commits on success. The revocation counter is incremented
with a single ``UPDATE`` so concurrent bumps never lose a write, and email
uniqueness is guaranteed by the ``uq_users_email`` constraint.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError

from authcore.models.base import as_utc
from authcore.models.user import User
from authcore.repositories.user import UserRepository
from authcore.services._shared.base import BaseService
from authcore.services._shared.errors import BadRequestError, ConflictError, NotFoundError
from authcore.services._shared.ports.user_store import AccountRecord, UserStore

EMAIL_TAKEN = "Email already registered"


def violates(exc: IntegrityError, constraint_name: str, *, column: str | None = None) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite only reports
    ``table.column``, so ``column`` is accepted as a fallback marker.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    return bool(column) and column.lower() in message


def to_record(user: User) -> AccountRecord:
    """Snapshot a :class:`User` row into an immutable :class:`AccountRecord`."""
    return AccountRecord(
        id=user.id,
        email=user.email,
        credential_digest=user.password_hash,
        name=user.name,
        email_verified=bool(user.email_verified),
        token_version=int(user.token_version),
        created_at=as_utc(user.created_at),
        updated_at=as_utc(user.updated_at),
    )


class SqlAlchemyUserStore(BaseService, UserStore):
    """Account persistence over the ``users`` table."""

    # -------------------------- helpers ----------------------------

    @staticmethod
    def _require(repo: UserRepository, user_id: str) -> User:
        user = repo.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    # -------------------------- reads ----------------------------

    def find_by_email(self, email: str) -> AccountRecord | None:
        try:
            with self.ro_uow() as uow:
                user = uow.users.get_by_email(email)
                return to_record(user) if user is not None else None
        except ValueError:
            # Not an address at all, so no account can match
            return None

    def find_by_id(self, user_id: str) -> AccountRecord | None:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            return to_record(user) if user is not None else None

    # -------------------------- writes ----------------------------

    def create(
        self,
        email: str,
        credential_digest: str,
        name: str | None = None,
        email_verified: bool = False,
    ) -> AccountRecord:
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            try:
                if repo.exists_by_email(email):
                    raise ConflictError("User", EMAIL_TAKEN)
                user = User(
                    email=email,
                    password_hash=credential_digest,
                    name=name,
                    email_verified=email_verified,
                    token_version=0,
                )
                repo.add(user)
            except ValueError as exc:
                raise BadRequestError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_email", column="users.email"):
                    raise ConflictError("User", EMAIL_TAKEN) from exc
                raise
            return to_record(user)

    def update_credential(self, user_id: str, credential_digest: str) -> AccountRecord:
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.update_password_hash(self._require(repo, user_id), credential_digest)
            return to_record(user)

    def set_verified(self, user_id: str, verified: bool = True) -> AccountRecord:
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.set_verified(self._require(repo, user_id), verified)
            return to_record(user)

    def increment_revocation_counter(self, user_id: str) -> int:
        with self.rw_uow() as uow:
            version = uow.users.bump_token_version(user_id)
            if version is None:
                raise NotFoundError("User", user_id)
            return version

    def update_profile(self, user_id: str, **fields: Any) -> AccountRecord:
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = self._require(repo, user_id)
            try:
                new_email = fields.get("email")
                if new_email is not None and repo.exists_by_email(new_email, exclude_id=user_id):
                    raise ConflictError("User", EMAIL_TAKEN)
                previous_email = user.email
                repo.update(user, **fields)
                if user.email != previous_email:
                    repo.set_verified(user, False)
            except ValueError as exc:
                raise BadRequestError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_email", column="users.email"):
                    raise ConflictError("User", EMAIL_TAKEN) from exc
                raise
            return to_record(user)
