from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import uuid4

from authcore.services._shared.errors import ConflictError, NotFoundError


@dataclass(frozen=True, slots=True)
class AccountRecord:
    """
    Immutable snapshot of an account as seen by the session engine.

    :ivar id: Opaque user identifier (token subject).
    :ivar email: Normalized login email.
    :ivar credential_digest: Output of the password hasher.
    :ivar name: Optional display name.
    :ivar email_verified: Whether the owner proved control of ``email``.
    :ivar token_version: Revocation counter at read time.
    :ivar created_at: Creation instant (UTC).
    :ivar updated_at: Last update instant (UTC).
    """

    id: str
    email: str
    credential_digest: str
    name: str | None
    email_verified: bool
    token_version: int
    created_at: datetime
    updated_at: datetime


class UserStore(Protocol):
    """
    Account persistence keyed by id and by email.

    Implementations own the atomic primitives the session engine relies on:
    email uniqueness on ``create``/``update_profile`` and the single-step
    ``increment_revocation_counter``. Every call reads current state; nothing
    is cached between calls.
    """

    def find_by_email(self, email: str) -> AccountRecord | None:
        """Return the account for ``email`` (case-insensitive) or ``None``."""

    def find_by_id(self, user_id: str) -> AccountRecord | None:
        """Return the account for ``user_id`` or ``None``."""

    def create(
        self,
        email: str,
        credential_digest: str,
        name: str | None = None,
        email_verified: bool = False,
    ) -> AccountRecord:
        """
        Create an account with ``token_version`` 0.

        :raises ConflictError: If ``email`` is already claimed.
        """

    def update_credential(self, user_id: str, credential_digest: str) -> AccountRecord:
        """Replace the credential digest. :raises NotFoundError: unknown id."""

    def set_verified(self, user_id: str, verified: bool = True) -> AccountRecord:
        """Set the email-verified flag. :raises NotFoundError: unknown id."""

    def increment_revocation_counter(self, user_id: str) -> int:
        """
        Atomically add one to ``token_version`` and return the new value.

        :raises NotFoundError: unknown id.
        """

    def update_profile(self, user_id: str, **fields: Any) -> AccountRecord:
        """
        Update ``name`` and/or ``email``.

        A new email clears ``email_verified`` in the same write.

        :raises ConflictError: If a new email is already claimed.
        :raises NotFoundError: unknown id.
        """


def _normalize(email: str) -> str:
    return email.strip().lower()


class InMemoryUserStore(UserStore):
    """
    Dict-backed :class:`UserStore` for unit tests.

    .. note::
       A single lock makes every operation atomic, standing in for the
       database's unique constraint and single-statement increment.
    """

    PROFILE_FIELDS = frozenset({"name", "email"})

    def __init__(self, *, clock=None) -> None:
        self._by_id: dict[str, AccountRecord] = {}
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(UTC))

    # -------------------------- helpers ----------------------------

    def _require(self, user_id: str) -> AccountRecord:
        record = self._by_id.get(user_id)
        if record is None:
            raise NotFoundError("User", user_id)
        return record

    def _email_taken(self, email: str, *, exclude_id: str | None = None) -> bool:
        return any(r.email == email and r.id != exclude_id for r in self._by_id.values())

    def _save(self, record: AccountRecord, **changes: Any) -> AccountRecord:
        updated = replace(record, updated_at=self._clock(), **changes)
        self._by_id[record.id] = updated
        return updated

    # -------------------------- API ----------------------------

    def find_by_email(self, email: str) -> AccountRecord | None:
        wanted = _normalize(email)
        with self._lock:
            return next((r for r in self._by_id.values() if r.email == wanted), None)

    def find_by_id(self, user_id: str) -> AccountRecord | None:
        with self._lock:
            return self._by_id.get(user_id)

    def create(
        self,
        email: str,
        credential_digest: str,
        name: str | None = None,
        email_verified: bool = False,
    ) -> AccountRecord:
        normalized = _normalize(email)
        with self._lock:
            if self._email_taken(normalized):
                raise ConflictError("User", "Email already registered")
            now = self._clock()
            record = AccountRecord(
                id=uuid4().hex,
                email=normalized,
                credential_digest=credential_digest,
                name=(name or "").strip() or None,
                email_verified=email_verified,
                token_version=0,
                created_at=now,
                updated_at=now,
            )
            self._by_id[record.id] = record
            return record

    def update_credential(self, user_id: str, credential_digest: str) -> AccountRecord:
        with self._lock:
            return self._save(self._require(user_id), credential_digest=credential_digest)

    def set_verified(self, user_id: str, verified: bool = True) -> AccountRecord:
        with self._lock:
            return self._save(self._require(user_id), email_verified=bool(verified))

    def increment_revocation_counter(self, user_id: str) -> int:
        with self._lock:
            record = self._require(user_id)
            return self._save(record, token_version=record.token_version + 1).token_version

    def update_profile(self, user_id: str, **fields: Any) -> AccountRecord:
        unknown = set(fields) - self.PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {sorted(unknown)}")
        with self._lock:
            record = self._require(user_id)
            changes: dict[str, Any] = {}
            if "email" in fields and fields["email"] is not None:
                email = _normalize(fields["email"])
                if self._email_taken(email, exclude_id=user_id):
                    raise ConflictError("User", "Email already registered")
                changes["email"] = email
                if email != record.email:
                    changes["email_verified"] = False
            if "name" in fields:
                changes["name"] = (fields["name"] or "").strip() or None
            return self._save(record, **changes)
