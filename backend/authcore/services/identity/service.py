"""
IdentityService
===============

Profile reads and updates for the authenticated account. Credentials and
tokens are handled by :class:`authcore.services.auth.SessionManager`.
"""

from __future__ import annotations

import logging

from authcore.services._shared.dto import AccountOut
from authcore.services._shared.errors import NotFoundError
from authcore.services._shared.ports.user_store import UserStore
from authcore.services.auth.service import SessionManager
from authcore.services.identity.dto import ProfileUpdateIn

logger = logging.getLogger(__name__)


class IdentityService:
    """Application service for the account profile."""

    def __init__(self, store: UserStore, *, sessions: SessionManager | None = None) -> None:
        self.store = store
        self.sessions = sessions

    def get_profile(self, user_id: str) -> AccountOut:
        """
        Return the public view of ``user_id``.

        :raises NotFoundError: If the account does not exist.
        """
        record = self.store.find_by_id(user_id)
        if record is None:
            raise NotFoundError("User", user_id)
        return AccountOut.from_record(record)

    def update_profile(self, user_id: str, dto: ProfileUpdateIn) -> AccountOut:
        """
        Apply a partial update to name and/or email.

        A new email leaves the account unverified. When the session manager
        requires verification, a verification link goes to the new address.

        :raises ConflictError: New email already claimed by another account.
        :raises NotFoundError: If the account does not exist.
        """
        changes = dto.changes()
        if not changes:
            return self.get_profile(user_id)
        previous = self.store.find_by_id(user_id)
        if previous is None:
            raise NotFoundError("User", user_id)
        record = self.store.update_profile(user_id, **changes)
        logger.info("identity.profile.updated", extra={"user_id": user_id})
        if record.email != previous.email:
            logger.info("identity.email.changed", extra={"user_id": user_id})
            if self.sessions is not None and self.sessions.require_verification:
                self.sessions.send_verification(record)
        return AccountOut.from_record(record)
