"""Per-account revocation counter backed by the user store."""

from __future__ import annotations

import logging

from authcore.services._shared.errors import NotFoundError
from authcore.services._shared.ports.user_store import UserStore

logger = logging.getLogger(__name__)


class RevocationLedger:
    """
    Monotonic ``token_version`` per account.

    Refresh tokens embed the value seen at issuance; :meth:`bump` invalidates
    every outstanding refresh token of the account at once. Reads always go to
    the store so a bump is visible to the very next verification.
    """

    def __init__(self, store: UserStore) -> None:
        self.store = store

    def current_version(self, user_id: str) -> int:
        """
        Return the stored counter.

        :raises NotFoundError: Unknown account.
        """
        record = self.store.find_by_id(user_id)
        if record is None:
            raise NotFoundError("User", user_id)
        return record.token_version

    def bump(self, user_id: str) -> int:
        """Atomically increment the counter and return the new value."""
        version = self.store.increment_revocation_counter(user_id)
        logger.info("auth.revocation.bump", extra={"user_id": user_id, "version": version})
        return version

    def is_current(self, user_id: str, version: int) -> bool:
        return self.current_version(user_id) == version
