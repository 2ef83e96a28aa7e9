# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from authcore.services._shared.ports.user_store import AccountRecord


@dataclass(frozen=True, slots=True)
class AccountOut:
    """
    Public account representation (never carries the credential digest).

    :param id: Opaque user identifier.
    :type id: str
    :param email: Normalized email.
    :type email: str
    :param name: Optional display name.
    :type name: str | None
    :param email_verified: Verification flag.
    :type email_verified: bool
    :param created_at: Creation instant.
    :type created_at: datetime
    :param updated_at: Last update instant.
    :type updated_at: datetime
    """

    id: str
    email: str
    name: str | None
    email_verified: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: AccountRecord) -> AccountOut:
        return cls(
            id=record.id,
            email=record.email,
            name=record.name,
            email_verified=record.email_verified,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Offset pagination metadata.

    :param limit: Page size.
    :type limit: int
    :param offset: Rows skipped.
    :type offset: int
    :param total: Total rows available.
    :type total: int
    """

    limit: int
    offset: int
    total: int

    @property
    def has_next(self) -> bool:
        return self.offset + self.limit < self.total
