# authcore/services/identity/dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """
    Partial profile update.

    ``None`` leaves a field untouched; an empty ``name`` clears it.

    :param name: New display name.
    :type name: str | None
    :param email: New login email.
    :type email: str | None
    """

    name: str | None = None
    email: str | None = None

    def changes(self) -> dict[str, str]:
        return {k: v for k, v in (("name", self.name), ("email", self.email)) if v is not None}
