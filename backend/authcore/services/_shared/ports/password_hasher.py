from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Opaque credential hashing: ``hash(secret) -> digest`` and ``verify``."""

    def hash(self, plaintext: str) -> str:
        """Return a salted digest for ``plaintext``."""

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``digest``."""
