"""Credential hashing backed by :mod:`werkzeug.security`."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from authcore.services._shared.ports.password_hasher import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """
    Salted, adaptive hashing.

    :param method: ``generate_password_hash`` method string. ``"scrypt"`` in
        production; tests pass a cheap ``"pbkdf2:sha256:<iterations>"``.
    """

    def __init__(self, method: str = "scrypt") -> None:
        self.method = method

    def hash(self, plaintext: str) -> str:
        return generate_password_hash(plaintext, method=self.method)

    def verify(self, plaintext: str, digest: str) -> bool:
        if not digest:
            return False
        try:
            return check_password_hash(digest, plaintext)
        except ValueError:
            # Unknown or malformed method prefix in the stored digest
            return False
