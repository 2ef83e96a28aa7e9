"""
Compact JWS codec binding a subject, a purpose and an expiry.

Tokens are HS256 JWTs produced with PyJWT. Each purpose is signed with its own
secret *and* under its own audience (``authcore:<purpose>``), and the
``purpose`` claim is compared explicitly after the signature check, so a
token for one purpose never verifies as another even if secrets are reused.

Expiry is evaluated here against an injectable clock instead of by PyJWT, which
gives an inclusive boundary (``now >= exp`` is expired) and a deterministic
clock for tests. No leeway is applied.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from secrets import token_hex
from typing import Any

import jwt

from authcore.services.tokens.claims import TokenPurpose
from authcore.services.tokens.errors import TokenExpiredError, TokenInvalidError

Clock = Callable[[], datetime]

AUDIENCE_PREFIX = "authcore:"
RESERVED_CLAIMS = frozenset({"sub", "purpose", "iat", "exp", "jti", "aud"})
REQUIRED_CLAIMS = ["sub", "purpose", "iat", "exp", "jti", "aud"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def audience_for(purpose: TokenPurpose | str) -> str:
    """Return the signing namespace for ``purpose``."""
    return f"{AUDIENCE_PREFIX}{TokenPurpose(purpose).value}"


class TokenCodec:
    """
    Sign and verify purpose-bound tokens.

    :param clock: Callable returning the current aware ``datetime``.
    :param algorithm: HMAC algorithm understood by PyJWT.
    """

    def __init__(self, clock: Clock | None = None, algorithm: str = "HS256") -> None:
        self._clock = clock or _utcnow
        self.algorithm = algorithm

    def now(self) -> datetime:
        return self._clock()

    def sign(
        self,
        subject: str,
        purpose: TokenPurpose | str,
        claims: Mapping[str, Any] | None,
        secret: str,
        ttl: timedelta,
    ) -> str:
        """
        Build and sign a token.

        :param subject: User identifier carried as ``sub``.
        :param purpose: Purpose tag; selects the audience namespace.
        :param claims: Extra claims; reserved names are rejected.
        :param secret: Signing key for this purpose.
        :param ttl: Positive lifetime.
        :returns: Compact JWS string.
        :raises ValueError: On empty subject/secret, reserved claim names or
            a lifetime shorter than one second.
        """
        if not subject:
            raise ValueError("Token subject must not be empty.")
        if not secret:
            raise ValueError("Token secret must not be empty.")
        ttl_seconds = int(ttl.total_seconds())
        if ttl_seconds <= 0:
            raise ValueError("Token ttl must be at least one second.")
        extra = dict(claims or {})
        clashing = RESERVED_CLAIMS.intersection(extra)
        if clashing:
            raise ValueError(f"Reserved claims cannot be overridden: {sorted(clashing)}")

        purpose = TokenPurpose(purpose)
        issued_at = int(self.now().timestamp())
        payload: dict[str, Any] = {
            **extra,
            "sub": str(subject),
            "purpose": purpose.value,
            "aud": audience_for(purpose),
            "iat": issued_at,
            "exp": issued_at + ttl_seconds,
            "jti": token_hex(16),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def verify(
        self,
        token: str,
        expected_purpose: TokenPurpose | str,
        secret: str,
    ) -> dict[str, Any]:
        """
        Verify ``token`` for ``expected_purpose`` and return its payload.

        :raises TokenExpiredError: Authentic token at or past its expiry.
        :raises TokenInvalidError: Any other failure.
        """
        if not secret:
            raise ValueError("Token secret must not be empty.")
        if not token or not isinstance(token, str):
            raise TokenInvalidError("Token is missing.")

        expected = TokenPurpose(expected_purpose)
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                audience=audience_for(expected),
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError(str(exc)) from exc

        if payload.get("purpose") != expected.value:
            raise TokenInvalidError("Token purpose mismatch.")

        expires_at = payload.get("exp")
        if isinstance(expires_at, bool) or not isinstance(expires_at, int):
            raise TokenInvalidError("Token expiry is malformed.")
        if self.now().timestamp() >= expires_at:
            raise TokenExpiredError("Token has expired.")
        return payload
