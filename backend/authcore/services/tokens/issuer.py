"""
Token Issuer: one minting operation per purpose.

The issuer owns the purpose -> secret and purpose -> lifetime bindings; it has
no side effects beyond signing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from authcore.services.tokens.claims import (
    AccessClaims,
    EmailVerificationClaims,
    PasswordResetClaims,
    RefreshClaims,
    TokenPurpose,
)
from authcore.services.tokens.codec import TokenCodec


@dataclass(frozen=True, slots=True)
class PurposeSecrets:
    """
    Signing secrets, one per purpose.

    :param access: Access-token key.
    :param refresh: Refresh-token key.
    :param email_verification: Email-verification key.
    :param password_reset: Password-reset key.
    """

    access: str
    refresh: str
    email_verification: str
    password_reset: str

    def for_purpose(self, purpose: TokenPurpose | str) -> str:
        return {
            TokenPurpose.ACCESS: self.access,
            TokenPurpose.REFRESH: self.refresh,
            TokenPurpose.EMAIL_VERIFICATION: self.email_verification,
            TokenPurpose.PASSWORD_RESET: self.password_reset,
        }[TokenPurpose(purpose)]

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> PurposeSecrets:
        return cls(
            access=str(config["JWT_ACCESS_SECRET"]),
            refresh=str(config["JWT_REFRESH_SECRET"]),
            email_verification=str(config["JWT_EMAIL_SECRET"]),
            password_reset=str(config["JWT_PASSWORD_RESET_SECRET"]),
        )


@dataclass(frozen=True, slots=True)
class TokenTTLConfig:
    """
    Lifetimes per purpose.

    Access tokens live minutes, refresh tokens days, email tokens hours.
    """

    access: timedelta = timedelta(minutes=15)
    refresh: timedelta = timedelta(days=7)
    email_verification: timedelta = timedelta(hours=24)
    password_reset: timedelta = timedelta(hours=1)

    def for_purpose(self, purpose: TokenPurpose | str) -> timedelta:
        return {
            TokenPurpose.ACCESS: self.access,
            TokenPurpose.REFRESH: self.refresh,
            TokenPurpose.EMAIL_VERIFICATION: self.email_verification,
            TokenPurpose.PASSWORD_RESET: self.password_reset,
        }[TokenPurpose(purpose)]

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> TokenTTLConfig:
        return cls(
            access=timedelta(minutes=int(config.get("ACCESS_TOKEN_TTL_MINUTES", 15))),
            refresh=timedelta(days=int(config.get("REFRESH_TOKEN_TTL_DAYS", 7))),
            email_verification=timedelta(
                hours=int(config.get("EMAIL_VERIFICATION_TTL_HOURS", 24))
            ),
            password_reset=timedelta(hours=int(config.get("PASSWORD_RESET_TTL_HOURS", 1))),
        )


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    A freshly minted token and its lifetime.

    :param token: Compact JWS string.
    :param purpose: Purpose it was minted for.
    :param expires_at: Expiry instant (UTC).
    :param ttl: Lifetime used; transports mirror it (e.g. cookie ``Max-Age``).
    """

    token: str
    purpose: TokenPurpose
    expires_at: datetime
    ttl: timedelta


class TokenIssuer:
    """Mint and read the four token kinds."""

    def __init__(
        self,
        codec: TokenCodec,
        secrets: PurposeSecrets,
        ttls: TokenTTLConfig | None = None,
    ) -> None:
        self.codec = codec
        self.secrets = secrets
        self.ttls = ttls or TokenTTLConfig()

    # ------------------------------ minting ------------------------------

    def _mint(
        self,
        subject: str,
        purpose: TokenPurpose,
        claims: Mapping[str, Any] | None = None,
    ) -> IssuedToken:
        ttl = self.ttls.for_purpose(purpose)
        token = self.codec.sign(subject, purpose, claims, self.secrets.for_purpose(purpose), ttl)
        # Read the expiry back from the signed payload so both always agree
        payload = self.codec.verify(token, purpose, self.secrets.for_purpose(purpose))
        expires_at = datetime.fromtimestamp(payload["exp"], UTC)
        return IssuedToken(token=token, purpose=purpose, expires_at=expires_at, ttl=ttl)

    def mint_access(self, subject: str) -> IssuedToken:
        return self._mint(subject, TokenPurpose.ACCESS)

    def mint_refresh(self, subject: str, version: int) -> IssuedToken:
        """Mint a refresh token embedding the revocation counter ``version``."""
        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            raise ValueError("Refresh token version must be a non-negative integer.")
        return self._mint(subject, TokenPurpose.REFRESH, {"version": version})

    def mint_email_verification(self, subject: str) -> IssuedToken:
        return self._mint(subject, TokenPurpose.EMAIL_VERIFICATION)

    def mint_password_reset(self, subject: str) -> IssuedToken:
        return self._mint(subject, TokenPurpose.PASSWORD_RESET)

    # ------------------------------ reading ------------------------------

    def _payload(self, token: str, purpose: TokenPurpose) -> dict[str, Any]:
        return self.codec.verify(token, purpose, self.secrets.for_purpose(purpose))

    def read_access(self, token: str) -> AccessClaims:
        return AccessClaims.from_payload(self._payload(token, TokenPurpose.ACCESS))

    def read_refresh(self, token: str) -> RefreshClaims:
        return RefreshClaims.from_payload(self._payload(token, TokenPurpose.REFRESH))

    def read_email_verification(self, token: str) -> EmailVerificationClaims:
        return EmailVerificationClaims.from_payload(
            self._payload(token, TokenPurpose.EMAIL_VERIFICATION)
        )

    def read_password_reset(self, token: str) -> PasswordResetClaims:
        return PasswordResetClaims.from_payload(
            self._payload(token, TokenPurpose.PASSWORD_RESET)
        )
