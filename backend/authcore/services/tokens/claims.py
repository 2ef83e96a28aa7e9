"""Typed claim variants, one per token purpose."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, ClassVar

from authcore.services.tokens.errors import TokenInvalidError


class TokenPurpose(StrEnum):
    ACCESS = "access"
    REFRESH = "refresh"
    EMAIL_VERIFICATION = "email-verification"
    PASSWORD_RESET = "password-reset"


def _instant(payload: Mapping[str, Any], key: str) -> datetime:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TokenInvalidError(f"Claim '{key}' is malformed.")
    return datetime.fromtimestamp(value, UTC)


def _subject(payload: Mapping[str, Any]) -> str:
    value = payload.get("sub")
    if not isinstance(value, str) or not value:
        raise TokenInvalidError("Claim 'sub' is malformed.")
    return value


@dataclass(frozen=True, slots=True)
class _BaseClaims:
    subject: str
    issued_at: datetime
    expires_at: datetime

    PURPOSE: ClassVar[TokenPurpose]

    @property
    def purpose(self) -> TokenPurpose:
        return self.PURPOSE

    @classmethod
    def _common(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "subject": _subject(payload),
            "issued_at": _instant(payload, "iat"),
            "expires_at": _instant(payload, "exp"),
        }


@dataclass(frozen=True, slots=True)
class AccessClaims(_BaseClaims):
    """Authorizes individual API calls for ``subject``."""

    PURPOSE: ClassVar[TokenPurpose] = TokenPurpose.ACCESS

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> AccessClaims:
        return cls(**cls._common(payload))


@dataclass(frozen=True, slots=True)
class RefreshClaims(_BaseClaims):
    """
    Mints access tokens for ``subject``.

    :ivar version: Revocation counter observed when the token was issued.
    """

    version: int = 0

    PURPOSE: ClassVar[TokenPurpose] = TokenPurpose.REFRESH

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> RefreshClaims:
        version = payload.get("version")
        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            raise TokenInvalidError("Claim 'version' is malformed.")
        return cls(**cls._common(payload), version=version)


@dataclass(frozen=True, slots=True)
class EmailVerificationClaims(_BaseClaims):
    """Proves control of the account's email address."""

    PURPOSE: ClassVar[TokenPurpose] = TokenPurpose.EMAIL_VERIFICATION

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> EmailVerificationClaims:
        return cls(**cls._common(payload))


@dataclass(frozen=True, slots=True)
class PasswordResetClaims(_BaseClaims):
    """Authorizes one credential replacement."""

    PURPOSE: ClassVar[TokenPurpose] = TokenPurpose.PASSWORD_RESET

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> PasswordResetClaims:
        return cls(**cls._common(payload))


TokenClaims = AccessClaims | RefreshClaims | EmailVerificationClaims | PasswordResetClaims

_VARIANTS: dict[TokenPurpose, Any] = {
    TokenPurpose.ACCESS: AccessClaims,
    TokenPurpose.REFRESH: RefreshClaims,
    TokenPurpose.EMAIL_VERIFICATION: EmailVerificationClaims,
    TokenPurpose.PASSWORD_RESET: PasswordResetClaims,
}


def parse_claims(purpose: TokenPurpose | str, payload: Mapping[str, Any]) -> TokenClaims:
    """Build the claim variant for ``purpose`` from a verified payload."""
    return _VARIANTS[TokenPurpose(purpose)].from_payload(payload)
