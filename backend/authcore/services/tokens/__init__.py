"""Signed, purpose-bound tokens: codec, typed claims and the issuer."""

from __future__ import annotations

from .claims import (
    AccessClaims,
    EmailVerificationClaims,
    PasswordResetClaims,
    RefreshClaims,
    TokenClaims,
    TokenPurpose,
    parse_claims,
)
from .codec import TokenCodec, audience_for
from .errors import TokenError, TokenExpiredError, TokenInvalidError
from .issuer import IssuedToken, PurposeSecrets, TokenIssuer, TokenTTLConfig

__all__ = [
    "AccessClaims",
    "EmailVerificationClaims",
    "IssuedToken",
    "PasswordResetClaims",
    "PurposeSecrets",
    "RefreshClaims",
    "TokenClaims",
    "TokenCodec",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenIssuer",
    "TokenPurpose",
    "TokenTTLConfig",
    "audience_for",
    "parse_claims",
]
