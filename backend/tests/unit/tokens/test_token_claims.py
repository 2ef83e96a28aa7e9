# tests/unit/tokens/test_token_claims.py
from __future__ import annotations

from datetime import UTC, datetime

import pytest

from authcore.services.tokens import (
    AccessClaims,
    EmailVerificationClaims,
    PasswordResetClaims,
    RefreshClaims,
    TokenInvalidError,
    TokenPurpose,
    parse_claims,
)

BASE = {"sub": "user-1", "iat": 1_700_000_000, "exp": 1_700_000_900}


@pytest.mark.parametrize(
    ("purpose", "expected"),
    [
        ("access", AccessClaims),
        ("email-verification", EmailVerificationClaims),
        ("password-reset", PasswordResetClaims),
    ],
)
def test_parse_claims_selects_variant(purpose, expected):
    claims = parse_claims(purpose, BASE)

    assert isinstance(claims, expected)
    assert claims.purpose == TokenPurpose(purpose)
    assert claims.issued_at == datetime.fromtimestamp(1_700_000_000, UTC)
    assert claims.expires_at.tzinfo is UTC


def test_refresh_variant_requires_version():
    assert parse_claims("refresh", {**BASE, "version": 2}).version == 2

    for bad in (None, -1, "2", True):
        payload = {**BASE} if bad is None else {**BASE, "version": bad}
        with pytest.raises(TokenInvalidError):
            RefreshClaims.from_payload(payload)


@pytest.mark.parametrize(
    "payload",
    [
        {**BASE, "sub": ""},
        {**BASE, "sub": 42},
        {**BASE, "iat": "yesterday"},
        {"sub": "u", "iat": 1},
    ],
)
def test_malformed_payloads_are_invalid(payload):
    with pytest.raises(TokenInvalidError):
        AccessClaims.from_payload(payload)


def test_claims_are_immutable():
    claims = AccessClaims.from_payload(BASE)
    with pytest.raises(AttributeError):
        claims.subject = "other"  # type: ignore[misc]


def test_unknown_purpose():
    with pytest.raises(ValueError):
        parse_claims("session", BASE)
