# tests/unit/tokens/test_token_issuer.py
from __future__ import annotations

from datetime import timedelta

import pytest

from authcore.services.tokens import (
    AccessClaims,
    PurposeSecrets,
    RefreshClaims,
    TokenCodec,
    TokenExpiredError,
    TokenInvalidError,
    TokenIssuer,
    TokenPurpose,
    TokenTTLConfig,
)


def test_default_lifetimes(issuer, clock):
    """Access lives 15 minutes, refresh 7 days, email tokens 24 hours and 1 hour."""
    now = clock()

    assert issuer.mint_access("u").expires_at == now + timedelta(minutes=15)
    assert issuer.mint_refresh("u", 0).expires_at == now + timedelta(days=7)
    assert issuer.mint_email_verification("u").expires_at == now + timedelta(hours=24)
    assert issuer.mint_password_reset("u").expires_at == now + timedelta(hours=1)


def test_issued_token_carries_purpose_and_ttl(issuer):
    issued = issuer.mint_refresh("u", 2)
    assert issued.purpose is TokenPurpose.REFRESH
    assert issued.ttl == timedelta(days=7)


def test_refresh_round_trip_keeps_version(issuer):
    claims = issuer.read_refresh(issuer.mint_refresh("user-9", 4).token)

    assert isinstance(claims, RefreshClaims)
    assert claims.subject == "user-9"
    assert claims.version == 4
    assert claims.purpose is TokenPurpose.REFRESH


@pytest.mark.parametrize("version", [-1, 1.5, "1", True])
def test_refresh_rejects_bad_versions(issuer, version):
    with pytest.raises(ValueError):
        issuer.mint_refresh("u", version)


def test_readers_reject_other_purposes(issuer):
    """
    GIVEN one token of every purpose
    WHEN each is read with every other purpose's reader
    THEN only the matching reader accepts it
    """
    tokens = {
        TokenPurpose.ACCESS: issuer.mint_access("u").token,
        TokenPurpose.REFRESH: issuer.mint_refresh("u", 0).token,
        TokenPurpose.EMAIL_VERIFICATION: issuer.mint_email_verification("u").token,
        TokenPurpose.PASSWORD_RESET: issuer.mint_password_reset("u").token,
    }
    readers = {
        TokenPurpose.ACCESS: issuer.read_access,
        TokenPurpose.REFRESH: issuer.read_refresh,
        TokenPurpose.EMAIL_VERIFICATION: issuer.read_email_verification,
        TokenPurpose.PASSWORD_RESET: issuer.read_password_reset,
    }

    for token_purpose, token in tokens.items():
        for reader_purpose, reader in readers.items():
            if token_purpose is reader_purpose:
                assert reader(token).subject == "u"
            else:
                with pytest.raises(TokenInvalidError):
                    reader(token)


def test_access_expires_after_ttl(issuer, clock):
    token = issuer.mint_access("u").token
    assert isinstance(issuer.read_access(token), AccessClaims)

    clock.advance(timedelta(minutes=15))

    with pytest.raises(TokenExpiredError):
        issuer.read_access(token)


def test_custom_ttls_and_secrets_are_honoured(clock):
    secrets = PurposeSecrets(access="a", refresh="r", email_verification="e", password_reset="p")
    issuer = TokenIssuer(
        TokenCodec(clock=clock),
        secrets,
        TokenTTLConfig(access=timedelta(minutes=1)),
    )
    token = issuer.mint_access("u").token

    other = TokenIssuer(
        TokenCodec(clock=clock),
        PurposeSecrets(access="z", refresh="r", email_verification="e", password_reset="p"),
    )
    with pytest.raises(TokenInvalidError):
        other.read_access(token)

    clock.advance(timedelta(minutes=1))
    with pytest.raises(TokenExpiredError):
        issuer.read_access(token)


def test_config_mappings():
    config = {
        "JWT_ACCESS_SECRET": "a",
        "JWT_REFRESH_SECRET": "r",
        "JWT_EMAIL_SECRET": "e",
        "JWT_PASSWORD_RESET_SECRET": "p",
        "ACCESS_TOKEN_TTL_MINUTES": 5,
        "REFRESH_TOKEN_TTL_DAYS": 2,
    }

    secrets = PurposeSecrets.from_config(config)
    ttls = TokenTTLConfig.from_config(config)

    assert secrets.for_purpose("email-verification") == "e"
    assert secrets.for_purpose(TokenPurpose.PASSWORD_RESET) == "p"
    assert ttls.access == timedelta(minutes=5)
    assert ttls.refresh == timedelta(days=2)
    assert ttls.email_verification == timedelta(hours=24)
    assert ttls.password_reset == timedelta(hours=1)
