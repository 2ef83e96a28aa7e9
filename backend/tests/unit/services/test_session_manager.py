# tests/unit/services/test_session_manager.py
from __future__ import annotations

import logging
import threading
from datetime import timedelta

import pytest

from authcore.services._shared.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    VerificationRequiredError,
)
from authcore.services._shared.ports import InMemoryDeliveryGateway
from authcore.services.auth import SessionManager
from authcore.services.auth.dto import (
    ChangePasswordIn,
    ForgotPasswordIn,
    LoginIn,
    RefreshIn,
    RegisterIn,
    RegisterStatus,
    ResendVerificationIn,
    ResetPasswordIn,
    VerifyEmailIn,
)

PASSWORD = "Secr3tPass"
NEW_PASSWORD = "N3wSecret!"


# ------------------------------ Helpers ----------------------------------- #
def _verified_account(manager, store, email="ada@example.com", password=PASSWORD):
    record = store.create(email, manager.hasher.hash(password), name="Ada", email_verified=True)
    return record


def _login(manager, email="ada@example.com", password=PASSWORD):
    return manager.login(LoginIn(email=email, password=password))


# ------------------------------ Register ---------------------------------- #
def test_register_login_verify_login_scenario(manager, delivery, observer):
    """
    GIVEN a fresh registration requiring verification
    WHEN the user logs in before and after verifying
    THEN the first login is refused with VerificationRequired and the second succeeds
    """
    result = manager.register(RegisterIn(email="Ada@Example.com ", password=PASSWORD))

    assert result.status is RegisterStatus.PENDING_VERIFICATION
    assert result.tokens is None
    assert result.account.email == "ada@example.com"
    assert result.account.email_verified is False

    with pytest.raises(VerificationRequiredError):
        _login(manager)

    message = delivery.last("verification")
    assert message is not None
    assert message.email == "ada@example.com"

    account = manager.verify_email(VerifyEmailIn(token=message.token))
    assert account.email_verified is True

    out = _login(manager)
    assert out.account.id == result.account.id
    assert manager.authenticate_access(out.tokens.access.token) == result.account.id
    assert [a.succeeded for a in observer.attempts if a.kind == "login"] == [False, True]


def test_register_duplicate_email_conflicts(manager):
    manager.register(RegisterIn(email="dup@example.com", password=PASSWORD))

    with pytest.raises(ConflictError):
        manager.register(RegisterIn(email="DUP@example.com", password=PASSWORD))


def test_register_without_verification_logs_in(store, hasher, issuer, delivery):
    manager = SessionManager(
        store=store,
        hasher=hasher,
        issuer=issuer,
        delivery=delivery,
        require_verification=False,
    )

    result = manager.register(RegisterIn(email="fast@example.com", password=PASSWORD, name="Fast"))

    assert result.status is RegisterStatus.LOGGED_IN
    assert result.account.email_verified is True
    assert result.tokens is not None
    assert issuer.read_refresh(result.tokens.refresh.token).version == 0
    assert delivery.outbox == []


def test_register_stores_a_digest_not_the_password(manager, store):
    result = manager.register(RegisterIn(email="hash@example.com", password=PASSWORD))
    record = store.find_by_id(result.account.id)
    assert record.credential_digest != PASSWORD
    assert manager.hasher.verify(PASSWORD, record.credential_digest)


def test_register_survives_delivery_failure(store, hasher, issuer, caplog):
    """A failing gateway is logged; the account is still created."""
    manager = SessionManager(
        store=store,
        hasher=hasher,
        issuer=issuer,
        delivery=InMemoryDeliveryGateway(fail=True),
    )

    with caplog.at_level(logging.ERROR):
        result = manager.register(RegisterIn(email="down@example.com", password=PASSWORD))

    assert result.status is RegisterStatus.PENDING_VERIFICATION
    assert store.find_by_email("down@example.com") is not None
    assert any(r.getMessage() == "auth.delivery.failed" for r in caplog.records)


# -------------------------------- Login ----------------------------------- #
def test_login_errors_do_not_reveal_which_part_failed(manager, store):
    _verified_account(manager, store)

    with pytest.raises(UnauthorizedError) as unknown:
        _login(manager, email="nobody@example.com")
    with pytest.raises(UnauthorizedError) as wrong:
        _login(manager, password="Wrong1234")

    assert str(unknown.value) == str(wrong.value)


def test_unknown_email_runs_the_same_hash_check(manager, store, monkeypatch):
    """Unknown emails are verified against a placeholder digest, not skipped."""
    record = _verified_account(manager, store)
    checked: list[str] = []
    real_verify = manager.hasher.verify

    def counting_verify(plaintext, digest):
        checked.append(digest)
        return real_verify(plaintext, digest)

    monkeypatch.setattr(manager.hasher, "verify", counting_verify)

    for _ in range(2):
        with pytest.raises(UnauthorizedError):
            _login(manager, email="nobody@example.com")
    with pytest.raises(UnauthorizedError):
        _login(manager, password="Wrong1234")

    assert len(checked) == 3
    assert checked[0] == checked[1] != record.credential_digest
    assert checked[2] == record.credential_digest


def test_login_issues_pair_embedding_current_version(manager, store, issuer):
    record = _verified_account(manager, store)
    store.increment_revocation_counter(record.id)

    out = _login(manager)

    assert issuer.read_refresh(out.tokens.refresh.token).version == 1
    assert issuer.read_access(out.tokens.access.token).subject == record.id


# ------------------------------- Refresh ---------------------------------- #
def test_refresh_mints_access_and_keeps_refresh_usable(manager, store, issuer):
    _verified_account(manager, store)
    pair = _login(manager).tokens

    first = manager.refresh(RefreshIn(refresh_token=pair.refresh.token))
    second = manager.refresh(RefreshIn(refresh_token=pair.refresh.token))

    assert issuer.read_access(first.access.token).subject == issuer.read_access(
        second.access.token
    ).subject


@pytest.mark.parametrize("token", [None, "", "garbage"])
def test_refresh_rejects_missing_or_malformed(manager, token):
    with pytest.raises(UnauthorizedError):
        manager.refresh(RefreshIn(refresh_token=token))


def test_refresh_rejects_an_access_token(manager, store):
    _verified_account(manager, store)
    pair = _login(manager).tokens

    with pytest.raises(UnauthorizedError):
        manager.refresh(RefreshIn(refresh_token=pair.access.token))


def test_refresh_rejects_expired_token(manager, store, clock):
    _verified_account(manager, store)
    pair = _login(manager).tokens

    clock.advance(timedelta(days=7))

    with pytest.raises(UnauthorizedError):
        manager.refresh(RefreshIn(refresh_token=pair.refresh.token))


def test_refresh_for_unknown_subject_is_unauthorized(manager, issuer):
    orphan = issuer.mint_refresh("ghost", 0).token
    with pytest.raises(UnauthorizedError):
        manager.refresh(RefreshIn(refresh_token=orphan))


def test_concurrent_refresh_with_same_token_both_succeed(manager, store):
    """
    GIVEN one refresh token
    WHEN two threads refresh with it at the same time
    THEN both receive an access token (refresh tokens are not rotated)
    """
    _verified_account(manager, store)
    token = _login(manager).tokens.refresh.token
    results: list[str] = []
    errors: list[Exception] = []
    barrier = threading.Barrier(2)

    def worker():
        barrier.wait()
        try:
            results.append(manager.refresh(RefreshIn(refresh_token=token)).access.token)
        except Exception as exc:  # pragma: no cover - failure path
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(results) == 2


# ------------------------------- Logout ----------------------------------- #
def test_logout_revokes_every_refresh_token(manager, store):
    """
    GIVEN two sessions of the same account
    WHEN the user logs out once
    THEN both refresh tokens are rejected and access tokens stay valid until expiry
    """
    record = _verified_account(manager, store)
    phone = _login(manager).tokens
    laptop = _login(manager).tokens

    assert manager.logout(record.id) == 1

    for pair in (phone, laptop):
        with pytest.raises(UnauthorizedError):
            manager.refresh(RefreshIn(refresh_token=pair.refresh.token))
    assert manager.authenticate_access(phone.access.token) == record.id

    fresh = _login(manager).tokens
    assert manager.refresh(RefreshIn(refresh_token=fresh.refresh.token)).access.token


def test_logout_unknown_account(manager):
    with pytest.raises(NotFoundError):
        manager.logout("missing")


def test_concurrent_logouts_never_lose_a_bump(manager, store):
    record = _verified_account(manager, store)
    threads = [threading.Thread(target=manager.logout, args=(record.id,)) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.find_by_id(record.id).token_version == 8


# --------------------------- authenticate_access -------------------------- #
def test_authenticate_access_rejects_refresh_and_expired(manager, store, clock):
    _verified_account(manager, store)
    pair = _login(manager).tokens

    with pytest.raises(UnauthorizedError):
        manager.authenticate_access(pair.refresh.token)
    with pytest.raises(UnauthorizedError):
        manager.authenticate_access(None)

    clock.advance(timedelta(minutes=15))
    with pytest.raises(UnauthorizedError):
        manager.authenticate_access(pair.access.token)


# ---------------------------- Change password ----------------------------- #
def test_change_password_replaces_credential_and_signs_out(manager, store):
    record = _verified_account(manager, store)
    pair = _login(manager).tokens

    version = manager.change_password(
        ChangePasswordIn(user_id=record.id, current_password=PASSWORD, new_password=NEW_PASSWORD)
    )

    assert version == 1
    with pytest.raises(UnauthorizedError):
        manager.refresh(RefreshIn(refresh_token=pair.refresh.token))
    with pytest.raises(UnauthorizedError):
        _login(manager)
    assert _login(manager, password=NEW_PASSWORD).tokens


def test_change_password_wrong_current(manager, store):
    record = _verified_account(manager, store)

    with pytest.raises(UnauthorizedError, match="Current password is incorrect"):
        manager.change_password(
            ChangePasswordIn(user_id=record.id, current_password="nope", new_password=NEW_PASSWORD)
        )
    assert store.find_by_id(record.id).token_version == 0


# --------------------------- Forgot / Reset ------------------------------- #
def test_forgot_then_reset_password(manager, store, delivery):
    record = _verified_account(manager, store)
    old_pair = _login(manager).tokens

    manager.forgot_password(ForgotPasswordIn(email="ada@example.com"))
    message = delivery.last("reset")
    assert message is not None and message.email == "ada@example.com"

    version = manager.reset_password(ResetPasswordIn(token=message.token, new_password=NEW_PASSWORD))

    assert version == 1
    with pytest.raises(UnauthorizedError):
        manager.refresh(RefreshIn(refresh_token=old_pair.refresh.token))
    assert _login(manager, password=NEW_PASSWORD).account.id == record.id


def test_reset_marks_unverified_account_verified(manager, store, delivery):
    manager.register(RegisterIn(email="late@example.com", password=PASSWORD))
    manager.forgot_password(ForgotPasswordIn(email="late@example.com"))

    manager.reset_password(
        ResetPasswordIn(token=delivery.last("reset").token, new_password=NEW_PASSWORD)
    )

    assert store.find_by_email("late@example.com").email_verified is True


def test_forgot_and_resend_are_uniform_for_unknown_emails(manager, delivery):
    assert manager.forgot_password(ForgotPasswordIn(email="ghost@example.com")) is None
    assert manager.resend_verification(ResendVerificationIn(email="ghost@example.com")) is None
    assert delivery.outbox == []


def test_resend_verification_only_for_unverified(manager, store, delivery):
    _verified_account(manager, store)
    manager.resend_verification(ResendVerificationIn(email="ada@example.com"))
    assert delivery.outbox == []

    manager.register(RegisterIn(email="new@example.com", password=PASSWORD))
    manager.resend_verification(ResendVerificationIn(email="new@example.com"))
    assert [m.kind for m in delivery.outbox] == ["verification", "verification"]


@pytest.mark.parametrize("token", ["garbage", ""])
def test_reset_rejects_bad_tokens(manager, token):
    with pytest.raises(BadRequestError):
        manager.reset_password(ResetPasswordIn(token=token, new_password=NEW_PASSWORD))


def test_reset_rejects_verification_token(manager, delivery):
    manager.register(RegisterIn(email="mix@example.com", password=PASSWORD))
    with pytest.raises(BadRequestError):
        manager.reset_password(
            ResetPasswordIn(token=delivery.last("verification").token, new_password=NEW_PASSWORD)
        )


def test_reset_token_expires_after_an_hour(manager, store, delivery, clock):
    _verified_account(manager, store)
    manager.forgot_password(ForgotPasswordIn(email="ada@example.com"))
    clock.advance(timedelta(hours=1))

    with pytest.raises(BadRequestError):
        manager.reset_password(
            ResetPasswordIn(token=delivery.last("reset").token, new_password=NEW_PASSWORD)
        )


# ------------------------------ Verify email ------------------------------ #
def test_verify_email_twice_is_rejected(manager, delivery):
    manager.register(RegisterIn(email="twice@example.com", password=PASSWORD))
    token = delivery.last("verification").token

    manager.verify_email(VerifyEmailIn(token=token))

    with pytest.raises(BadRequestError, match="already verified"):
        manager.verify_email(VerifyEmailIn(token=token))


def test_verify_email_requires_a_token(manager):
    with pytest.raises(BadRequestError, match="Token is required"):
        manager.verify_email(VerifyEmailIn(token=None))


def test_verify_email_rejects_reset_token(manager, store, delivery):
    _verified_account(manager, store)
    manager.forgot_password(ForgotPasswordIn(email="ada@example.com"))

    with pytest.raises(BadRequestError):
        manager.verify_email(VerifyEmailIn(token=delivery.last("reset").token))


def test_verify_email_expired(manager, delivery, clock, observer):
    manager.register(RegisterIn(email="slow@example.com", password=PASSWORD))
    clock.advance(timedelta(hours=24))

    with pytest.raises(BadRequestError):
        manager.verify_email(VerifyEmailIn(token=delivery.last("verification").token))
    assert observer.attempts[-1].kind == "verify-email"
    assert observer.attempts[-1].succeeded is False
