# authcore/services/auth/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from functools import cached_property

from authcore.services._shared.dto import AccountOut
from authcore.services._shared.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    VerificationRequiredError,
)
from authcore.services._shared.ports.attempt_observer import (
    AttemptKind,
    AttemptObserver,
    AuthAttempt,
    LoggingAttemptObserver,
)
from authcore.services._shared.ports.delivery_gateway import DeliveryGateway
from authcore.services._shared.ports.password_hasher import PasswordHasher
from authcore.services._shared.ports.user_store import AccountRecord, UserStore
from authcore.services.auth.dto import (
    AccessTokenOut,
    ChangePasswordIn,
    ForgotPasswordIn,
    LoginIn,
    LoginOut,
    RefreshIn,
    RegisterIn,
    RegisterOut,
    RegisterStatus,
    ResendVerificationIn,
    ResetPasswordIn,
    TokenPair,
    VerifyEmailIn,
)
from authcore.services.auth.revocation import RevocationLedger
from authcore.services.tokens import TokenError, TokenIssuer

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_TOKEN = "Invalid or expired token"

# Verified against for unknown emails; every login runs exactly one hash check
_TIMING_PLACEHOLDER = "authcore-unknown-account"


class SessionManager:
    """
    Session lifecycle: register, login, refresh, logout and credential flows.

    The manager is stateless between calls. Cross-request state (credential
    digest, verification flag, revocation counter) lives in the
    :class:`UserStore`, whose atomic primitives serialize concurrent writers.

    Security
    --------
    - Login never reveals whether an email exists (uniform ``UnauthorizedError``).
      Unknown emails are checked against a placeholder digest so both paths
      run one hash verification.
    - A refresh token whose embedded counter differs from the stored one is
      rejected exactly like an invalid or expired token.
    - Refresh mints an access token only; the refresh token is not rotated and
      stays usable until its expiry or the next counter bump.
    - Logout, password change and password reset bump the counter, which
      invalidates every refresh token of the account.
    """

    def __init__(
        self,
        *,
        store: UserStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        delivery: DeliveryGateway,
        require_verification: bool = True,
        observer: AttemptObserver | None = None,
    ) -> None:
        """
        Initialize the manager with its collaborators.

        :param store: Account persistence.
        :param hasher: Credential hashing.
        :param issuer: Token minting and reading.
        :param delivery: Outbound verification/reset links.
        :param require_verification: When ``False`` registration verifies the
            account immediately and logs it in.
        :param observer: Receives one :class:`AuthAttempt` per login, refresh,
            verify-email and reset-password attempt.
        """
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self.delivery = delivery
        self.require_verification = require_verification
        self.observer = observer or LoggingAttemptObserver()
        self.ledger = RevocationLedger(store)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _attempt(self, kind: AttemptKind, key: str | None, succeeded: bool) -> None:
        self.observer.record(AuthAttempt(kind=kind, key=key, succeeded=succeeded))

    def _issue_pair(self, record: AccountRecord) -> TokenPair:
        return TokenPair(
            access=self.issuer.mint_access(record.id),
            refresh=self.issuer.mint_refresh(record.id, record.token_version),
        )

    def _deliver(self, send: Callable[[str, str], None], email: str, token: str) -> None:
        """Hand a link to the gateway; failures are logged, never raised."""
        try:
            send(email, token)
        except Exception:
            logger.exception("auth.delivery.failed", extra={"endpoint": send.__name__})

    @cached_property
    def _placeholder_digest(self) -> str:
        return self.hasher.hash(_TIMING_PLACEHOLDER)

    def send_verification(self, record: AccountRecord) -> None:
        """Mint an email-verification token for ``record`` and hand it to delivery."""
        issued = self.issuer.mint_email_verification(record.id)
        self._deliver(self.delivery.send_verification_link, record.email, issued.token)

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegisterOut:
        """
        Create an account.

        :returns: ``PENDING_VERIFICATION`` after dispatching a verification
            link, or ``LOGGED_IN`` with a token pair when verification is skipped.
        :raises ConflictError: Email already claimed.
        """
        if self.store.find_by_email(dto.email) is not None:
            raise ConflictError("User", "Email already registered")

        record = self.store.create(
            dto.email,
            self.hasher.hash(dto.password),
            name=dto.name,
            email_verified=not self.require_verification,
        )
        account = AccountOut.from_record(record)
        logger.info("auth.register", extra={"user_id": record.id})

        if self.require_verification:
            self.send_verification(record)
            return RegisterOut(status=RegisterStatus.PENDING_VERIFICATION, account=account)

        return RegisterOut(
            status=RegisterStatus.LOGGED_IN,
            account=account,
            tokens=self._issue_pair(record),
        )

    # ------------------------------------------------------------------ #
    # Login / Refresh / Logout
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and mint an access + refresh pair.

        :raises UnauthorizedError: Unknown email or wrong password.
        :raises VerificationRequiredError: Valid credentials, unverified email.
        """
        record = self.store.find_by_email(dto.email)
        digest = record.credential_digest if record is not None else self._placeholder_digest
        password_ok = self.hasher.verify(dto.password, digest)
        if record is None or not password_ok:
            self._attempt("login", dto.email, False)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if self.require_verification and not record.email_verified:
            self._attempt("login", dto.email, False)
            raise VerificationRequiredError()

        tokens = self._issue_pair(record)
        self._attempt("login", dto.email, True)
        return LoginOut(account=AccountOut.from_record(record), tokens=tokens)

    def refresh(self, dto: RefreshIn) -> AccessTokenOut:
        """
        Mint a new access token from a current refresh token.

        :raises UnauthorizedError: Missing, invalid, expired or revoked token,
            or a subject that no longer exists.
        """
        try:
            claims = self.issuer.read_refresh(dto.refresh_token or "")
        except TokenError:
            self._attempt("refresh", None, False)
            raise UnauthorizedError() from None

        try:
            current = self.ledger.current_version(claims.subject)
        except NotFoundError:
            current = None

        if current != claims.version:
            self._attempt("refresh", claims.subject, False)
            logger.warning("auth.refresh.rejected", extra={"user_id": claims.subject})
            raise UnauthorizedError()

        access = self.issuer.mint_access(claims.subject)
        self._attempt("refresh", claims.subject, True)
        return AccessTokenOut(access=access)

    def logout(self, user_id: str) -> int:
        """
        Revoke every refresh token of ``user_id``.

        :returns: The new revocation counter.
        :raises NotFoundError: Authenticated subject without an account.
        """
        return self.ledger.bump(user_id)

    def authenticate_access(self, token: str | None) -> str:
        """
        Return the subject of a valid access token.

        :raises UnauthorizedError: Missing, invalid, expired or wrong-purpose token.
        """
        try:
            return self.issuer.read_access(token or "").subject
        except TokenError:
            raise UnauthorizedError() from None

    # ------------------------------------------------------------------ #
    # Credentials
    # ------------------------------------------------------------------ #

    def change_password(self, dto: ChangePasswordIn) -> int:
        """
        Replace the credential after re-checking the current one.

        :returns: The new revocation counter.
        :raises UnauthorizedError: Current password does not verify.
        :raises NotFoundError: Authenticated subject without an account.
        """
        record = self.store.find_by_id(dto.user_id)
        if record is None:
            raise NotFoundError("User", dto.user_id)
        if not self.hasher.verify(dto.current_password, record.credential_digest):
            raise UnauthorizedError("Current password is incorrect")

        self.store.update_credential(record.id, self.hasher.hash(dto.new_password))
        return self.ledger.bump(record.id)

    def reset_password(self, dto: ResetPasswordIn) -> int:
        """
        Replace the credential using a password-reset token.

        Proof of mailbox control also marks the account verified.

        :returns: The new revocation counter.
        :raises BadRequestError: Invalid, expired or wrong-purpose token.
        """
        try:
            claims = self.issuer.read_password_reset(dto.token)
        except TokenError:
            self._attempt("reset-password", None, False)
            raise BadRequestError(INVALID_TOKEN) from None

        record = self.store.find_by_id(claims.subject)
        if record is None:
            self._attempt("reset-password", claims.subject, False)
            raise BadRequestError(INVALID_TOKEN)

        self.store.update_credential(record.id, self.hasher.hash(dto.new_password))
        version = self.ledger.bump(record.id)
        if not record.email_verified:
            self.store.set_verified(record.id, True)
        self._attempt("reset-password", record.id, True)
        return version

    def verify_email(self, dto: VerifyEmailIn) -> AccountOut:
        """
        Mark the token's account verified.

        :raises BadRequestError: Missing, invalid, expired or wrong-purpose
            token, or an account that is already verified.
        """
        if not dto.token:
            raise BadRequestError("Token is required")
        try:
            claims = self.issuer.read_email_verification(dto.token)
        except TokenError:
            self._attempt("verify-email", None, False)
            raise BadRequestError(INVALID_TOKEN) from None

        record = self.store.find_by_id(claims.subject)
        if record is None:
            self._attempt("verify-email", claims.subject, False)
            raise BadRequestError(INVALID_TOKEN)
        if record.email_verified:
            self._attempt("verify-email", record.id, False)
            raise BadRequestError("Email already verified")

        updated = self.store.set_verified(record.id, True)
        self._attempt("verify-email", record.id, True)
        return AccountOut.from_record(updated)

    # ------------------------------------------------------------------ #
    # Enumeration-safe mail flows
    # ------------------------------------------------------------------ #

    def forgot_password(self, dto: ForgotPasswordIn) -> None:
        """Dispatch a reset link when the account exists; same outcome either way."""
        record = self.store.find_by_email(dto.email)
        if record is None:
            return
        issued = self.issuer.mint_password_reset(record.id)
        self._deliver(self.delivery.send_reset_link, record.email, issued.token)

    def resend_verification(self, dto: ResendVerificationIn) -> None:
        """Dispatch a fresh verification link for an existing, unverified account."""
        record = self.store.find_by_email(dto.email)
        if record is None or record.email_verified:
            return
        self.send_verification(record)
