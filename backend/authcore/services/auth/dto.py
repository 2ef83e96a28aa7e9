# authcore/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from authcore.services._shared.dto import AccountOut
from authcore.services.tokens import IssuedToken

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: User email (normalized by the store).
    :type email: str
    :param password: Raw password (hashed before storage).
    :type password: str
    :param name: Optional display name.
    :type name: str | None
    """

    email: str
    password: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh token (may be empty when absent).
    :type refresh_token: str | None
    """

    refresh_token: str | None


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    """
    Input DTO for an authenticated password change.

    :param user_id: Authenticated subject.
    :type user_id: str
    :param current_password: Password the caller claims to hold now.
    :type current_password: str
    :param new_password: Replacement password.
    :type new_password: str
    """

    user_id: str
    current_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class ResetPasswordIn:
    """
    Input DTO for a token-based password reset.

    :param token: Password-reset token from the emailed link.
    :type token: str
    :param new_password: Replacement password.
    :type new_password: str
    """

    token: str
    new_password: str


@dataclass(frozen=True, slots=True)
class VerifyEmailIn:
    """:param token: Email-verification token from the emailed link."""

    token: str | None


@dataclass(frozen=True, slots=True)
class ForgotPasswordIn:
    email: str


@dataclass(frozen=True, slots=True)
class ResendVerificationIn:
    email: str


# --------------------------- Output DTOs ---------------------------------- #


class RegisterStatus(StrEnum):
    PENDING_VERIFICATION = "pending_verification"
    LOGGED_IN = "logged_in"


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access and refresh tokens minted together at login.

    :param access: Short-lived access token.
    :type access: IssuedToken
    :param refresh: Long-lived refresh token carrying the revocation counter.
    :type refresh: IssuedToken
    """

    access: IssuedToken
    refresh: IssuedToken


@dataclass(frozen=True, slots=True)
class RegisterOut:
    """
    Registration outcome.

    ``tokens`` is set only when ``status`` is ``LOGGED_IN``.
    """

    status: RegisterStatus
    account: AccountOut
    tokens: TokenPair | None = None


@dataclass(frozen=True, slots=True)
class LoginOut:
    account: AccountOut
    tokens: TokenPair


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    """A fresh access token; the presented refresh token is not rotated."""

    access: IssuedToken
