"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

import re
from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate

PASSWORD_MAX_LENGTH = 128
_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")


class StrongPassword(validate.Validator):
    """Require a minimum length plus upper-case, lower-case and digit characters."""

    def __init__(self, min_length: int = 8) -> None:
        self.min_length = min_length
        self.error = (
            f"Password must be at least {min_length} chars, include upper, lower, number"
        )

    def __call__(self, value: str) -> str:
        if (
            len(value) < self.min_length
            or len(value) > PASSWORD_MAX_LENGTH
            or not _UPPER.search(value)
            or not _LOWER.search(value)
            or not _DIGIT.search(value)
        ):
            raise ValidationError(self.error)
        return value


class _TrimEmailMixin:
    """Trim and lowercase ``email`` before field validation."""

    @pre_load
    def _normalize_email(self, data: Any, **_: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = dict(data)
            data["email"] = data["email"].strip().lower()
        return data


class RegisterSchema(_TrimEmailMixin, Schema):
    """Input payload for account registration."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=StrongPassword(8))
    name = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=100))


class LoginSchema(_TrimEmailMixin, Schema):
    """Input payload for authenticating a user."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True, validate=validate.Length(min=1, max=PASSWORD_MAX_LENGTH)
    )


class EmailOnlySchema(_TrimEmailMixin, Schema):
    """Input payload for forgot-password and resend-verification."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=254))


class ResetPasswordSchema(Schema):
    """Input payload for completing a password reset."""

    class Meta:
        unknown = EXCLUDE

    token = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, validate=StrongPassword(8))


class ChangePasswordSchema(Schema):
    """Input payload for changing the password of the signed-in account."""

    class Meta:
        unknown = EXCLUDE

    current_password = fields.String(
        required=True,
        data_key="currentPassword",
        validate=validate.Length(min=1, max=PASSWORD_MAX_LENGTH),
    )
    new_password = fields.String(
        required=True, data_key="newPassword", validate=StrongPassword(6)
    )


class VerifyEmailQuerySchema(Schema):
    """Query string of ``GET /verify-email``."""

    class Meta:
        unknown = EXCLUDE

    token = fields.String(load_default=None)
