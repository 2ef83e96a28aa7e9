"""Account and profile schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate, validates_schema


class AccountSchema(Schema):
    """Public representation of an account (never includes the credential)."""

    id = fields.String(required=True)
    email = fields.Email(required=True)
    name = fields.String(allow_none=True)
    email_verified = fields.Boolean(required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class ProfileUpdateSchema(Schema):
    """Partial profile update: ``name`` and/or ``email``. A null or blank ``name`` clears it."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(allow_none=True, validate=validate.Length(max=100))
    email = fields.Email(validate=validate.Length(max=254))

    @pre_load
    def _trim(self, data: Any, **_: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if isinstance(data.get("email"), str):
            data["email"] = data["email"].strip().lower()
        if "name" in data and data["name"] is None:
            data["name"] = ""
        if isinstance(data.get("name"), str):
            data["name"] = data["name"].strip()
        return data

    @validates_schema
    def _require_one(self, data: dict[str, Any], **_: Any) -> None:
        if not data:
            raise ValidationError("Provide at least one of: name, email.")
