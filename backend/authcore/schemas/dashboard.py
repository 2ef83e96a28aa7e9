"""Dashboard query and response schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from authcore.schemas.user import AccountSchema


class RecentUsersQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(load_default=10, validate=validate.Range(min=1, max=100))
    offset = fields.Integer(load_default=0, validate=validate.Range(min=0))


class GrowthQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    days = fields.Integer(load_default=30, validate=validate.Range(min=1, max=365))


class DashboardStatsSchema(Schema):
    total_users = fields.Integer()
    verified_users = fields.Integer()
    unverified_users = fields.Integer()
    new_users_today = fields.Integer()
    new_users_week = fields.Integer()
    new_users_month = fields.Integer()
    verification_rate = fields.Integer()


class RecentUsersSchema(Schema):
    users = fields.List(fields.Nested(AccountSchema))
    total = fields.Integer(attribute="meta.total")
    limit = fields.Integer(attribute="meta.limit")
    offset = fields.Integer(attribute="meta.offset")


class GrowthPointSchema(Schema):
    date = fields.String()
    count = fields.Integer()


class ActivitySchema(Schema):
    active_last_day = fields.Integer()
    active_last_week = fields.Integer()
