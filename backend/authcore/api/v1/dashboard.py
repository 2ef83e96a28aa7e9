"""Dashboard endpoints: account statistics for signed-in users."""

from __future__ import annotations

from flask import Blueprint, request

from authcore.api.deps import json_response, require_auth, timing
from authcore.container import services
from authcore.schemas import (
    ActivitySchema,
    DashboardStatsSchema,
    GrowthPointSchema,
    GrowthQuerySchema,
    RecentUsersQuerySchema,
    RecentUsersSchema,
)

bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")

stats_schema = DashboardStatsSchema()
recent_query_schema = RecentUsersQuerySchema()
recent_schema = RecentUsersSchema()
growth_query_schema = GrowthQuerySchema()
growth_schema = GrowthPointSchema(many=True)
activity_schema = ActivitySchema()


@bp.before_request
@require_auth
def _authenticate() -> None:
    """Every dashboard route requires a valid access token."""


@bp.get("/stats")
@timing
def stats():
    return json_response({"data": stats_schema.dump(services().dashboard.stats())})


@bp.get("/users/recent")
@timing
def recent_users():
    query = recent_query_schema.load(request.args)
    result = services().dashboard.recent_users(limit=query["limit"], offset=query["offset"])
    return json_response({"data": recent_schema.dump(result)})


@bp.get("/users/growth")
@timing
def user_growth():
    query = growth_query_schema.load(request.args)
    points = services().dashboard.growth(days=query["days"])
    return json_response({"data": growth_schema.dump(points)})


@bp.get("/users/activity")
@timing
def user_activity():
    return json_response({"data": activity_schema.dump(services().dashboard.activity())})
