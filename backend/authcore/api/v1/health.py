"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authcore.api.deps import json_response, timing
from authcore.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


def _redis_status() -> str:
    client = get_redis()
    if client is None:
        return "disabled"
    try:
        client.ping()
    except RedisError:
        current_app.logger.exception("healthcheck.redis_error")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and Redis health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    redis_status = _redis_status()
    version = current_app.config.get("APP_VERSION", "dev")

    healthy = db_status == "ok" and redis_status != "fail"
    payload = {
        "status": "ok" if healthy else "degraded",
        "db": db_status,
        "redis": redis_status,
        "version": version,
    }
    return json_response(payload, status=200 if healthy else 503)
