"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from authcore.api.cookies import access_cookie_name
from authcore.container import services

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def access_token_from_request() -> str | None:
    """Read the access token from ``Authorization: Bearer`` or the access cookie."""

    header = request.headers.get("Authorization", "")
    if header.lower().startswith(BEARER_PREFIX):
        token = header[len(BEARER_PREFIX) :].strip()
        if token:
            return token
    return request.cookies.get(access_cookie_name())


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token; stores ``g.user_id``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.user_id = services().session_manager.authenticate_access(access_token_from_request())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> str:
    """Return the subject authenticated by :func:`require_auth`."""

    return cast(str, g.user_id)


def auth_rate_limit() -> str:
    """Flask-Limiter expression for authentication endpoints."""

    return str(current_app.config.get("AUTH_RATE_LIMIT", "5 per minute"))
