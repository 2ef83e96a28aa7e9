"""Token transport over HttpOnly cookies."""

from __future__ import annotations

from flask import Response, current_app

from authcore.services.auth.dto import TokenPair
from authcore.services.tokens import IssuedToken, TokenPurpose


def _cookie_name(purpose: TokenPurpose) -> str:
    if purpose is TokenPurpose.REFRESH:
        return str(current_app.config.get("REFRESH_TOKEN_COOKIE", "refresh_token"))
    return str(current_app.config.get("ACCESS_TOKEN_COOKIE", "access_token"))


def _cookie_flags() -> dict:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("COOKIE_SECURE", False)),
        "samesite": current_app.config.get("COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def access_cookie_name() -> str:
    return _cookie_name(TokenPurpose.ACCESS)


def refresh_cookie_name() -> str:
    return _cookie_name(TokenPurpose.REFRESH)


def set_token_cookie(response: Response, issued: IssuedToken) -> Response:
    """Attach ``issued`` with ``Max-Age`` equal to its lifetime."""
    response.set_cookie(
        _cookie_name(issued.purpose),
        issued.token,
        max_age=int(issued.ttl.total_seconds()),
        **_cookie_flags(),
    )
    return response


def set_session_cookies(response: Response, tokens: TokenPair) -> Response:
    set_token_cookie(response, tokens.access)
    return set_token_cookie(response, tokens.refresh)


def clear_session_cookies(response: Response) -> Response:
    """Expire both token cookies with the flags they were set with."""
    for name in (access_cookie_name(), refresh_cookie_name()):
        response.delete_cookie(name, **_cookie_flags())
    return response
