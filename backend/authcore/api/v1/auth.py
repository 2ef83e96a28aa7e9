"""Authentication endpoints backed by the session manager."""

from __future__ import annotations

from flask import Blueprint, request

from authcore.api.cookies import (
    clear_session_cookies,
    refresh_cookie_name,
    set_session_cookies,
    set_token_cookie,
)
from authcore.api.deps import auth_rate_limit, current_user_id, json_response, require_auth, timing
from authcore.container import services
from authcore.core.extensions import limiter
from authcore.schemas import (
    AccountSchema,
    ChangePasswordSchema,
    EmailOnlySchema,
    LoginSchema,
    ProfileUpdateSchema,
    RegisterSchema,
    ResetPasswordSchema,
    VerifyEmailQuerySchema,
)
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
from authcore.services.identity import ProfileUpdateIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
email_schema = EmailOnlySchema()
reset_schema = ResetPasswordSchema()
change_password_schema = ChangePasswordSchema()
profile_update_schema = ProfileUpdateSchema()
verify_query_schema = VerifyEmailQuerySchema()
account_schema = AccountSchema()

# Same body whether or not the email exists
FORGOT_MESSAGE = "If that email is registered, a reset link has been sent"
RESEND_MESSAGE = "If that email is registered and unverified, a verification link has been sent"


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.post("/register")
@limiter.limit(auth_rate_limit)
@timing
def register():
    """Create an account; logs it in directly when verification is skipped."""

    data = register_schema.load(_json_body())
    result = services().session_manager.register(RegisterIn(**data))
    body = {"data": {"status": result.status.value, "user": account_schema.dump(result.account)}}
    response = json_response(body, status=201)
    if result.status is RegisterStatus.LOGGED_IN and result.tokens is not None:
        set_session_cookies(response, result.tokens)
    return response


@bp.post("/login")
@limiter.limit(auth_rate_limit)
@timing
def login():
    """Authenticate credentials and set the access/refresh cookies."""

    data = login_schema.load(_json_body())
    result = services().session_manager.login(LoginIn(**data))
    response = json_response({"data": {"user": account_schema.dump(result.account)}})
    return set_session_cookies(response, result.tokens)


@bp.post("/refresh")
@limiter.limit(auth_rate_limit)
@timing
def refresh():
    """Mint a new access token from the refresh cookie (or ``refresh_token`` body field)."""

    token = request.cookies.get(refresh_cookie_name()) or _json_body().get("refresh_token")
    result = services().session_manager.refresh(RefreshIn(refresh_token=token))
    response = json_response({"data": {"message": "refreshed"}})
    return set_token_cookie(response, result.access)


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke every refresh token of the account and clear the cookies."""

    services().session_manager.logout(current_user_id())
    return clear_session_cookies(json_response({"data": {"message": "Logged out"}}))


@bp.get("/verify-email")
@timing
def verify_email():
    """Consume an email-verification token from the query string."""

    query = verify_query_schema.load(request.args)
    account = services().session_manager.verify_email(VerifyEmailIn(token=query["token"]))
    return json_response(
        {"data": {"message": "Email verified", "user": account_schema.dump(account)}}
    )


@bp.post("/resend-verification")
@limiter.limit(auth_rate_limit)
@timing
def resend_verification():
    data = email_schema.load(_json_body())
    services().session_manager.resend_verification(ResendVerificationIn(email=data["email"]))
    return json_response({"data": {"message": RESEND_MESSAGE}})


@bp.post("/forgot-password")
@limiter.limit(auth_rate_limit)
@timing
def forgot_password():
    data = email_schema.load(_json_body())
    services().session_manager.forgot_password(ForgotPasswordIn(email=data["email"]))
    return json_response({"data": {"message": FORGOT_MESSAGE}})


@bp.post("/reset-password")
@limiter.limit(auth_rate_limit)
@timing
def reset_password():
    """Replace the password using a reset token; every session is revoked."""

    data = reset_schema.load(_json_body())
    services().session_manager.reset_password(
        ResetPasswordIn(token=data["token"], new_password=data["password"])
    )
    return clear_session_cookies(json_response({"data": {"message": "Password has been reset"}}))


@bp.get("/profile")
@bp.get("/me", endpoint="me")
@require_auth
@timing
def profile():
    """Return the authenticated account."""

    account = services().identity.get_profile(current_user_id())
    return json_response({"data": {"user": account_schema.dump(account)}})


@bp.put("/profile")
@require_auth
@timing
def update_profile():
    data = profile_update_schema.load(_json_body())
    account = services().identity.update_profile(current_user_id(), ProfileUpdateIn(**data))
    return json_response({"data": {"user": account_schema.dump(account)}})


@bp.put("/change-password")
@require_auth
@limiter.limit(auth_rate_limit)
@timing
def change_password():
    """Replace the password after re-checking the current one; signs out everywhere."""

    data = change_password_schema.load(_json_body())
    services().session_manager.change_password(
        ChangePasswordIn(
            user_id=current_user_id(),
            current_password=data["current_password"],
            new_password=data["new_password"],
        )
    )
    return clear_session_cookies(json_response({"data": {"message": "Password changed"}}))
