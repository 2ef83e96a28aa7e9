"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    EmailOnlySchema,
    LoginSchema,
    RegisterSchema,
    ResetPasswordSchema,
    StrongPassword,
    VerifyEmailQuerySchema,
)
from .dashboard import (
    ActivitySchema,
    DashboardStatsSchema,
    GrowthPointSchema,
    GrowthQuerySchema,
    RecentUsersQuerySchema,
    RecentUsersSchema,
)
from .user import AccountSchema, ProfileUpdateSchema

__all__ = [
    "AccountSchema",
    "ActivitySchema",
    "ChangePasswordSchema",
    "DashboardStatsSchema",
    "EmailOnlySchema",
    "GrowthPointSchema",
    "GrowthQuerySchema",
    "LoginSchema",
    "ProfileUpdateSchema",
    "RecentUsersQuerySchema",
    "RecentUsersSchema",
    "RegisterSchema",
    "ResetPasswordSchema",
    "StrongPassword",
    "VerifyEmailQuerySchema",
]
