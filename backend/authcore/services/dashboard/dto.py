# authcore/services/dashboard/dto.py
from __future__ import annotations

from dataclasses import dataclass

from authcore.services._shared.dto import AccountOut, PageMeta


@dataclass(frozen=True, slots=True)
class DashboardStatsOut:
    """
    Account totals.

    :param total_users: All accounts.
    :param verified_users: Accounts with a verified email.
    :param unverified_users: ``total_users - verified_users``.
    :param new_users_today: Created since 00:00 UTC today.
    :param new_users_week: Created in the last 7 days.
    :param new_users_month: Created since the first day of the month (UTC).
    :param verification_rate: Verified share in percent, rounded; 0 without accounts.
    """

    total_users: int
    verified_users: int
    unverified_users: int
    new_users_today: int
    new_users_week: int
    new_users_month: int
    verification_rate: int


@dataclass(frozen=True, slots=True)
class RecentUsersOut:
    users: list[AccountOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class GrowthPointOut:
    """:param date: ISO calendar date (UTC). :param count: Accounts created that day."""

    date: str
    count: int


@dataclass(frozen=True, slots=True)
class ActivityOut:
    """Accounts updated in the last 24 hours and in the last 7 days."""

    active_last_day: int
    active_last_week: int
