"""
DashboardService
================

Read-only account statistics for the dashboard. Every query runs inside a
read-only unit of work; all calendar boundaries are computed in UTC.
"""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime, timedelta

from authcore.models.base import as_utc
from authcore.models.user import User
from authcore.repositories.user import UserRepository
from authcore.services._shared.base import BaseService
from authcore.services._shared.dto import AccountOut, PageMeta
from authcore.services.dashboard.dto import (
    ActivityOut,
    DashboardStatsOut,
    GrowthPointOut,
    RecentUsersOut,
)

MAX_RECENT_LIMIT = 100
MAX_GROWTH_DAYS = 365


def _now(now: datetime | None) -> datetime:
    return as_utc(now) if now is not None else datetime.now(UTC)


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _account(user: User) -> AccountOut:
    return AccountOut(
        id=user.id,
        email=user.email,
        name=user.name,
        email_verified=user.email_verified,
        created_at=as_utc(user.created_at),
        updated_at=as_utc(user.updated_at),
    )


class DashboardService(BaseService):
    """Aggregate queries over the ``users`` table."""

    def stats(self, now: datetime | None = None) -> DashboardStatsOut:
        """
        Return totals and registration windows.

        :param now: Reference instant (defaults to the current UTC time).
        :type now: datetime | None
        :rtype: DashboardStatsOut
        """
        moment = _now(now)
        today = _start_of_day(moment)
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            total = repo.count()
            verified = repo.count_verified(True)
            new_today = repo.count_created_since(today)
            new_week = repo.count_created_since(moment - timedelta(days=7))
            new_month = repo.count_created_since(today.replace(day=1))

        rate = round(verified / total * 100) if total else 0
        return DashboardStatsOut(
            total_users=total,
            verified_users=verified,
            unverified_users=total - verified,
            new_users_today=new_today,
            new_users_week=new_week,
            new_users_month=new_month,
            verification_rate=rate,
        )

    def recent_users(self, limit: int = 10, offset: int = 0) -> RecentUsersOut:
        """Newest accounts first, with the overall total."""
        limit = min(max(1, int(limit)), MAX_RECENT_LIMIT)
        offset = max(0, int(offset))
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            users = [_account(u) for u in repo.recent(limit=limit, offset=offset)]
            total = repo.count()
        return RecentUsersOut(users=users, meta=PageMeta(limit=limit, offset=offset, total=total))

    def growth(self, days: int = 30, now: datetime | None = None) -> list[GrowthPointOut]:
        """
        Per-day registration counts for the last ``days`` days, today included.

        Days without registrations are present with a zero count.
        """
        days = min(max(1, int(days)), MAX_GROWTH_DAYS)
        first_day = _start_of_day(_now(now)) - timedelta(days=days - 1)
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            created = repo.created_at_since(first_day)

        per_day = Counter(as_utc(ts).date().isoformat() for ts in created)
        points: list[GrowthPointOut] = []
        for offset in range(days):
            key = (first_day + timedelta(days=offset)).date().isoformat()
            points.append(GrowthPointOut(date=key, count=per_day.get(key, 0)))
        return points

    def activity(self, now: datetime | None = None) -> ActivityOut:
        """Count accounts touched in the last 24 hours and in the last 7 days."""
        moment = _now(now)
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            last_day = repo.count_updated_since(moment - timedelta(hours=24))
            last_week = repo.count_updated_since(moment - timedelta(days=7))
        return ActivityOut(active_last_day=last_day, active_last_week=last_week)
