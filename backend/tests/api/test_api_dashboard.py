# tests/api/test_api_dashboard.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time

from tests.factories.user import DEFAULT_PASSWORD, UserFactory

DASHBOARD = "/api/v1/dashboard"


def _sign_in(client, session):
    user = UserFactory(email="admin@example.com")
    session.commit()
    res = client.post(
        "/api/v1/auth/login", json={"email": "admin@example.com", "password": DEFAULT_PASSWORD}
    )
    assert res.status_code == 200
    return user


@pytest.fixture()
def signed_in(client, session):
    return _sign_in(client, session)


def test_dashboard_requires_auth(client):
    for path in ("/stats", "/users/recent", "/users/growth", "/users/activity"):
        assert client.get(f"{DASHBOARD}{path}").status_code == 401


@freeze_time("2025-03-15 12:00:00")
def test_stats_and_growth(client, session):
    """
    GIVEN an admin created today plus accounts from two and sixty days ago
    WHEN stats and a three-day growth series are requested at a frozen instant
    THEN windows count by UTC calendar day and today is included
    """
    _sign_in(client, session)
    now = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)
    UserFactory(created_at=now - timedelta(days=2), email_verified=False)
    UserFactory(created_at=now - timedelta(days=60))
    session.commit()

    stats = client.get(f"{DASHBOARD}/stats").get_json()["data"]
    assert stats["total_users"] == 3
    assert stats["verified_users"] == 2
    assert stats["new_users_today"] == 1
    assert stats["new_users_week"] == 2
    assert stats["verification_rate"] == 67

    growth = client.get(f"{DASHBOARD}/users/growth", query_string={"days": 3}).get_json()["data"]
    assert growth == [
        {"date": "2025-03-13", "count": 1},
        {"date": "2025-03-14", "count": 0},
        {"date": "2025-03-15", "count": 1},
    ]


def test_recent_users_paging(client, session, signed_in):
    UserFactory.create_batch(3)
    session.commit()

    res = client.get(f"{DASHBOARD}/users/recent", query_string={"limit": 2, "offset": 1})
    data = res.get_json()["data"]

    assert res.status_code == 200
    assert data["total"] == 4
    assert data["limit"] == 2
    assert data["offset"] == 1
    assert len(data["users"]) == 2


@pytest.mark.parametrize("query", [{"limit": 0}, {"limit": 101}, {"offset": -1}])
def test_recent_users_rejects_bad_paging(client, signed_in, query):
    assert client.get(f"{DASHBOARD}/users/recent", query_string=query).status_code == 400


def test_activity(client, signed_in):
    data = client.get(f"{DASHBOARD}/users/activity").get_json()["data"]
    assert data == {"active_last_day": 1, "active_last_week": 1}
