"""Idempotent database seed helpers for local development environments."""

from __future__ import annotations

import logging
from typing import cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select
from sqlalchemy.orm import Session

from authcore.infra.security import WerkzeugPasswordHasher
from authcore.models.user import User

LOGGER = logging.getLogger(__name__)

DEMO_PASSWORD = "Password123!"

USER_FIXTURES: list[dict[str, str | bool | None]] = [
    {"email": "alice@example.com", "name": "Alice", "email_verified": True},
    {"email": "bob@example.com", "name": "Bob", "email_verified": True},
]


def _session(database: SQLAlchemy) -> Session:
    """Return the current SQLAlchemy session."""
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    """Update summary counters for the given table."""
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    if created:
        entry["created"] += 1
    else:
        entry["existing"] += 1


def seed_users(
    database: SQLAlchemy,
    *,
    hasher: WerkzeugPasswordHasher | None = None,
    verbose: bool = False,
) -> dict[str, dict[str, int]]:
    """Create the demo accounts; existing accounts keep their credentials."""
    if verbose:
        LOGGER.info("Seeding demo users...")
    hasher = hasher or WerkzeugPasswordHasher()
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    with session.begin():
        for fixture in USER_FIXTURES:
            email = str(fixture["email"]).strip().lower()
            user = session.execute(select(User).filter_by(email=email)).scalar_one_or_none()
            created = user is None
            if user is None:
                user = User(
                    email=email,
                    password_hash=hasher.hash(DEMO_PASSWORD),
                    token_version=0,
                )
                session.add(user)
            user.name = cast(str | None, fixture.get("name"))
            user.email_verified = bool(fixture.get("email_verified"))
            session.flush()
            _touch(summary, "users", created)
    return summary


def run_all(
    database: SQLAlchemy,
    *,
    hasher: WerkzeugPasswordHasher | None = None,
    verbose: bool = False,
) -> dict[str, dict[str, int]]:
    """Run all seeders."""
    if verbose:
        LOGGER.info("Running full seed pipeline...")
    return seed_users(database, hasher=hasher, verbose=verbose)


__all__ = ["DEMO_PASSWORD", "USER_FIXTURES", "run_all", "seed_users"]
