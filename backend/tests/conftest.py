"""Pytest fixtures configuring an isolated database and the service graph.

Each database-backed test gets a fresh schema on the in-memory SQLite
database, so rows committed by a unit of work never leak between cases.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest

from authcore.container import services
from authcore.core.config import TestingConfig
from authcore.core.extensions import db as _db
from authcore.factory import create_app
from authcore.infra.security import WerkzeugPasswordHasher
from authcore.services._shared.ports import (
    InMemoryDeliveryGateway,
    InMemoryUserStore,
    RecordingAttemptObserver,
)
from authcore.services.auth import SessionManager
from authcore.services.tokens import PurposeSecrets, TokenCodec, TokenIssuer

TEST_SECRETS = PurposeSecrets(
    access="unit-access-secret",
    refresh="unit-refresh-secret",
    email_verification="unit-email-secret",
    password_reset="unit-reset-secret",
)


class FrozenClock:
    """Manually advanced clock for token tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta) -> None:
        self.current = self.current + delta


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture()
def db(app):
    """Create the schema for one test and drop it afterwards."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(db):
    """Expose the Flask-SQLAlchemy session and wire it into Factory Boy."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(db.session)
    yield db.session
    SQLAlchemySession.set(None)


@pytest.fixture()
def client(app, db):
    """Flask test client backed by a fresh schema."""
    return app.test_client()


@pytest.fixture()
def outbox(app, monkeypatch) -> InMemoryDeliveryGateway:
    """Capture verification/reset links sent by the app's session manager."""
    gateway = InMemoryDeliveryGateway()
    with app.app_context():
        monkeypatch.setattr(services().session_manager, "delivery", gateway)
    return gateway


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- In-memory session engine ----------------------------------------------------


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher("pbkdf2:sha256:1000")


@pytest.fixture()
def issuer(clock) -> TokenIssuer:
    return TokenIssuer(TokenCodec(clock=clock), TEST_SECRETS)


@pytest.fixture()
def store(clock) -> InMemoryUserStore:
    return InMemoryUserStore(clock=clock)


@pytest.fixture()
def delivery() -> InMemoryDeliveryGateway:
    return InMemoryDeliveryGateway()


@pytest.fixture()
def observer() -> RecordingAttemptObserver:
    return RecordingAttemptObserver()


@pytest.fixture()
def manager(store, hasher, issuer, delivery, observer) -> SessionManager:
    """Session manager wired to in-memory doubles, verification required."""
    return SessionManager(
        store=store,
        hasher=hasher,
        issuer=issuer,
        delivery=delivery,
        require_verification=True,
        observer=observer,
    )
