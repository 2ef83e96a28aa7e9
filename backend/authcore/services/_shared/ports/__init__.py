"""
authcore.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) the session engine depends on.

These ports decouple the service layer from persistence, credential hashing,
outbound mail and throttling. Each module ships the Protocol together with an
in-memory double used by unit tests.

Modules
-------
- :mod:`user_store`:
    :class:`~.UserStore`, :class:`~.AccountRecord`, :class:`~.InMemoryUserStore`.
- :mod:`password_hasher`:
    :class:`~.PasswordHasher` (implemented by ``authcore.infra.security``).
- :mod:`delivery_gateway`:
    :class:`~.DeliveryGateway`, :class:`~.InMemoryDeliveryGateway`.
- :mod:`attempt_observer`:
    :class:`~.AuthAttempt`, :class:`~.AttemptObserver`, :class:`~.LoggingAttemptObserver`.

Concrete adapters live under ``authcore.infra``.
"""

from __future__ import annotations

from .attempt_observer import (
    AttemptObserver,
    AuthAttempt,
    LoggingAttemptObserver,
    RecordingAttemptObserver,
)
from .delivery_gateway import DeliveryGateway, InMemoryDeliveryGateway, OutboxMessage
from .password_hasher import PasswordHasher
from .user_store import AccountRecord, InMemoryUserStore, UserStore

__all__ = [
    "AccountRecord",
    "AttemptObserver",
    "AuthAttempt",
    "DeliveryGateway",
    "InMemoryDeliveryGateway",
    "InMemoryUserStore",
    "LoggingAttemptObserver",
    "OutboxMessage",
    "PasswordHasher",
    "RecordingAttemptObserver",
    "UserStore",
]
