from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol

AttemptKind = Literal["login", "refresh", "reset-password", "verify-email"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthAttempt:
    """
    Outcome of a single authentication attempt.

    :ivar kind: Flow that produced the attempt.
    :ivar key: Throttling key: the login email, or the token subject when known.
    :ivar succeeded: Whether the attempt was accepted.
    """

    kind: AttemptKind
    key: str | None
    succeeded: bool


class AttemptObserver(Protocol):
    """Hook for throttling collaborators; the session engine never throttles itself."""

    def record(self, attempt: AuthAttempt) -> None: ...


class LoggingAttemptObserver(AttemptObserver):
    """Default observer: one structured log line per attempt."""

    def record(self, attempt: AuthAttempt) -> None:
        level = logging.INFO if attempt.succeeded else logging.WARNING
        logger.log(
            level,
            "auth.attempt",
            extra={"attempt": attempt.kind, "succeeded": attempt.succeeded},
        )


class RecordingAttemptObserver(AttemptObserver):
    """Collect attempts in memory (tests)."""

    def __init__(self) -> None:
        self.attempts: list[AuthAttempt] = []

    def record(self, attempt: AuthAttempt) -> None:
        self.attempts.append(attempt)
