from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Literal, Protocol

MessageKind = Literal["verification", "reset"]


class DeliveryGateway(Protocol):
    """
    Outbound delivery of single-purpose links.

    Fire-and-forget from the caller's point of view: implementations may raise,
    and the session engine logs the failure instead of aborting its flow.
    """

    def send_verification_link(self, email: str, token: str) -> None:
        """Deliver an email-verification token to ``email``."""

    def send_reset_link(self, email: str, token: str) -> None:
        """Deliver a password-reset token to ``email``."""


@dataclass(frozen=True, slots=True)
class OutboxMessage:
    """
    Message captured by :class:`InMemoryDeliveryGateway`.

    :ivar kind: ``"verification"`` or ``"reset"``.
    :ivar email: Recipient.
    :ivar token: Raw token that would be embedded in the link.
    """

    kind: MessageKind
    email: str
    token: str


class InMemoryDeliveryGateway(DeliveryGateway):
    """Record deliveries in an outbox; optionally fail on demand."""

    def __init__(self, *, fail: bool = False) -> None:
        self.outbox: list[OutboxMessage] = []
        self.fail = fail
        self._lock = threading.Lock()

    def _push(self, kind: MessageKind, email: str, token: str) -> None:
        if self.fail:
            raise ConnectionError("delivery unavailable")
        with self._lock:
            self.outbox.append(OutboxMessage(kind=kind, email=email, token=token))

    def send_verification_link(self, email: str, token: str) -> None:
        self._push("verification", email, token)

    def send_reset_link(self, email: str, token: str) -> None:
        self._push("reset", email, token)

    def last(self, kind: MessageKind | None = None) -> OutboxMessage | None:
        """Return the newest message, optionally filtered by kind."""
        with self._lock:
            for message in reversed(self.outbox):
                if kind is None or message.kind == kind:
                    return message
        return None
